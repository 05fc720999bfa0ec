"""Identity resolution: registration, login and existence checks.

All three flows share one pipeline: raw strings are normalized into
canonical identifiers (see :mod:`app.services.identifiers`) and only the
canonical values ever reach the account store.

Failures are raised as :class:`IdentityError` subclasses. Each carries an
:class:`ErrorKind` and, where it applies, the offending ``field`` so the
HTTP layer can pick a status code without inspecting messages.
"""

import logging
from dataclasses import dataclass, field as dataclass_field
from enum import Enum

from app.services.identifiers import (
    DEFAULT_PLAN,
    IdentifierKind,
    NormalizationError,
    PhoneNumberingPlan,
    normalize,
)
from app.services.accounts import DuplicateAccountError
from app.utils.passwords import hash_password, verify_password

logger = logging.getLogger(__name__)

DUMMY_PASSWORD = 'not-a-real-password'


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class ErrorKind(Enum):
    MISSING_REQUIRED_FIELD = 'missing_required_field'
    MISSING_IDENTIFIER = 'missing_identifier'
    AMBIGUOUS_IDENTIFIER = 'ambiguous_identifier'
    INVALID_FORMAT = 'invalid_format'
    WEAK_PASSWORD = 'weak_password'
    IDENTIFIER_TAKEN = 'identifier_taken'
    INVALID_CREDENTIALS = 'invalid_credentials'
    MISSING_CREDENTIALS = 'missing_credentials'


class IdentityError(Exception):
    """Base class for terminal, input-dependent identity failures."""

    kind = None
    default_message = 'Invalid request'

    def __init__(self, message=None, field=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        self.field = field

    def to_dict(self):
        data = {'error': self.message, 'code': self.kind.value}
        if self.field:
            data['field'] = self.field
        return data


class MissingRequiredField(IdentityError):
    kind = ErrorKind.MISSING_REQUIRED_FIELD
    default_message = 'Missing required fields'


class MissingIdentifier(IdentityError):
    kind = ErrorKind.MISSING_IDENTIFIER
    default_message = 'Email or phone is required'


class AmbiguousIdentifier(IdentityError):
    kind = ErrorKind.AMBIGUOUS_IDENTIFIER
    default_message = 'Provide either an email or a phone number, not both'


class InvalidFormat(IdentityError):
    kind = ErrorKind.INVALID_FORMAT
    default_message = 'Invalid format'


class WeakPassword(IdentityError):
    kind = ErrorKind.WEAK_PASSWORD
    default_message = 'Password is too weak'


class IdentifierTaken(IdentityError):
    kind = ErrorKind.IDENTIFIER_TAKEN

    MESSAGES = {
        'email': 'Email already exists',
        'phone': 'Phone number already registered',
    }

    def __init__(self, field, fields=None):
        super().__init__(self.MESSAGES.get(field, 'Identifier already registered'), field=field)
        self.fields = tuple(fields or (field,))

    def to_dict(self):
        data = super().to_dict()
        data['fields'] = list(self.fields)
        return data


class InvalidCredentials(IdentityError):
    kind = ErrorKind.INVALID_CREDENTIALS
    default_message = 'Invalid credentials'

    def __init__(self):
        # No field: unknown account and wrong password must look the same
        super().__init__()


class MissingCredentials(IdentityError):
    kind = ErrorKind.MISSING_CREDENTIALS
    default_message = 'Password is required'


# ---------------------------------------------------------------------------
# Policy
# ---------------------------------------------------------------------------

class IdentifierRequirement(Enum):
    EITHER = 'either'    # at least one, both allowed
    ONE_OF = 'one_of'    # exactly one
    BOTH = 'both'        # email and phone both required


@dataclass(frozen=True)
class IdentifierPolicy:
    """Registration rules for identifiers and passwords."""

    requirement: IdentifierRequirement = IdentifierRequirement.EITHER
    min_password_length: int = 6
    max_password_length: int = 128
    max_name_length: int = 80

    @property
    def allow_both(self):
        return self.requirement is not IdentifierRequirement.ONE_OF

    @classmethod
    def from_config(cls, config):
        return cls(
            requirement=IdentifierRequirement(str(config.get('IDENTIFIER_POLICY', 'either')).lower()),
            min_password_length=int(config.get('PASSWORD_MIN_LENGTH', 6)),
            max_password_length=int(config.get('PASSWORD_MAX_LENGTH', 128)),
            max_name_length=int(config.get('NAME_MAX_LENGTH', 80)),
        )


@dataclass(frozen=True)
class RegistrationPlan:
    """Validated, normalized fields ready to become an account."""

    name: str
    email: str = None
    phone: str = None
    password_hash: str = dataclass_field(default=None, repr=False)

    @property
    def identifiers(self):
        return {k: v for k, v in (('email', self.email), ('phone', self.phone)) if v}

    def to_fields(self):
        return {
            'name': self.name,
            'email': self.email,
            'phone': self.phone,
            'password_hash': self.password_hash,
            'profile_complete': False,
        }


def _blank(value):
    return value is None or (isinstance(value, str) and not value.strip())


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------

class IdentityResolver:
    """Applies identifier policy on top of an account store.

    Args:
        store: object with ``find_by_email``, ``find_by_phone`` and ``create``
        plan: phone numbering plan used by the normalizer
        policy: registration rules
        hasher: ``hash(plaintext) -> digest``
        verifier: ``verify(plaintext, digest) -> bool``
        dummy: digest verified against when a login names no account
    """

    def __init__(self, store, plan=DEFAULT_PLAN, policy=None,
                 hasher=hash_password, verifier=verify_password, dummy=None):
        self.store = store
        self.plan = plan
        self.policy = policy or IdentifierPolicy()
        self.hasher = hasher
        self.verifier = verifier
        self._dummy = dummy

    @classmethod
    def from_config(cls, config, store, **kwargs):
        """Build a resolver from a Flask config mapping."""
        return cls(
            store,
            plan=PhoneNumberingPlan.from_config(config),
            policy=IdentifierPolicy.from_config(config),
            **kwargs
        )

    # -- helpers -------------------------------------------------------------

    def _find(self, identifier):
        if identifier.kind is IdentifierKind.EMAIL:
            return self.store.find_by_email(identifier.value)
        return self.store.find_by_phone(identifier.value)

    def _dummy_digest(self):
        if self._dummy is None:
            self._dummy = self.hasher(DUMMY_PASSWORD)
        return self._dummy

    def _check_password_strength(self, password):
        if len(password) < self.policy.min_password_length:
            raise WeakPassword(
                f'Password must be at least {self.policy.min_password_length} characters',
                field='password'
            )
        if len(password) > self.policy.max_password_length:
            raise WeakPassword(
                f'Password must be less than {self.policy.max_password_length} characters',
                field='password'
            )

    def _normalize(self, raw, expected=None):
        try:
            return normalize(raw, self.plan, expected=expected)
        except NormalizationError as e:
            raise InvalidFormat(str(e), field=e.field) from e

    # -- registration --------------------------------------------------------

    def resolve_for_registration(self, name, email_raw=None, phone_raw=None, password=None):
        """Validate a sign-up request and return a :class:`RegistrationPlan`.

        Checks run in a fixed order and stop at the first failure: required
        fields, identifier presence, identifier policy, password strength,
        identifier format, then uniqueness. Storage is only queried once every
        supplied identifier is well formed.
        """
        if _blank(name) or not isinstance(name, str) or not isinstance(password, str) or not password:
            raise MissingRequiredField()

        if len(name.strip()) > self.policy.max_name_length:
            raise InvalidFormat(
                f'Name must be less than {self.policy.max_name_length} characters',
                field='name'
            )

        has_email = not _blank(email_raw)
        has_phone = not _blank(phone_raw)

        if not has_email and not has_phone:
            raise MissingIdentifier()

        requirement = self.policy.requirement
        if requirement is IdentifierRequirement.BOTH and not (has_email and has_phone):
            missing = 'phone' if has_email else 'email'
            raise MissingIdentifier('Both email and phone are required', field=missing)
        if requirement is IdentifierRequirement.ONE_OF and has_email and has_phone:
            raise AmbiguousIdentifier()

        self._check_password_strength(password)

        identifiers = []
        format_errors = []
        for raw, kind in ((email_raw, IdentifierKind.EMAIL), (phone_raw, IdentifierKind.PHONE)):
            if _blank(raw):
                continue
            try:
                identifiers.append(self._normalize(raw, expected=kind))
            except InvalidFormat as e:
                format_errors.append(e)
        if format_errors:
            raise format_errors[0]

        # Advisory only; the unique index has the final word (see register)
        taken = [identifier.field for identifier in identifiers if self._find(identifier) is not None]
        if taken:
            logger.debug(f"Registration rejected, identifier taken: {', '.join(taken)}")
            raise IdentifierTaken(taken[0], fields=taken)

        fields = {identifier.field: identifier.value for identifier in identifiers}
        return RegistrationPlan(
            name=name.strip(),
            email=fields.get('email'),
            phone=fields.get('phone'),
            password_hash=self.hasher(password),
        )

    def register(self, name, email_raw=None, phone_raw=None, password=None):
        """Resolve a registration and create the account.

        A unique-index violation raised by the store (another registration
        won the race after our probe) is reported as :class:`IdentifierTaken`.
        """
        plan = self.resolve_for_registration(name, email_raw, phone_raw, password)
        try:
            account = self.store.create(**plan.to_fields())
        except DuplicateAccountError as e:
            field = e.field or next(iter(plan.identifiers), None)
            logger.warning(f"Registration lost uniqueness race on {field}")
            raise IdentifierTaken(field) from e

        logger.info(f"Account {account.id} registered via {', '.join(plan.identifiers)}")
        return account

    # -- login ---------------------------------------------------------------

    def resolve_for_login(self, identifier_raw=None, email_raw=None, phone_raw=None, password=None):
        """Return the account matching the identifier and password.

        The lookup key is taken from ``identifier`` first, then ``email``,
        then ``phone``; its shape alone decides email vs phone lookup.
        Unknown identifiers and wrong passwords both raise the same
        :class:`InvalidCredentials`, and a password check is performed in
        either case.
        """
        if not isinstance(password, str) or not password:
            raise MissingCredentials()

        raw = next((value for value in (identifier_raw, email_raw, phone_raw) if not _blank(value)), None)
        if raw is None:
            raise MissingIdentifier()

        identifier = self._normalize(raw)
        account = self._find(identifier)

        if account is None:
            self.verifier(password, self._dummy_digest())
            raise InvalidCredentials()

        if not self.verifier(password, account.password_hash):
            raise InvalidCredentials()

        return account

    # -- existence check -----------------------------------------------------

    def exists(self, identifier_raw):
        """Report whether an account uses ``identifier_raw``.

        Only the boolean and the identifier kind are returned.
        """
        if _blank(identifier_raw):
            raise MissingIdentifier()

        identifier = self._normalize(identifier_raw)
        return {
            'exists': self._find(identifier) is not None,
            'field': identifier.field,
        }
