"""Identifier normalization for account emails and phone numbers.

Raw strings coming from registration, login and existence checks are
classified once (email or phone) and turned into a canonical
:class:`Identifier`. Everything downstream compares and stores canonical
values only.

Phone numbers are reduced to digits in international form, e.g. with the
default Rwandan plan ``0781234567``, ``781234567`` and ``+250 781 234 567``
all become ``250781234567``.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum

log = logging.getLogger(__name__)

# Email validation regex
EMAIL_REGEX = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')
EMAIL_MAX_LENGTH = 254

NON_DIGITS = re.compile(r'\D')


class IdentifierKind(Enum):
    EMAIL = 'email'
    PHONE = 'phone'


@dataclass(frozen=True)
class Identifier:
    """A canonical email address or phone number."""

    kind: IdentifierKind
    value: str

    @property
    def field(self):
        """Account column this identifier is stored in."""
        return self.kind.value

    def __str__(self):
        return self.value


class NormalizationError(ValueError):
    """Raised when a raw string cannot be turned into an identifier."""

    def __init__(self, message, field=None):
        super().__init__(message)
        self.field = field


@dataclass(frozen=True)
class PhoneNumberingPlan:
    """Regional constants used to canonicalize phone numbers."""

    country_code: str = '250'
    trunk_prefix: str = '0'
    national_length: int = 9
    mobile_prefixes: tuple = ('7',)
    min_length: int = 10
    max_length: int = 15
    allow_international: bool = True

    @property
    def international_length(self):
        return len(self.country_code) + self.national_length

    @property
    def domestic_length(self):
        return len(self.trunk_prefix) + self.national_length

    @classmethod
    def from_config(cls, config):
        """Build a plan from a Flask config mapping."""
        prefixes = config.get('PHONE_MOBILE_PREFIXES', '7')
        if isinstance(prefixes, str):
            prefixes = [p.strip() for p in prefixes.split(',')]
        return cls(
            country_code=str(config.get('PHONE_COUNTRY_CODE', '250')),
            trunk_prefix=str(config.get('PHONE_TRUNK_PREFIX', '0')),
            national_length=int(config.get('PHONE_NATIONAL_LENGTH', 9)),
            mobile_prefixes=tuple(p for p in prefixes if p),
            min_length=int(config.get('PHONE_MIN_LENGTH', 10)),
            max_length=int(config.get('PHONE_MAX_LENGTH', 15)),
            allow_international=bool(config.get('PHONE_ALLOW_INTERNATIONAL', True)),
        )


DEFAULT_PLAN = PhoneNumberingPlan()


def classify(raw):
    """Decide whether ``raw`` should be treated as an email or a phone number."""
    if isinstance(raw, str) and '@' in raw:
        return IdentifierKind.EMAIL
    return IdentifierKind.PHONE


def normalize_email(raw):
    """Trim, lowercase and validate an email address."""
    if not isinstance(raw, str):
        raise NormalizationError('Invalid email format', field='email')

    email = raw.strip().lower()
    if len(email) > EMAIL_MAX_LENGTH:
        raise NormalizationError('Email is too long', field='email')
    if not EMAIL_REGEX.match(email):
        raise NormalizationError('Invalid email format', field='email')

    return Identifier(IdentifierKind.EMAIL, email)


def normalize_phone(raw, plan=DEFAULT_PLAN):
    """Reduce a phone number to digits in international form.

    Rules, first match wins:

    1. already ``<country code><national number>`` -> unchanged
    2. ``<trunk prefix><national number>`` -> trunk prefix swapped for the
       country code
    3. bare national number starting with a mobile prefix -> country code
       prepended
    4. any other digit string within the plausible international length
       range -> accepted as-is (best effort, no regional massaging)
    """
    if not isinstance(raw, str):
        raise NormalizationError('Invalid phone number format', field='phone')

    digits = NON_DIGITS.sub('', raw)
    if not digits:
        raise NormalizationError('Invalid phone number format', field='phone')

    if digits.startswith(plan.country_code) and len(digits) == plan.international_length:
        return Identifier(IdentifierKind.PHONE, digits)

    if digits.startswith(plan.trunk_prefix) and len(digits) == plan.domestic_length:
        national = digits[len(plan.trunk_prefix):]
        return Identifier(IdentifierKind.PHONE, plan.country_code + national)

    if len(digits) == plan.national_length and digits.startswith(plan.mobile_prefixes):
        return Identifier(IdentifierKind.PHONE, plan.country_code + digits)

    if plan.allow_international and plan.min_length <= len(digits) <= plan.max_length:
        log.debug(f"Accepting phone number with {len(digits)} digits as international")
        return Identifier(IdentifierKind.PHONE, digits)

    raise NormalizationError('Invalid phone number format', field='phone')


def normalize(raw, plan=DEFAULT_PLAN, expected=None):
    """Classify ``raw`` and return its canonical :class:`Identifier`.

    Args:
        raw: user supplied string
        plan: phone numbering plan
        expected: when set, the raw value must have this shape (used for the
            dedicated ``email``/``phone`` registration fields)

    Raises:
        NormalizationError: the value is empty, malformed, or of the wrong
            kind for ``expected``
    """
    kind = classify(raw)
    field = expected.value if expected is not None else kind.value

    if expected is not None and kind is not expected:
        raise NormalizationError(f'Invalid {field} format', field=field)

    try:
        if kind is IdentifierKind.EMAIL:
            return normalize_email(raw)
        return normalize_phone(raw, plan)
    except NormalizationError as e:
        e.field = field
        raise
