"""
Tests for email and phone normalization.
"""

import pytest

from app.services.identifiers import (
    Identifier,
    IdentifierKind,
    NormalizationError,
    PhoneNumberingPlan,
    classify,
    normalize,
    normalize_email,
    normalize_phone,
)

CANONICAL = '250781234567'


class TestPhoneNormalization:
    """Default Rwandan numbering plan: 250 / trunk 0 / 9-digit national numbers"""

    @pytest.mark.parametrize('raw', [
        '0781234567',
        '781234567',
        '+250781234567',
        '250781234567',
        '+250 78 123 4567',
        '(078) 123-4567',
    ])
    def test_regional_spellings_share_canonical_value(self, raw):
        assert normalize_phone(raw) == Identifier(IdentifierKind.PHONE, CANONICAL)

    def test_canonical_phone_is_unchanged(self):
        assert normalize_phone(CANONICAL).value == CANONICAL

    @pytest.mark.parametrize('national', ['781234567', '722000111', '790999888'])
    def test_trunk_prefix_equals_country_code(self, national):
        domestic = normalize_phone('0' + national)
        international = normalize_phone('250' + national)

        assert domestic == international

    @pytest.mark.parametrize('raw', [
        '0781234567',
        '+44 20 7123 4567',
        '1 (415) 555-0100',
        'Someone@Example.com',
    ])
    def test_normalization_is_idempotent(self, raw):
        once = normalize(raw)
        twice = normalize(once.value)

        assert once == twice

    def test_international_number_is_accepted_best_effort(self):
        assert normalize_phone('+44 20 7123 4567').value == '442071234567'

    def test_international_fallback_can_be_disabled(self):
        plan = PhoneNumberingPlan(allow_international=False)

        with pytest.raises(NormalizationError):
            normalize_phone('+44 20 7123 4567', plan)

        assert normalize_phone('0781234567', plan).value == CANONICAL

    @pytest.mark.parametrize('raw', [
        '',
        '   ',
        '---',
        '+',
        '12345',
        '581234567',          # national length but not a mobile prefix
        '1234567890123456',   # too long
    ])
    def test_invalid_phone_numbers(self, raw):
        with pytest.raises(NormalizationError) as exc_info:
            normalize_phone(raw)

        assert exc_info.value.field == 'phone'

    def test_non_string_is_rejected(self):
        with pytest.raises(NormalizationError):
            normalize_phone(None)

    def test_other_numbering_plan(self):
        plan = PhoneNumberingPlan(country_code='254', mobile_prefixes=('7', '1'))

        assert normalize_phone('0712345678', plan).value == '254712345678'
        assert normalize_phone('112345678', plan).value == '254112345678'

    def test_plan_from_config(self):
        plan = PhoneNumberingPlan.from_config({
            'PHONE_COUNTRY_CODE': '254',
            'PHONE_TRUNK_PREFIX': '0',
            'PHONE_NATIONAL_LENGTH': '9',
            'PHONE_MOBILE_PREFIXES': '7, 1',
            'PHONE_MIN_LENGTH': 11,
            'PHONE_MAX_LENGTH': 13,
            'PHONE_ALLOW_INTERNATIONAL': False,
        })

        assert plan.country_code == '254'
        assert plan.national_length == 9
        assert plan.mobile_prefixes == ('7', '1')
        assert plan.international_length == 12
        assert plan.domestic_length == 10
        assert plan.allow_international is False


class TestEmailNormalization:

    def test_email_is_trimmed_and_lowercased(self):
        identifier = normalize_email('  Jane.Doe@Example.COM ')

        assert identifier.kind is IdentifierKind.EMAIL
        assert identifier.value == 'jane.doe@example.com'
        assert identifier.field == 'email'

    @pytest.mark.parametrize('raw', ['a@b', '@example.com', 'jane@', 'jane doe@example.com', 'a@@b.com'])
    def test_invalid_email(self, raw):
        with pytest.raises(NormalizationError) as exc_info:
            normalize_email(raw)

        assert exc_info.value.field == 'email'

    def test_overlong_email(self):
        with pytest.raises(NormalizationError, match='too long'):
            normalize_email('a' * 250 + '@example.com')


class TestNormalize:

    def test_classify(self):
        assert classify('someone@example.com') is IdentifierKind.EMAIL
        assert classify('0781234567') is IdentifierKind.PHONE
        assert classify('not-an-email-or-phone!!') is IdentifierKind.PHONE
        assert classify(None) is IdentifierKind.PHONE

    def test_dispatches_on_shape(self):
        assert normalize('USER@example.com').kind is IdentifierKind.EMAIL
        assert normalize('0781234567').kind is IdentifierKind.PHONE

    def test_garbage_is_invalid(self):
        with pytest.raises(NormalizationError):
            normalize('not-an-email-or-phone!!')

    def test_empty_string_is_invalid(self):
        with pytest.raises(NormalizationError):
            normalize('')

    def test_expected_kind_mismatch(self):
        with pytest.raises(NormalizationError) as exc_info:
            normalize('someone@example.com', expected=IdentifierKind.PHONE)
        assert exc_info.value.field == 'phone'

        with pytest.raises(NormalizationError) as exc_info:
            normalize('0781234567', expected=IdentifierKind.EMAIL)
        assert exc_info.value.field == 'email'

    def test_invalid_email_reports_email_field(self):
        with pytest.raises(NormalizationError) as exc_info:
            normalize('broken@')

        assert exc_info.value.field == 'email'
