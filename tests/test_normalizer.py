"""Symptom Normalizer tests — synonym resolution, coercion, and defaults.

The normalizer must never raise for a mapping input; every test here
either checks a coerced value or that garbage falls back to the
"no signal" default.
"""

import unicodedata

import pytest

from postop_triage.models.enums import BleedingStatus
from postop_triage.models.signals import NormalizedSignals, PatientContext
from postop_triage.normalizer import (
    extract_context,
    normalize,
    resolve,
    to_bleeding,
    to_flag,
    to_number,
)


# =====================================================================
# Defaults
# =====================================================================


class TestDefaults:

    def test_empty_report_yields_all_defaults(self):
        """{} normalizes to the no-signal record."""
        signals = normalize({})
        assert signals == NormalizedSignals()
        assert signals.pain_scale == 0
        assert signals.bleeding_status is BleedingStatus.NONE
        assert signals.temperature_c is None
        assert signals.free_text == ""

    def test_unrelated_keys_are_ignored(self):
        signals = normalize({"foo": "bar", "images": ["a.jpg"], "nested": {"pain": 9}})
        assert signals == NormalizedSignals()

    def test_non_mapping_nested_container_is_ignored(self):
        """A string under 'symptoms' must not break resolution."""
        signals = normalize({"symptoms": "đau", "pain": 4})
        assert signals.pain_scale == 4


# =====================================================================
# Synonym resolution
# =====================================================================


class TestResolution:

    def test_patient_id_synonyms(self):
        assert normalize({"patient_id": "P1"}).patient_id == "P1"
        assert normalize({"patientId": "P1"}).patient_id == "P1"
        assert normalize({"patient": "P1"}).patient_id == "P1"

    def test_numeric_patient_id_becomes_string(self):
        assert normalize({"patient_id": 12345}).patient_id == "12345"

    def test_flat_key_wins_over_nested(self):
        raw = {"pain": 3, "symptoms": {"pain_scale": 9}}
        assert normalize(raw).pain_scale == 3

    def test_symptoms_checked_before_postop(self):
        raw = {"symptoms": {"pain": 2}, "postop": {"pain": 6}}
        assert normalize(raw).pain_scale == 2

    def test_postop_container(self):
        raw = {"postop": {"temperature": "38,2"}}
        assert normalize(raw).temperature_c == pytest.approx(38.2)

    def test_blank_and_null_values_fall_through(self):
        """None and '' are treated as absent, so the next synonym wins."""
        raw = {"pain": "", "pain_scale": None, "painScale": 6}
        assert normalize(raw).pain_scale == 6

    def test_resolve_returns_none_when_absent(self):
        assert resolve({"a": 1}, ("b", "c")) is None

    def test_synonym_variants_normalize_identically(self):
        """camelCase + nested shape equals snake_case + flat shape."""
        flat = {
            "patient_id": "BN-42",
            "pain": 6,
            "bleeding": "present",
            "temp": 37.9,
            "pus": "yes",
            "days_postop": 5,
            "notes": "Vết mổ sưng",
        }
        nested = {
            "patientId": "BN-42",
            "daysPostop": "5",
            "symptoms": {
                "pain_scale": "6",
                "bleeding": "light",
                "fever": "37.9",
                "pus": "true",
                "notes": "vết mổ   sưng",
            },
        }
        assert normalize(flat) == normalize(nested)

    def test_dumped_signals_normalize_to_themselves(self):
        """Canonical field names are accepted as synonyms."""
        original = normalize({
            "patient": "P7",
            "pain_score": 8.5,
            "bleeding": "heavy",
            "temperature": 39.1,
            "purulence": 1,
            "dyspnea": "có",
            "days": 12,
            "message": "Khó thở khi nằm",
        })
        again = normalize(original.model_dump(mode="json"))
        assert again == original

    @pytest.mark.parametrize("bleeding", ["active", "light", "no"])
    def test_python_mode_dump_normalizes_to_itself(self, bleeding):
        """Enum members in a plain model_dump() keep their meaning."""
        original = normalize({"bleeding": bleeding, "pain": 2, "notes": "Sưng"})
        again = normalize(original.model_dump())
        assert again == original
        assert again.bleeding_status is original.bleeding_status


# =====================================================================
# Numeric coercion
# =====================================================================


class TestNumbers:

    @pytest.mark.parametrize("value,expected", [
        (7, 7.0),
        (7.5, 7.5),
        ("7", 7.0),
        ("7/10", 7.0),
        ("38,5 C", 38.5),
        ("  -2 ", -2.0),
    ])
    def test_to_number_parses(self, value, expected):
        assert to_number(value) == expected

    @pytest.mark.parametrize("value", [None, "abc", True, False, [], {}, float("nan"), float("inf")])
    def test_to_number_rejects(self, value):
        assert to_number(value) is None

    @pytest.mark.parametrize("value,expected", [
        (15, 10.0),
        (-3, 0.0),
        ("abc", 0.0),
        (True, 0.0),
        (8, 8.0),
    ])
    def test_pain_is_clamped(self, value, expected):
        assert normalize({"pain": value}).pain_scale == expected

    def test_days_are_never_negative(self):
        assert normalize({"days": -5}).days_post_op == 0
        assert normalize({"days": "3 ngày"}).days_post_op == 3

    def test_integer_beyond_float_range(self):
        """JSON integers are unbounded; oversized ones are dropped, not raised."""
        huge = 10**400
        assert to_number(huge) is None
        signals = normalize({"pain": huge, "pus": huge, "days": huge, "temp": huge})
        assert signals.pain_scale == 0
        assert signals.days_post_op == 0
        assert signals.temperature_c is None
        assert signals.purulence is True

    def test_temperature_absent_or_zero_is_none(self):
        assert normalize({"temp": 0}).temperature_c is None
        assert normalize({"temp": "không rõ"}).temperature_c is None
        assert normalize({"temp": ""}).temperature_c is None

    def test_temperature_is_clamped(self):
        assert normalize({"temp": 50}).temperature_c == 45.0
        assert normalize({"temp": 20}).temperature_c == 30.0
        assert normalize({"temp": "37.2°C"}).temperature_c == pytest.approx(37.2)


# =====================================================================
# Yes/no coercion
# =====================================================================


class TestFlags:

    @pytest.mark.parametrize("value,expected", [
        ("yes", BleedingStatus.ACTIVE),
        ("YES", BleedingStatus.ACTIVE),
        ("active", BleedingStatus.ACTIVE),
        ("true", BleedingStatus.ACTIVE),
        ("có", BleedingStatus.ACTIVE),
        (True, BleedingStatus.ACTIVE),
        ("light", BleedingStatus.PRESENT),
        ("present", BleedingStatus.PRESENT),
        ("ít", BleedingStatus.PRESENT),
        ("no", BleedingStatus.NONE),
        ("none", BleedingStatus.NONE),
        (False, BleedingStatus.NONE),
        (None, BleedingStatus.NONE),
        ("maybe?", BleedingStatus.NONE),
    ])
    def test_bleeding(self, value, expected):
        assert to_bleeding(value) is expected

    @pytest.mark.parametrize("value,expected", [
        ("yes", True),
        ("Y", True),
        ("TRUE", True),
        ("có", True),
        (1, True),
        (True, True),
        ("no", False),
        ("không", False),
        (0, False),
        (False, False),
        (None, False),
        ({"x": 1}, False),
    ])
    def test_flag(self, value, expected):
        assert to_flag(value) is expected

    @pytest.mark.parametrize("value,expected", [
        (2, True),
        ("2", True),
        (1.0, True),
        ("1.0", True),
        ("0,5", True),
        (0.0, False),
        ("0", False),
        (" 0.0 ", False),
        (float("nan"), False),
        (-10**400, True),
    ])
    def test_numbers_share_one_rule(self, value, expected):
        """Numbers and numeric strings mean "yes" when nonzero, for every field."""
        assert to_flag(value) is expected
        bleeding = BleedingStatus.ACTIVE if expected else BleedingStatus.NONE
        assert to_bleeding(value) is bleeding

    def test_bleeding_status_member_passes_through(self):
        for status in BleedingStatus:
            assert to_bleeding(status) is status

    def test_breathing_synonyms(self):
        assert normalize({"breathing_difficulty": "TRUE"}).breathing_difficulty is True
        assert normalize({"dyspnea": "có"}).breathing_difficulty is True
        assert normalize({"symptoms": {"breathingDifficulty": True}}).breathing_difficulty is True


# =====================================================================
# Free text
# =====================================================================


class TestFreeText:

    def test_lowercased_and_whitespace_collapsed(self):
        assert normalize({"notes": "  Đau   NHIỀU \n"}).free_text == "đau nhiều"

    def test_fields_are_concatenated_in_resolution_order(self):
        raw = {"notes": "Sưng", "symptoms": {"notes": "khó thở"}}
        assert normalize(raw).free_text == "sưng khó thở"

    def test_duplicate_text_is_kept_once(self):
        raw = {"notes": "abc", "description": "ABC"}
        assert normalize(raw).free_text == "abc"

    def test_decomposed_unicode_is_composed(self):
        """NFD input (common from some keyboards) is normalized to NFC."""
        decomposed = unicodedata.normalize("NFD", "Khó thở")
        assert normalize({"notes": decomposed}).free_text == "khó thở"


# =====================================================================
# Patient context
# =====================================================================


class TestContext:

    def test_context_fields(self):
        ctx = extract_context({
            "patient_name": "Nguyễn Văn A",
            "mobile": "0901234567",
            "email_address": "a@example.com",
            "procedure": "Cắt ruột thừa",
            "images": ["img1.jpg", "", "img2.jpg"],
        })
        assert ctx == PatientContext(
            name="Nguyễn Văn A",
            phone="0901234567",
            email="a@example.com",
            procedure="Cắt ruột thừa",
            images=("img1.jpg", "img2.jpg"),
        )

    def test_single_image_becomes_tuple(self):
        assert extract_context({"images": "wound.png"}).images == ("wound.png",)

    def test_empty_context(self):
        assert extract_context({}) == PatientContext()
