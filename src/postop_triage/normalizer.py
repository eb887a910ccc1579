"""Symptom Normalizer — coerces a loosely-shaped webhook payload into signals.

Chatbots, form builders and clinic apps post the same report with different
key names (``patient_id`` / ``patientId`` / ``patient``), flat or nested
under ``symptoms`` / ``postop``, with numbers as strings and yes/no answers
in two languages.  This module is the only place that knows about those
variants; every other component works on :class:`NormalizedSignals`.

Resolution order for every field:
  1. each synonym key at the top level, in order
  2. each synonym key under ``symptoms``
  3. each synonym key under ``postop``

The first value that is not ``None`` and not an empty string wins.

Coercion is best-effort and never raises for a mapping input: unparseable
values fall back to the field's "no signal" default.
"""

from __future__ import annotations

import enum
import math
import re
import unicodedata
from typing import Any, Iterator, Mapping

from postop_triage.constants import (
    PAIN_MAX,
    PAIN_MIN,
    TEMPERATURE_MAX_C,
    TEMPERATURE_MIN_C,
)
from postop_triage.models.enums import BleedingStatus
from postop_triage.models.signals import NormalizedSignals, PatientContext

RawReport = Mapping[str, Any]

# --- Containers checked after the top level, in order ---
NESTED_KEYS: tuple[str, ...] = ("symptoms", "postop")

# --- Synonym keys per target field (first match wins) ---
# Each tuple also lists the NormalizedSignals field name itself so that a
# dumped signals record normalizes back to the same values.
PATIENT_ID_KEYS = ("patient_id", "patientId", "patient")
PAIN_KEYS = ("pain", "pain_scale", "painScale", "pain_score", "painScore")
BLEEDING_KEYS = ("bleeding", "bleeding_status", "bleedingStatus")
TEMPERATURE_KEYS = (
    "temp", "temperature", "temperature_c", "temperatureC", "fever",
)
PURULENCE_KEYS = ("pus", "purulence", "discharge")
BREATHING_KEYS = (
    "breathing_difficulty", "breathingDifficulty", "dyspnea",
    "shortness_of_breath", "breathing",
)
DAYS_KEYS = ("days_post_op", "days_postop", "daysPostop", "daysPostOp", "days")
FREE_TEXT_KEYS = (
    "free_text", "notes", "symptom_desc", "description", "message", "text",
)

# --- Context (non-scoring) keys ---
NAME_KEYS = ("patient_name", "name", "patientName")
PHONE_KEYS = ("phone", "phone_number", "mobile")
EMAIL_KEYS = ("email", "email_address")
PROCEDURE_KEYS = ("service", "procedure")
IMAGE_KEYS = ("images", "consented_images")

# --- Token sets for yes/no style answers (compared lowercased) ---
# Numbers and numeric strings never reach these sets; see _numeric_truth.
ACTIVE_BLEEDING_TOKENS = frozenset(
    {"active", "yes", "y", "true", "heavy", "có", "nhiều"}
)
PRESENT_BLEEDING_TOKENS = frozenset(
    {"present", "light", "mild", "little", "some", "spotting", "minor", "ít"}
)
AFFIRMATIVE_TOKENS = frozenset(
    {"yes", "y", "true", "active", "present", "có"}
)

_NUMBER_RE = re.compile(r"[-+]?\d+(?:[.,]\d+)?")
_WHITESPACE_RE = re.compile(r"\s+")


# ------------------------------------------------------------------
# Field resolution
# ------------------------------------------------------------------

def _is_present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str) and not value.strip():
        return False
    return True


def _candidates(raw: RawReport, keys: tuple[str, ...]) -> Iterator[Any]:
    """Yield present values for *keys*: flat first, then each nested container."""
    for key in keys:
        value = raw.get(key)
        if _is_present(value):
            yield value
    for container_key in NESTED_KEYS:
        nested = raw.get(container_key)
        if not isinstance(nested, Mapping):
            continue
        for key in keys:
            value = nested.get(key)
            if _is_present(value):
                yield value


def resolve(raw: RawReport, keys: tuple[str, ...]) -> Any:
    """Return the first present value for *keys*, or ``None``."""
    return next(_candidates(raw, keys), None)


# ------------------------------------------------------------------
# Coercion helpers
# ------------------------------------------------------------------

def to_number(value: Any) -> float | None:
    """Parse *value* as a finite float, or return ``None``.

    Strings yield their first number, so ``"38,5 C"`` → ``38.5`` and
    ``"7/10"`` → ``7.0``.  Booleans are not treated as numbers.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            # JSON integers are unbounded; anything past float range is noise
            return None
    elif isinstance(value, str):
        match = _NUMBER_RE.search(value)
        if match is None:
            return None
        number = float(match.group().replace(",", "."))
    else:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def _token(value: Any) -> str:
    if isinstance(value, enum.Enum):
        value = value.value
    return unicodedata.normalize("NFC", str(value)).strip().lower()


def _numeric_truth(value: Any) -> bool | None:
    """Nonzero test shared by every yes/no field.

    Numbers and numeric strings (``2``, ``"2"``, ``1.0``, ``"0,0"``) answer
    "yes" when nonzero.  Returns ``None`` when *value* is not numeric.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value != 0
    if isinstance(value, float):
        return value != 0 and not math.isnan(value)
    if isinstance(value, str):
        text = value.strip()
        if _NUMBER_RE.fullmatch(text):
            return float(text.replace(",", ".")) != 0
    return None


def to_bleeding(value: Any) -> BleedingStatus:
    """Map a bleeding answer onto :class:`BleedingStatus`.

    A nonzero number means active bleeding, zero means none.
    """
    if value is None:
        return BleedingStatus.NONE
    if isinstance(value, BleedingStatus):
        return value
    if isinstance(value, bool):
        return BleedingStatus.ACTIVE if value else BleedingStatus.NONE
    numeric = _numeric_truth(value)
    if numeric is not None:
        return BleedingStatus.ACTIVE if numeric else BleedingStatus.NONE
    token = _token(value)
    if token in ACTIVE_BLEEDING_TOKENS:
        return BleedingStatus.ACTIVE
    if token in PRESENT_BLEEDING_TOKENS:
        return BleedingStatus.PRESENT
    return BleedingStatus.NONE


def to_flag(value: Any) -> bool:
    """Map a yes/no style answer onto a boolean; anything unknown is ``False``."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    numeric = _numeric_truth(value)
    if numeric is not None:
        return numeric
    return _token(value) in AFFIRMATIVE_TOKENS


def to_text(value: Any) -> str:
    """Collapse whitespace, NFC-normalize, and lowercase a text value."""
    if value is None:
        return ""
    text = unicodedata.normalize("NFC", str(value))
    return _WHITESPACE_RE.sub(" ", text).strip().lower()


def _to_temperature(value: Any) -> float | None:
    number = to_number(value)
    if number is None or number <= 0:
        return None
    return clamp(number, TEMPERATURE_MIN_C, TEMPERATURE_MAX_C)


def _to_patient_id(value: Any) -> str | None:
    if value is None or isinstance(value, (dict, list)):
        return None
    text = str(value).strip()
    return text or None


def _free_text(raw: RawReport) -> str:
    """Join every distinct free-text field, in resolution order."""
    parts: list[str] = []
    for value in _candidates(raw, FREE_TEXT_KEYS):
        if isinstance(value, (dict, list)):
            continue
        text = to_text(value)
        if text and text not in parts:
            parts.append(text)
    return " ".join(parts)


# ------------------------------------------------------------------
# Public API
# ------------------------------------------------------------------

def normalize(raw: RawReport) -> NormalizedSignals:
    """Extract clamped, defaulted clinical signals from a raw report.

    Never raises for a mapping input; an empty mapping yields all defaults.
    """
    pain = to_number(resolve(raw, PAIN_KEYS))
    days = to_number(resolve(raw, DAYS_KEYS))

    return NormalizedSignals(
        patient_id=_to_patient_id(resolve(raw, PATIENT_ID_KEYS)),
        pain_scale=clamp(pain or 0.0, PAIN_MIN, PAIN_MAX),
        bleeding_status=to_bleeding(resolve(raw, BLEEDING_KEYS)),
        temperature_c=_to_temperature(resolve(raw, TEMPERATURE_KEYS)),
        purulence=to_flag(resolve(raw, PURULENCE_KEYS)),
        breathing_difficulty=to_flag(resolve(raw, BREATHING_KEYS)),
        days_post_op=max(days or 0.0, 0.0),
        free_text=_free_text(raw),
    )


def extract_context(raw: RawReport) -> PatientContext:
    """Pull contact and procedure details used by alerts and storage."""

    def _str(keys: tuple[str, ...]) -> str:
        value = resolve(raw, keys)
        if value is None or isinstance(value, (dict, list)):
            return ""
        return str(value).strip()

    images = resolve(raw, IMAGE_KEYS)
    if isinstance(images, (list, tuple)):
        image_refs = tuple(str(i) for i in images if _is_present(i))
    elif _is_present(images) and not isinstance(images, Mapping):
        image_refs = (str(images),)
    else:
        image_refs = ()

    return PatientContext(
        name=_str(NAME_KEYS),
        phone=_str(PHONE_KEYS),
        email=_str(EMAIL_KEYS),
        procedure=_str(PROCEDURE_KEYS),
        images=image_refs,
    )
