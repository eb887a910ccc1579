"""Normalized clinical signals — the typed output of the Symptom Normalizer.

Everything downstream of the normalizer (engine, alert decision, storage)
works on these models, never on the raw webhook payload.  Values are
already clamped and defaulted, so consumers do not re-validate them.
"""

from pydantic import BaseModel, ConfigDict, Field

from postop_triage.models.enums import BleedingStatus


class NormalizedSignals(BaseModel):
    """Clamped, defaulted clinical signals extracted from one report.

    Absent or unparseable inputs map to the "no signal" value: ``0`` for
    numbers, ``False`` for flags, ``BleedingStatus.NONE`` for bleeding, and
    ``None`` for temperature.
    """

    model_config = ConfigDict(frozen=True)

    patient_id: str | None = None
    pain_scale: float = Field(default=0.0, ge=0.0, le=10.0)
    bleeding_status: BleedingStatus = BleedingStatus.NONE
    # None means "not reported"; a reported value is clamped to 30..45 °C
    temperature_c: float | None = None
    purulence: bool = False
    breathing_difficulty: bool = False
    days_post_op: float = Field(default=0.0, ge=0.0)
    # Lowercased, whitespace-collapsed free text
    free_text: str = ""


class PatientContext(BaseModel):
    """Contact and procedure details carried into staff alerts and storage.

    None of these fields influence the triage score.
    """

    model_config = ConfigDict(frozen=True)

    name: str = ""
    phone: str = ""
    email: str = ""
    procedure: str = ""
    images: tuple[str, ...] = ()
