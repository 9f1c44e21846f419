"""Pydantic schemas for the clinical analysis returned by the provider."""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictInt,
    StrictStr,
    field_validator,
)

LOW_MOOD_THRESHOLD = 3

SpeechLatency = Literal["normal", "high", "low"]
AffectType = Literal["full_range", "flat", "blunted", "labile"]
EyeContact = Literal["normal", "avoidant"]


class _Schema(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class RiskFlags(_Schema):
    suicidality_indicated: StrictBool
    self_harm_indicated: StrictBool
    severe_distress: StrictBool


class Biomarkers(_Schema):
    speech_latency: SpeechLatency
    affect_type: AffectType
    eye_contact: EyeContact


# Mental Status Examination


class MSEAppearance(_Schema):
    grooming: Literal["well_groomed", "disheveled", "unkempt", "bizarre"]
    dress: Literal["appropriate", "inappropriate", "disheveled", "bizarre"]
    hygiene: Literal["good", "fair", "poor"]
    posture: Literal["relaxed", "tense", "slumped", "rigid"]


class MSEBehavior(_Schema):
    psychomotor: Literal["normal", "retarded", "agitated", "catatonic"]
    eye_contact: Literal["appropriate", "avoidant", "intense", "absent"]
    cooperation: Literal["cooperative", "guarded", "hostile", "uncooperative"]
    movements: Literal["normal", "restless", "tremor", "tics", "stereotyped"]


class MSESpeech(_Schema):
    rate: Literal["normal", "slow", "rapid", "pressured"]
    volume: Literal["normal", "soft", "loud", "whispered"]
    tone: Literal["normal", "monotone", "tremulous", "angry"]
    latency: Literal["normal", "increased", "decreased"]
    spontaneity: Literal["spontaneous", "only_answers", "mute"]


class MSEMoodAffect(_Schema):
    reported_mood: Literal["euthymic", "depressed", "anxious", "irritable", "euphoric", "angry"]
    observed_affect: Literal["full_range", "flat", "blunted", "labile", "anxious", "irritable"]
    affect_range: Literal["full", "restricted", "flat"]
    congruence: Literal["congruent", "incongruent"]
    lability: Literal["stable", "labile"]


class MSEThoughtProcess(_Schema):
    organization: Literal["organized", "disorganized", "tangential", "circumstantial"]
    flow: Literal["goal_directed", "loose_associations", "flight_of_ideas", "thought_blocking"]


class MSEThoughtContent(_Schema):
    preoccupations: Literal["none", "health", "guilt", "religious", "somatic", "other"]
    hopelessness_expressed: StrictBool
    worthlessness_expressed: StrictBool


class MSECognition(_Schema):
    alertness: Literal["alert", "drowsy", "lethargic", "obtunded"]
    attention: Literal["intact", "impaired", "distractible"]
    estimated_insight: Literal["good", "fair", "poor", "absent"]
    estimated_judgment: Literal["good", "fair", "poor", "impaired"]


class MentalStatusExam(_Schema):
    """Extended MSE record; every section is required when the record is present."""

    appearance: MSEAppearance
    behavior: MSEBehavior
    speech: MSESpeech
    mood_affect: MSEMoodAffect
    thought_process: MSEThoughtProcess
    thought_content: MSEThoughtContent
    cognition: MSECognition


class ClinicalAnalysis(_Schema):
    """Validated clinical assessment of a single check-in video."""

    mood_score: Annotated[StrictInt, Field(ge=1, le=10)]
    risk_flags: RiskFlags
    biomarkers: Biomarkers
    clinical_summary: Annotated[StrictStr, Field(min_length=1, max_length=2000)]
    mse: MentalStatusExam | None = None

    @field_validator("mood_score", mode="before")
    @classmethod
    def _accept_integral_float(cls, value: object) -> object:
        # JSON 7.0 is the integer 7; 7.5, "7" and true still fail the strict check.
        if isinstance(value, float) and value.is_integer():
            return int(value)
        return value

    @field_validator("mse", mode="before")
    @classmethod
    def _reject_null_mse(cls, value: object) -> object:
        # Absent is fine; an explicit null is not an MSE record.
        if value is None:
            raise ValueError("mse must be an object when present")
        return value


def derive_risk_flag(analysis: ClinicalAnalysis) -> bool:
    """Return True when the check-in needs clinician attention."""
    flags = analysis.risk_flags
    return (
        flags.suicidality_indicated
        or flags.self_harm_indicated
        or flags.severe_distress
        or analysis.mood_score < LOW_MOOD_THRESHOLD
    )
