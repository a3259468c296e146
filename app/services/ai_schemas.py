"""
Pydantic models for assistant requests and results.

Requests are a discriminated union on ``kind``; each variant maps to exactly one
prompt template in prompts.py. Result models use camelCase aliases so that
``model_dump(by_alias=True)`` produces the same keys the prompts ask the model
to emit.
"""

import base64
from typing import Annotated, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


RiskLevel = Literal["Low", "Medium", "High"]
Confidence = Literal["Low", "Medium", "High"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ImageAttachment(BaseModel):
    """Raw image bytes plus MIME type, as uploaded by the user."""

    data: bytes
    media_type: str = "image/jpeg"

    def to_base64(self) -> str:
        return base64.standard_b64encode(self.data).decode("utf-8")


# --- Requests ---


class FreeTextQuery(CamelModel):
    kind: Literal["free_text"] = "free_text"
    text: str


class SymptomReport(CamelModel):
    kind: Literal["symptoms"] = "symptoms"
    symptoms: str


class HealthProfile(CamelModel):
    # Form clients send age as a number and may shorten activityLevel
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, coerce_numbers_to_str=True
    )

    kind: Literal["health_profile"] = "health_profile"
    age: str = ""
    gender: str = ""
    goals: str = ""
    conditions: str = ""
    activity_level: str = Field(
        "",
        validation_alias=AliasChoices("activity_level", "activityLevel", "activity"),
        serialization_alias="activityLevel",
    )


class MedicationList(CamelModel):
    kind: Literal["medications"] = "medications"
    medications: list[str]


class EmergencySituation(CamelModel):
    kind: Literal["emergency"] = "emergency"
    situation: str


class FoodDescription(CamelModel):
    kind: Literal["food"] = "food"
    food_item: str
    allergies: list[str] = []
    image: Optional[ImageAttachment] = None


class PrescriptionImage(CamelModel):
    kind: Literal["prescription"] = "prescription"
    image: ImageAttachment


AnalysisRequest = Annotated[
    Union[
        FreeTextQuery,
        SymptomReport,
        HealthProfile,
        MedicationList,
        EmergencySituation,
        FoodDescription,
        PrescriptionImage,
    ],
    Field(discriminator="kind"),
]

# Variants whose answer is plain text rather than a JSON object
TEXT_REQUEST_KINDS = frozenset({"free_text", "emergency"})


# --- Results ---


class SymptomAnalysis(CamelModel):
    risk_level: RiskLevel
    possible_conditions: list[str]
    recommendations: list[str]
    urgency: str


class HealthPlan(CamelModel):
    daily_recommendations: list[str]
    weekly_goals: list[str]
    nutrition_tips: list[str]
    exercise_routine: list[str]
    health_score: int = Field(ge=0, le=100)
    risk_factors: list[str]
    preventive_care: list[str]


class MedicationAnalysis(CamelModel):
    interactions: list[str]
    timing_advice: list[str]
    side_effects: list[str]
    food_restrictions: list[str]
    reminders: list[str]


class FoodAnalysis(CamelModel):
    nutrition: str
    allergy_warnings: list[str]
    health_score: int = Field(ge=0, le=10)
    recommendations: list[str]
    potential_allergens: list[str]


class PrescribedMedication(CamelModel):
    name: str
    dosage: str
    frequency: str
    duration: str
    instructions: str


class PrescriptionExtraction(CamelModel):
    doctor_name: str
    patient_name: str
    date: str
    medications: list[PrescribedMedication]
    diagnosis: str
    warnings: list[str]
    confidence: Confidence
