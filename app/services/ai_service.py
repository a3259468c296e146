"""
Claude AI integration for the HealthLink health assistant.

This service provides seven assistant features:
1. Free-text health chat
2. Symptom risk analysis
3. Personalized health plans
4. Medication safety analysis
5. Emergency first-aid guidance
6. Prescription OCR (vision)
7. Food nutrition & allergy check (optionally vision)

Every feature follows the same pipeline: build the prompt, make one Claude call,
then either parse the completion or fall back to the rule-based result from
heuristics.py. None of the public methods raise for AI-side failures; callers
always get a displayable result.
"""

from typing import Optional, Union

from app.services import heuristics
from app.services.ai_schemas import (
    AnalysisRequest,
    EmergencySituation,
    FoodDescription,
    FreeTextQuery,
    HealthProfile,
    ImageAttachment,
    MedicationList,
    PrescriptionImage,
    SymptomReport,
)
from app.services.model_invoker import ModelInvoker
from app.services.prompts import build_prompt
from app.services.result_normalizer import normalize_structured, normalize_text


FOOD_IMAGE_LABEL = "Food Image Analysis"


def heuristic_result(request: AnalysisRequest) -> Union[str, dict]:
    """Rule-based result for a request, in the same shape the model would return."""
    if request.kind == "free_text":
        return heuristics.health_response_fallback(request.text)
    if request.kind == "emergency":
        return heuristics.emergency_guidance_fallback(request.situation)
    if request.kind == "symptoms":
        result = heuristics.symptom_analysis_fallback(request.symptoms)
    elif request.kind == "health_profile":
        result = heuristics.health_plan_fallback(request)
    elif request.kind == "medications":
        result = heuristics.medication_analysis_fallback(request.medications)
    elif request.kind == "prescription":
        result = heuristics.prescription_extraction_fallback()
    elif request.kind == "food":
        food_item = request.food_item
        if request.image is not None and not food_item.strip():
            food_item = FOOD_IMAGE_LABEL
        result = heuristics.food_analysis_fallback(food_item, request.allergies)
    else:
        raise ValueError(f"Unknown request kind: {request.kind}")
    return result.model_dump(by_alias=True)


class HealthAssistantService:
    """Centralized Claude integration for all assistant features."""

    def __init__(self, invoker: ModelInvoker):
        self.invoker = invoker

    async def analyze(self, request: AnalysisRequest) -> Union[str, dict]:
        """
        Run one request through prompt -> Claude -> parse-or-fallback.

        Returns:
            str for free-text and emergency requests, otherwise a dict with the
            camelCase keys documented in the matching prompt template
        """
        prompt = build_prompt(request)
        outcome = await self.invoker.invoke(prompt)

        label = request.kind.replace("_", " ")
        if prompt.expects_json:
            return normalize_structured(
                outcome, lambda: heuristic_result(request), label
            )
        return normalize_text(outcome, lambda: heuristic_result(request), label)

    # =========================================================================
    # TEXT FEATURES
    # =========================================================================

    async def generate_health_response(self, prompt: str) -> str:
        """Answer a free-text health question (under 200 words, with disclaimer)."""
        return await self.analyze(FreeTextQuery(text=prompt))

    async def generate_emergency_guidance(self, situation: str) -> str:
        """Step-by-step first-aid guidance that always points to 112/911."""
        return await self.analyze(EmergencySituation(situation=situation))

    # =========================================================================
    # STRUCTURED FEATURES
    # =========================================================================

    async def analyze_symptoms(self, symptoms: str) -> dict:
        """
        Assess symptom risk.

        Returns:
            {
                "riskLevel": "Low" | "Medium" | "High",
                "possibleConditions": [...],
                "recommendations": [...],
                "urgency": "..."
            }
        """
        return await self.analyze(SymptomReport(symptoms=symptoms))

    async def generate_health_plan(self, profile: Union[HealthProfile, dict]) -> dict:
        """
        Build a personalized plan from age, gender, goals, conditions and activity.

        Returns:
            {
                "dailyRecommendations": [...],
                "weeklyGoals": [...],
                "nutritionTips": [...],
                "exerciseRoutine": [...],
                "healthScore": 0-100,
                "riskFactors": [...],
                "preventiveCare": [...]
            }
        """
        if isinstance(profile, dict):
            profile = HealthProfile.model_validate(profile)
        return await self.analyze(profile)

    async def analyze_medication(self, medications: list[str]) -> dict:
        """
        Interaction, timing, side-effect, food and reminder guidance.

        Returns:
            {
                "interactions": [...],
                "timingAdvice": [...],
                "sideEffects": [...],
                "foodRestrictions": [...],
                "reminders": [...]
            }
        """
        return await self.analyze(MedicationList(medications=list(medications)))

    async def analyze_prescription_image(self, image: ImageAttachment) -> dict:
        """
        Extract prescription details from a (possibly handwritten) photo.

        Returns:
            {
                "doctorName": str, "patientName": str, "date": str,
                "medications": [{"name", "dosage", "frequency", "duration", "instructions"}],
                "diagnosis": str,
                "warnings": [...],
                "confidence": "Low" | "Medium" | "High"
            }
        """
        return await self.analyze(PrescriptionImage(image=image))

    async def analyze_food(
        self,
        food_item: str,
        allergies: Optional[list[str]] = None,
        image: Optional[ImageAttachment] = None,
    ) -> dict:
        """
        Nutrition breakdown and allergy check for a food description or photo.

        Returns:
            {
                "nutrition": str,
                "allergyWarnings": [...],
                "healthScore": 0-10,
                "recommendations": [...],
                "potentialAllergens": [...]
            }
        """
        request = FoodDescription(
            food_item=food_item or "", allergies=list(allergies or []), image=image
        )
        return await self.analyze(request)


def get_health_assistant_service() -> HealthAssistantService:
    """Service wired to a Claude client built from settings."""
    return HealthAssistantService(ModelInvoker.from_settings())
