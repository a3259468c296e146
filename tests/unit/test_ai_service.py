"""
Unit tests for HealthAssistantService.

The invoker is replaced with FakeInvoker so each test controls the exact
outcome of the Claude call and can inspect the prompt that was built.
"""

import asyncio
import json

import pytest

from app.services import heuristics
from app.services.ai_schemas import (
    FoodDescription,
    HealthProfile,
    ImageAttachment,
    SymptomReport,
)
from app.services.ai_service import (
    FOOD_IMAGE_LABEL,
    HealthAssistantService,
    get_health_assistant_service,
    heuristic_result,
)
from app.services.model_invoker import (
    InvocationSuccess,
    ModelInvoker,
    RateLimitError,
    RequestTimeoutError,
)


SYMPTOM_JSON = {
    "riskLevel": "Low",
    "possibleConditions": ["Common cold"],
    "recommendations": ["Rest"],
    "urgency": "Self-care",
}


# =============================================================================
# Model answered
# =============================================================================


class TestModelAnswers:
    @pytest.mark.asyncio
    async def test_chat_returns_completion(self, assistant_service, fake_invoker):
        fake_invoker.respond_with("Drink about 2 litres of water a day.")

        result = await assistant_service.generate_health_response("How much water?")

        assert result == "Drink about 2 litres of water a day."
        assert fake_invoker.prompts[0].kind == "free_text"

    @pytest.mark.asyncio
    async def test_emergency_returns_completion(self, assistant_service, fake_invoker):
        fake_invoker.respond_with("1. Call 112.")

        result = await assistant_service.generate_emergency_guidance("burn")

        assert result == "1. Call 112."

    @pytest.mark.asyncio
    async def test_symptoms_parses_json(self, assistant_service, fake_invoker):
        fake_invoker.respond_with(json.dumps(SYMPTOM_JSON))

        result = await assistant_service.analyze_symptoms("runny nose")

        assert result == SYMPTOM_JSON

    @pytest.mark.asyncio
    async def test_fenced_json_is_parsed(self, assistant_service, fake_invoker):
        fake_invoker.respond_with(f"```json\n{json.dumps(SYMPTOM_JSON)}\n```")

        result = await assistant_service.analyze_symptoms("runny nose")

        assert result == SYMPTOM_JSON

    @pytest.mark.asyncio
    async def test_health_plan_accepts_dict_profile(self, assistant_service, fake_invoker):
        fake_invoker.respond_with('{"healthScore": 90}')

        result = await assistant_service.generate_health_plan(
            {"age": "40", "activity_level": "High"}
        )

        assert result == {"healthScore": 90}
        assert "Activity Level: High" in fake_invoker.prompts[0].text

    @pytest.mark.asyncio
    async def test_health_plan_accepts_short_activity_key(
        self, assistant_service, fake_invoker
    ):
        fake_invoker.respond_with('{"healthScore": 90}')

        await assistant_service.generate_health_plan({"age": 40, "activity": "High"})

        assert "Age: 40" in fake_invoker.prompts[0].text
        assert "Activity Level: High" in fake_invoker.prompts[0].text

    @pytest.mark.asyncio
    async def test_prescription_sends_image(
        self, assistant_service, fake_invoker, sample_attachment
    ):
        fake_invoker.respond_with('{"confidence": "High"}')

        result = await assistant_service.analyze_prescription_image(sample_attachment)

        assert result == {"confidence": "High"}
        assert fake_invoker.prompts[0].image.media_type == "image/png"


# =============================================================================
# Fallbacks
# =============================================================================


class TestFallbacks:
    @pytest.mark.asyncio
    async def test_malformed_json_matches_failure_fallback(
        self, assistant_service, fake_invoker
    ):
        fake_invoker.respond_with('{"riskLevel": "High", "possibleConditions": [')
        malformed = await assistant_service.analyze_symptoms("chest pain")

        fake_invoker.fail_with(RateLimitError("Too many requests"))
        failed = await assistant_service.analyze_symptoms("chest pain")

        assert malformed == failed
        assert malformed["riskLevel"] == "High"
        assert "Call 112/911 immediately" in malformed["recommendations"]

    @pytest.mark.asyncio
    async def test_timeout_falls_back_for_text(self, assistant_service, fake_invoker):
        fake_invoker.fail_with(RequestTimeoutError("No response within 15.0s"))

        result = await assistant_service.generate_health_response("I have a headache")

        assert result == heuristics.health_response_fallback("I have a headache")

    @pytest.mark.asyncio
    async def test_medication_fallback(self, offline_service):
        result = await offline_service.analyze_medication(["Aspirin", "Metformin"])

        assert "Multiple medications increase interaction risk" in result["interactions"]
        assert any("1-2 hours apart" in advice for advice in result["timingAdvice"])

    @pytest.mark.asyncio
    async def test_health_plan_fallback_uses_camel_keys(self, offline_service):
        result = await offline_service.generate_health_plan(
            HealthProfile(age="60", goals="weight loss")
        )

        assert set(result) == {
            "dailyRecommendations",
            "weeklyGoals",
            "nutritionTips",
            "exerciseRoutine",
            "healthScore",
            "riskFactors",
            "preventiveCare",
        }
        assert any("screening" in item for item in result["preventiveCare"])

    @pytest.mark.asyncio
    async def test_emergency_fallback(self, offline_service):
        result = await offline_service.generate_emergency_guidance("kitchen burn")

        assert result.startswith("Emergency Guidance for: kitchen burn")
        assert "112" in result

    @pytest.mark.asyncio
    async def test_prescription_fallback(self, offline_service, sample_attachment):
        result = await offline_service.analyze_prescription_image(sample_attachment)

        assert result["confidence"] == "Low"
        assert result["medications"][0]["name"] == "Medication name unclear"

    @pytest.mark.asyncio
    async def test_food_fallback(self, offline_service):
        result = await offline_service.analyze_food(
            "peanut butter sandwich", allergies=["peanuts"]
        )

        assert "peanuts" in result["potentialAllergens"]
        assert result["allergyWarnings"][0].startswith("May contain peanuts")
        assert 0 <= result["healthScore"] <= 10

    @pytest.mark.asyncio
    async def test_image_only_food_fallback(self, offline_service, sample_attachment):
        result = await offline_service.analyze_food("", image=sample_attachment)

        assert result["nutrition"].startswith(f'Analysis for "{FOOD_IMAGE_LABEL}"')

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "method,args,keys",
        [
            (
                "analyze_symptoms",
                ("anything",),
                {"riskLevel", "possibleConditions", "recommendations", "urgency"},
            ),
            (
                "generate_health_plan",
                ({},),
                {
                    "dailyRecommendations",
                    "weeklyGoals",
                    "nutritionTips",
                    "exerciseRoutine",
                    "healthScore",
                    "riskFactors",
                    "preventiveCare",
                },
            ),
            (
                "analyze_medication",
                (["anything"],),
                {
                    "interactions",
                    "timingAdvice",
                    "sideEffects",
                    "foodRestrictions",
                    "reminders",
                },
            ),
            (
                "analyze_food",
                ("anything",),
                {
                    "nutrition",
                    "allergyWarnings",
                    "healthScore",
                    "recommendations",
                    "potentialAllergens",
                },
            ),
        ],
    )
    async def test_structured_features_offline_have_full_shape(
        self, offline_service, method, args, keys
    ):
        result = await getattr(offline_service, method)(*args)

        assert set(result) == keys

    @pytest.mark.asyncio
    async def test_prescription_offline_has_full_shape(
        self, offline_service, sample_attachment
    ):
        result = await offline_service.analyze_prescription_image(sample_attachment)

        assert set(result) == {
            "doctorName",
            "patientName",
            "date",
            "medications",
            "diagnosis",
            "warnings",
            "confidence",
        }
        assert set(result["medications"][0]) == {
            "name",
            "dosage",
            "frequency",
            "duration",
            "instructions",
        }

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "method", ["generate_health_response", "generate_emergency_guidance"]
    )
    async def test_text_features_offline_return_text(self, offline_service, method):
        result = await getattr(offline_service, method)("anything")

        assert isinstance(result, str)
        assert result.strip()

    @pytest.mark.asyncio
    async def test_numeric_age_profile_offline(self, offline_service):
        result = await offline_service.generate_health_plan(
            {"age": 60, "goals": "weight loss"}
        )

        assert any("screening" in item for item in result["preventiveCare"])


# =============================================================================
# Concurrency
# =============================================================================


class TestConcurrency:
    @pytest.mark.asyncio
    async def test_concurrent_requests_are_independent(self, fake_invoker):
        fake_invoker.delay = 0.01
        fake_invoker.responder = lambda prompt: InvocationSuccess(
            prompt.text.split("User question: ")[1].split("\n")[0]
        )
        service = HealthAssistantService(fake_invoker)
        questions = [f"question {i}" for i in range(10)]

        answers = await asyncio.gather(
            *(service.generate_health_response(q) for q in questions)
        )

        assert answers == questions


# =============================================================================
# Wiring
# =============================================================================


def test_heuristic_result_dispatch():
    image = ImageAttachment(data=b"x", media_type="image/png")

    assert heuristic_result(SymptomReport(symptoms="headache"))["riskLevel"] == "Low"
    assert heuristic_result(FoodDescription(food_item="", image=image))[
        "nutrition"
    ].startswith(f'Analysis for "{FOOD_IMAGE_LABEL}"')


def test_get_health_assistant_service_builds_invoker(monkeypatch):
    monkeypatch.setattr("app.services.model_invoker.create_anthropic_client", lambda: None)

    service = get_health_assistant_service()

    assert isinstance(service.invoker, ModelInvoker)
    assert service.invoker.client is None
