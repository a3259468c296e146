"""
Unit tests for prompt construction.

build_prompt() is pure, so these tests check the rendered text and the inline
image directly.
"""
import base64

import pytest
from pydantic import TypeAdapter

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
from app.services.prompts import (
    FOOD_IMAGE_DESCRIPTION,
    HEALTH_PLAN_FORMAT,
    SYMPTOM_ANALYSIS_FORMAT,
    build_prompt,
)


class TestTextPrompts:
    def test_free_text_includes_question(self):
        prompt = build_prompt(FreeTextQuery(text="How much water should I drink?"))

        assert "User question: How much water should I drink?" in prompt.text
        assert "under 200 words" in prompt.text
        assert prompt.image is None
        assert prompt.expects_json is False

    def test_emergency_mentions_emergency_numbers(self):
        prompt = build_prompt(EmergencySituation(situation="Someone fainted"))

        assert "Situation: Someone fainted" in prompt.text
        assert "112/911" in prompt.text
        assert prompt.expects_json is False


class TestStructuredPrompts:
    def test_symptom_prompt_requests_json_schema(self):
        prompt = build_prompt(SymptomReport(symptoms="fever and cough"))

        assert "Symptoms: fever and cough" in prompt.text
        assert SYMPTOM_ANALYSIS_FORMAT in prompt.text
        assert "Respond ONLY with valid JSON" in prompt.text
        assert prompt.expects_json is True

    def test_health_plan_defaults_for_missing_fields(self):
        prompt = build_prompt(HealthProfile())

        assert "Age: Not specified" in prompt.text
        assert "Gender: Not specified" in prompt.text
        assert "Health Goals: General wellness" in prompt.text
        assert "Current Conditions: None specified" in prompt.text
        assert "Activity Level: Moderate" in prompt.text
        assert HEALTH_PLAN_FORMAT in prompt.text

    def test_health_plan_uses_profile_values(self):
        prompt = build_prompt(
            HealthProfile(age="42", goals="weight loss", activity_level="Low")
        )

        assert "Age: 42" in prompt.text
        assert "Health Goals: weight loss" in prompt.text
        assert "Activity Level: Low" in prompt.text

    def test_medication_prompt_joins_names(self):
        prompt = build_prompt(MedicationList(medications=["Aspirin", "Metformin"]))

        assert "Medications: Aspirin, Metformin" in prompt.text
        assert "pharmacists/doctors" in prompt.text

    def test_user_text_with_braces_is_not_formatted(self):
        prompt = build_prompt(SymptomReport(symptoms="rash shaped like {this}"))

        assert "rash shaped like {this}" in prompt.text


class TestImagePrompts:
    def test_prescription_prompt_attaches_base64_image(self):
        image = ImageAttachment(data=b"\x89PNG fake", media_type="image/png")

        prompt = build_prompt(PrescriptionImage(image=image))

        assert prompt.image is not None
        assert prompt.image.media_type == "image/png"
        assert base64.standard_b64decode(prompt.image.data) == b"\x89PNG fake"
        assert "handwritten medical prescription" in prompt.text

    def test_food_prompt_without_image(self):
        prompt = build_prompt(
            FoodDescription(food_item="peanut butter toast", allergies=["peanuts"])
        )

        assert 'nutrition and allergies: "peanut butter toast"' in prompt.text
        assert "User's known allergies: peanuts" in prompt.text
        assert prompt.image is None

    def test_food_prompt_no_allergies(self):
        prompt = build_prompt(FoodDescription(food_item="apple"))

        assert "User's known allergies: None specified" in prompt.text

    def test_food_prompt_image_only_uses_image_description(self):
        image = ImageAttachment(data=b"jpegbytes", media_type="image/jpeg")

        prompt = build_prompt(FoodDescription(food_item="", image=image))

        assert FOOD_IMAGE_DESCRIPTION in prompt.text
        assert prompt.image.media_type == "image/jpeg"


class TestRequestUnion:
    @pytest.mark.parametrize(
        "payload,expected_kind",
        [
            ({"kind": "free_text", "text": "hi"}, "free_text"),
            ({"kind": "symptoms", "symptoms": "cough"}, "symptoms"),
            ({"kind": "health_profile", "age": "30"}, "health_profile"),
            ({"kind": "medications", "medications": ["a"]}, "medications"),
            ({"kind": "emergency", "situation": "burn"}, "emergency"),
            ({"kind": "food", "foodItem": "rice"}, "food"),
        ],
    )
    def test_every_kind_builds_a_prompt(self, payload, expected_kind):
        request = TypeAdapter(AnalysisRequest).validate_python(payload)

        prompt = build_prompt(request)

        assert prompt.kind == expected_kind
        assert prompt.text
