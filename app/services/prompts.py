"""
AI prompt templates for the HealthLink health assistant.

All prompts follow the same medical ethics guidelines:
- Give general information, never a diagnosis
- Recommend consulting a healthcare professional
- Structured features ask for JSON only, with a fixed key schema

build_prompt() is a pure function from an AnalysisRequest to the exact text
(and optional inline image) sent to the model.
"""

from dataclasses import dataclass
from typing import Optional

from app.services.ai_schemas import (
    AnalysisRequest,
    EmergencySituation,
    FoodDescription,
    FreeTextQuery,
    HealthProfile,
    MedicationList,
    PrescriptionImage,
    SymptomReport,
    TEXT_REQUEST_KINDS,
)


HEALTH_ASSISTANT_SYSTEM_PROMPT = """You are a helpful AI health assistant for the HealthLink platform.

GUIDELINES:
- Provide accurate, general health information
- Never present information as a diagnosis
- Always recommend consulting healthcare professionals for serious concerns
- When asked for JSON, return ONLY the JSON object, no prose"""

JSON_ONLY_FOOTER = "No additional text, just the JSON."

# =============================================================================
# FREE-TEXT CHAT
# =============================================================================

HEALTH_RESPONSE_TEMPLATE = """You are a helpful AI health assistant for HealthLink platform. Provide accurate, helpful health information while always recommending consulting healthcare professionals for serious concerns.

User question: {question}

Please provide a helpful response that:
1. Gives general health information
2. Suggests when to see a doctor
3. Includes appropriate disclaimers
4. Is concise and easy to understand
5. Keep response under 200 words"""

# =============================================================================
# SYMPTOM ANALYSIS
# =============================================================================

SYMPTOM_ANALYSIS_FORMAT = """{
  "riskLevel": "Low/Medium/High",
  "possibleConditions": ["condition1", "condition2", "condition3"],
  "recommendations": ["recommendation1", "recommendation2", "recommendation3"],
  "urgency": "description of when to seek care"
}"""

SYMPTOM_ANALYSIS_TEMPLATE = """As a medical AI assistant for HealthLink, analyze these symptoms and provide a structured JSON response. Always emphasize consulting healthcare professionals.

Symptoms: {symptoms}

Respond ONLY with valid JSON in this exact format:
{format}

{footer}"""

# =============================================================================
# PERSONALIZED HEALTH PLAN
# =============================================================================

HEALTH_PLAN_FORMAT = """{
  "dailyRecommendations": ["recommendation1", "recommendation2", "recommendation3"],
  "weeklyGoals": ["goal1", "goal2", "goal3"],
  "nutritionTips": ["tip1", "tip2", "tip3"],
  "exerciseRoutine": ["exercise1", "exercise2", "exercise3"],
  "healthScore": 85,
  "riskFactors": ["factor1", "factor2"],
  "preventiveCare": ["checkup1", "checkup2"]
}"""

HEALTH_PLAN_TEMPLATE = """Create a personalized health plan for HealthLink platform based on this user profile:

Age: {age}
Gender: {gender}
Health Goals: {goals}
Current Conditions: {conditions}
Activity Level: {activity_level}

healthScore is an integer from 0 to 100. Include a reminder to review the plan with a doctor before major lifestyle changes.

Respond ONLY with valid JSON in this exact format:
{format}

{footer}"""

# =============================================================================
# MEDICATION SAFETY
# =============================================================================

MEDICATION_ANALYSIS_FORMAT = """{
  "interactions": ["interaction1", "interaction2", "interaction3"],
  "timingAdvice": ["advice1", "advice2", "advice3"],
  "sideEffects": ["effect1", "effect2", "effect3"],
  "foodRestrictions": ["restriction1", "restriction2"],
  "reminders": ["reminder1", "reminder2", "reminder3"]
}"""

MEDICATION_ANALYSIS_TEMPLATE = """Analyze these medications for interactions and provide safety guidance:

Medications: {medications}

Respond ONLY with valid JSON in this exact format:
{format}

Focus on general medication safety and emphasize consulting pharmacists/doctors. {footer}"""

# =============================================================================
# EMERGENCY GUIDANCE
# =============================================================================

EMERGENCY_GUIDANCE_TEMPLATE = """Provide immediate emergency guidance for this situation:

Situation: {situation}

Provide step-by-step emergency instructions while emphasizing calling emergency services (112/911) for serious situations. Be clear, concise, and prioritize safety."""

# =============================================================================
# PRESCRIPTION OCR (vision)
# =============================================================================

PRESCRIPTION_EXTRACTION_FORMAT = """{
  "doctorName": "Doctor's name",
  "patientName": "Patient's name",
  "date": "Prescription date",
  "medications": [
    {
      "name": "Medication name",
      "dosage": "Dosage amount",
      "frequency": "How often to take",
      "duration": "How long to take",
      "instructions": "Special instructions"
    }
  ],
  "diagnosis": "Medical condition if mentioned",
  "warnings": ["Any warnings or precautions"],
  "confidence": "High/Medium/Low based on handwriting clarity"
}"""

PRESCRIPTION_EXTRACTION_TEMPLATE = """Analyze this handwritten medical prescription image and extract information in JSON format:

{format}

If text is unclear, indicate in confidence field. Always emphasize consulting the prescribing doctor.
{footer}"""

# =============================================================================
# NUTRITION & ALLERGY CHECK (optionally vision)
# =============================================================================

FOOD_ANALYSIS_TEMPLATE = """Analyze this food item for nutrition and allergies: "{food_item}"

User's known allergies: {allergies}

Please provide a detailed analysis including:
1. Nutritional information (calories per serving, protein, carbohydrates, fats, key vitamins/minerals)
2. Allergy warnings if any ingredients match user's allergies
3. Health score from 1-10 (10 being healthiest)
4. Recommendations for healthier alternatives or preparation methods
5. List of potential allergens present in this food

Format your response as a JSON object with these exact keys:
- nutrition: string (detailed nutritional breakdown)
- allergyWarnings: array of strings (specific warnings for user's allergies)
- healthScore: number (1-10)
- recommendations: array of strings (health recommendations, including a reminder to consult a nutritionist or doctor for personal advice)
- potentialAllergens: array of strings (all allergens that might be present)

Respond only with valid JSON, no additional text."""

FOOD_IMAGE_DESCRIPTION = "Analyze this food image for nutrition and allergies"


@dataclass(frozen=True)
class InlineImage:
    """Base64-encoded image sent alongside the prompt text."""

    media_type: str
    data: str


@dataclass(frozen=True)
class BuiltPrompt:
    kind: str
    text: str
    image: Optional[InlineImage] = None

    @property
    def expects_json(self) -> bool:
        return self.kind not in TEXT_REQUEST_KINDS


def _or_default(value: str, default: str) -> str:
    return value.strip() if value and value.strip() else default


def _free_text_prompt(request: FreeTextQuery) -> BuiltPrompt:
    return BuiltPrompt(
        kind=request.kind,
        text=HEALTH_RESPONSE_TEMPLATE.format(question=request.text),
    )


def _symptom_prompt(request: SymptomReport) -> BuiltPrompt:
    text = SYMPTOM_ANALYSIS_TEMPLATE.format(
        symptoms=request.symptoms,
        format=SYMPTOM_ANALYSIS_FORMAT,
        footer=JSON_ONLY_FOOTER,
    )
    return BuiltPrompt(kind=request.kind, text=text)


def _health_plan_prompt(request: HealthProfile) -> BuiltPrompt:
    text = HEALTH_PLAN_TEMPLATE.format(
        age=_or_default(request.age, "Not specified"),
        gender=_or_default(request.gender, "Not specified"),
        goals=_or_default(request.goals, "General wellness"),
        conditions=_or_default(request.conditions, "None specified"),
        activity_level=_or_default(request.activity_level, "Moderate"),
        format=HEALTH_PLAN_FORMAT,
        footer=JSON_ONLY_FOOTER,
    )
    return BuiltPrompt(kind=request.kind, text=text)


def _medication_prompt(request: MedicationList) -> BuiltPrompt:
    text = MEDICATION_ANALYSIS_TEMPLATE.format(
        medications=", ".join(request.medications),
        format=MEDICATION_ANALYSIS_FORMAT,
        footer=JSON_ONLY_FOOTER,
    )
    return BuiltPrompt(kind=request.kind, text=text)


def _emergency_prompt(request: EmergencySituation) -> BuiltPrompt:
    return BuiltPrompt(
        kind=request.kind,
        text=EMERGENCY_GUIDANCE_TEMPLATE.format(situation=request.situation),
    )


def _prescription_prompt(request: PrescriptionImage) -> BuiltPrompt:
    text = PRESCRIPTION_EXTRACTION_TEMPLATE.format(
        format=PRESCRIPTION_EXTRACTION_FORMAT,
        footer=JSON_ONLY_FOOTER,
    )
    image = InlineImage(
        media_type=request.image.media_type, data=request.image.to_base64()
    )
    return BuiltPrompt(kind=request.kind, text=text, image=image)


def _food_prompt(request: FoodDescription) -> BuiltPrompt:
    food_item = request.food_item
    if request.image is not None and not food_item.strip():
        food_item = FOOD_IMAGE_DESCRIPTION

    text = FOOD_ANALYSIS_TEMPLATE.format(
        food_item=food_item,
        allergies=", ".join(request.allergies) or "None specified",
    )

    image = None
    if request.image is not None:
        image = InlineImage(
            media_type=request.image.media_type, data=request.image.to_base64()
        )
    return BuiltPrompt(kind=request.kind, text=text, image=image)


_BUILDERS = {
    "free_text": _free_text_prompt,
    "symptoms": _symptom_prompt,
    "health_profile": _health_plan_prompt,
    "medications": _medication_prompt,
    "emergency": _emergency_prompt,
    "prescription": _prescription_prompt,
    "food": _food_prompt,
}


def build_prompt(request: AnalysisRequest) -> BuiltPrompt:
    """Render a request into the prompt text (and inline image) for the model."""
    return _BUILDERS[request.kind](request)
