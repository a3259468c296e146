"""
Rule-based fallback results used whenever the model path is unavailable.

Each request kind has its own static rule table. Keyword matching is
case-insensitive; where a table is ordered, the first matching rule wins and a
generic default covers the no-match case. Every function returns a fully
populated result so callers never need to know whether Claude answered.
"""

import re
from typing import NamedTuple, Optional

from app.services.ai_schemas import (
    FoodAnalysis,
    HealthPlan,
    HealthProfile,
    MedicationAnalysis,
    PrescribedMedication,
    PrescriptionExtraction,
    SymptomAnalysis,
)


class KeywordRule(NamedTuple):
    """Matches when any of ``any_of`` and all of ``all_of`` occur in the text."""

    any_of: tuple
    all_of: tuple = ()

    def matches(self, text: str) -> bool:
        return any(k in text for k in self.any_of) and all(
            k in text for k in self.all_of
        )


def _first_match(text: str, table: tuple):
    lowered = text.lower()
    for rule, result in table:
        if rule.matches(lowered):
            return result
    return None


# =============================================================================
# FREE-TEXT CHAT
# =============================================================================

HEALTH_RESPONSE_RULES = (
    (
        KeywordRule(("headache", "migraine")),
        "Headaches can have various causes including stress, dehydration, or tension. "
        "Try resting in a quiet, dark room, staying hydrated, and applying a cold compress. "
        "Over-the-counter pain relievers like ibuprofen or acetaminophen may help. "
        "If headaches are severe, frequent, or accompanied by other symptoms like vision "
        "changes or fever, consult a healthcare professional immediately.",
    ),
    (
        KeywordRule(("fever", "temperature")),
        "Fever is your body's natural response to infection. Stay hydrated with water and "
        "clear fluids, rest, and monitor your temperature regularly. Seek medical attention "
        "if fever exceeds 103°F (39.4°C), persists for more than 3 days, or is accompanied "
        "by severe symptoms like difficulty breathing, chest pain, or persistent vomiting.",
    ),
    (
        KeywordRule(("cough", "cold", "sore throat")),
        "For cold and cough symptoms, try warm liquids like tea with honey, use a humidifier, "
        "and get plenty of rest. Gargle with warm salt water for sore throat relief. Most "
        "colds resolve within 7-10 days. Consult a doctor if symptoms worsen, persist beyond "
        "10 days, or if you develop high fever, difficulty breathing, or severe throat pain.",
    ),
    (
        KeywordRule(("stomach", "nausea", "vomit")),
        "For stomach issues, try the BRAT diet (bananas, rice, applesauce, toast), stay "
        "hydrated with small sips of clear fluids, and avoid dairy and fatty foods. Rest and "
        "avoid solid foods until nausea subsides. Seek medical care if you experience severe "
        "dehydration, blood in vomit/stool, or symptoms persist beyond 24-48 hours.",
    ),
    (
        KeywordRule(("diet", "nutrition", "weight")),
        "A balanced diet includes plenty of fruits, vegetables, whole grains, lean proteins, "
        "and healthy fats. Aim for 5-9 servings of fruits and vegetables daily, stay hydrated, "
        "and limit processed foods and added sugars. For weight management, focus on portion "
        "control and regular physical activity. Consult a nutritionist or healthcare provider "
        "for personalized dietary advice.",
    ),
    (
        KeywordRule(("exercise", "workout", "fitness")),
        "Regular exercise is crucial for overall health. Aim for at least 150 minutes of "
        "moderate aerobic activity or 75 minutes of vigorous activity weekly, plus strength "
        "training twice a week. Start slowly if you're new to exercise and gradually increase "
        "intensity. Always warm up before and cool down after workouts. Consult your doctor "
        "before starting a new exercise program, especially if you have health conditions.",
    ),
    (
        KeywordRule(("sleep", "insomnia", "tired")),
        "Good sleep hygiene is essential for health. Aim for 7-9 hours of sleep nightly, "
        "maintain a consistent sleep schedule, and create a relaxing bedtime routine. Avoid "
        "caffeine, large meals, and screens before bedtime. Keep your bedroom cool, dark, and "
        "quiet. If you consistently have trouble sleeping or feel tired despite adequate "
        "sleep, consult a healthcare professional.",
    ),
)

DEFAULT_HEALTH_RESPONSE = (
    "Thank you for your health question. While I can provide general health information, "
    "it's important to consult with a qualified healthcare professional for personalized "
    "medical advice, proper diagnosis, and treatment recommendations. They can evaluate your "
    "specific situation and provide the most appropriate care for your needs."
)


def health_response_fallback(question: str) -> str:
    return _first_match(question, HEALTH_RESPONSE_RULES) or DEFAULT_HEALTH_RESPONSE


# =============================================================================
# SYMPTOM ANALYSIS
# =============================================================================

SYMPTOM_RULES = (
    (
        KeywordRule(("chest pain", "difficulty breathing", "severe headache")),
        SymptomAnalysis(
            risk_level="High",
            possible_conditions=[
                "Cardiac Event",
                "Respiratory Emergency",
                "Severe Hypertension",
            ],
            recommendations=[
                "Seek immediate emergency medical attention",
                "Call 112/911 immediately",
                "Do not drive yourself to hospital",
                "Stay calm and rest until help arrives",
            ],
            urgency="EMERGENCY - Seek immediate medical attention",
        ),
    ),
    (
        KeywordRule(("cough", "sore throat"), all_of=("fever",)),
        SymptomAnalysis(
            risk_level="Medium",
            possible_conditions=[
                "Viral Upper Respiratory Infection",
                "Bacterial Infection",
                "Flu",
            ],
            recommendations=[
                "Rest and stay well hydrated",
                "Monitor temperature regularly",
                "Use throat lozenges for sore throat",
                "Consider over-the-counter fever reducers",
            ],
            urgency="Monitor symptoms, see doctor if fever persists >3 days or worsens",
        ),
    ),
    (
        KeywordRule(("headache", "fatigue")),
        SymptomAnalysis(
            risk_level="Low",
            possible_conditions=[
                "Tension Headache",
                "Dehydration",
                "Stress",
                "Sleep Deprivation",
            ],
            recommendations=[
                "Ensure adequate hydration",
                "Get sufficient rest and sleep",
                "Practice stress management techniques",
                "Consider over-the-counter pain relief if needed",
            ],
            urgency="Self-care measures, see doctor if symptoms persist or worsen",
        ),
    ),
)

DEFAULT_SYMPTOM_ANALYSIS = SymptomAnalysis(
    risk_level="Medium",
    possible_conditions=["Viral Infection", "Minor Illness", "Stress-Related Symptoms"],
    recommendations=[
        "Rest and stay hydrated",
        "Monitor symptoms for 24-48 hours",
        "Practice good hygiene",
        "Consider over-the-counter remedies as appropriate",
    ],
    urgency="Monitor symptoms, consult healthcare provider if concerned or symptoms worsen",
)


def symptom_analysis_fallback(symptoms: str) -> SymptomAnalysis:
    result = _first_match(symptoms, SYMPTOM_RULES) or DEFAULT_SYMPTOM_ANALYSIS
    # Rule tables are shared module data; hand out a copy
    return result.model_copy(deep=True)


# =============================================================================
# PERSONALIZED HEALTH PLAN
# =============================================================================

DEFAULT_AGE = 30

MAX_DAILY_RECOMMENDATIONS = 4
MAX_WEEKLY_GOALS = 3
MAX_NUTRITION_TIPS = 4
MAX_EXERCISE_ITEMS = 3
MAX_RISK_FACTORS = 3
MAX_PREVENTIVE_CARE = 3


def parse_age(age: str) -> int:
    """Leading integer of the age field; missing, zero or unparseable -> 30."""
    match = re.match(r"\s*([+-]?\d+)", age or "")
    if not match:
        return DEFAULT_AGE
    return int(match.group(1)) or DEFAULT_AGE


def health_plan_fallback(profile: HealthProfile) -> HealthPlan:
    age = parse_age(profile.age)
    goals = (profile.goals or "").lower()

    health_score = 75
    daily_recs = [
        "Drink 8-10 glasses of water daily",
        "Take a 30-minute walk",
        "Eat 5 servings of fruits and vegetables",
    ]
    weekly_goals = [
        "Exercise 150 minutes per week",
        "Get 7-8 hours of sleep nightly",
        "Practice stress management",
    ]
    nutrition_tips = [
        "Reduce processed foods",
        "Include lean proteins in meals",
        "Choose whole grains over refined",
    ]
    exercise_routine = [
        "Morning stretches (10 minutes)",
        "Cardio exercise 3x per week",
        "Strength training 2x per week",
    ]
    risk_factors = ["Sedentary lifestyle", "Irregular sleep patterns"]
    preventive_care = [
        "Annual physical examination",
        "Blood pressure monitoring",
        "Dental cleaning every 6 months",
    ]

    if age > 50:
        health_score = 70
        # Age-specific screening goes first so truncation keeps it
        preventive_care = [
            "Bone density screening",
            "Colonoscopy screening",
        ] + preventive_care
        risk_factors.append("Age-related health risks")
        exercise_routine = [
            "Gentle morning stretches",
            "Low-impact cardio 3x/week",
            "Light strength training 2x/week",
        ]
    elif age < 25:
        health_score = 85
        daily_recs.append("Limit screen time before bed")
        weekly_goals.append("Maintain social connections")

    if "weight loss" in goals:
        nutrition_tips.extend(["Control portion sizes", "Avoid sugary drinks"])
        exercise_routine.append("High-intensity interval training")
        daily_recs.append("Track calorie intake")
    elif "muscle" in goals or "strength" in goals:
        nutrition_tips.extend(["Increase protein intake", "Eat post-workout meals"])
        exercise_routine = [
            "Dynamic warm-up",
            "Strength training 4x/week",
            "Progressive overload",
        ]
    elif "stress" in goals or "mental" in goals:
        daily_recs.append("Practice 10 minutes of meditation")
        weekly_goals.append("Engage in relaxing hobbies")
        exercise_routine.append("Yoga or tai chi sessions")

    return HealthPlan(
        daily_recommendations=daily_recs[:MAX_DAILY_RECOMMENDATIONS],
        weekly_goals=weekly_goals[:MAX_WEEKLY_GOALS],
        nutrition_tips=nutrition_tips[:MAX_NUTRITION_TIPS],
        exercise_routine=exercise_routine[:MAX_EXERCISE_ITEMS],
        health_score=health_score,
        risk_factors=risk_factors[:MAX_RISK_FACTORS],
        preventive_care=preventive_care[:MAX_PREVENTIVE_CARE],
    )


# =============================================================================
# MEDICATION SAFETY
# =============================================================================


class DrugClass(NamedTuple):
    name: str
    keywords: tuple
    interaction: str
    timing: str
    side_effect: str
    food_restriction: str
    reminder: Optional[str] = None


DRUG_CLASSES = (
    DrugClass(
        name="NSAID",
        keywords=("aspirin", "ibuprofen", "naproxen"),
        interaction="NSAIDs may increase bleeding risk with blood thinners",
        timing="Take with food to reduce stomach irritation",
        side_effect="May cause stomach upset or heartburn",
        food_restriction="Avoid alcohol to prevent stomach bleeding",
    ),
    DrugClass(
        name="acetaminophen",
        keywords=("acetaminophen", "tylenol"),
        interaction="Do not exceed 4000mg daily from all sources",
        timing="Space doses 4-6 hours apart",
        side_effect="Rare but serious liver damage with overdose",
        food_restriction="Limit alcohol consumption",
    ),
    DrugClass(
        name="antihypertensive",
        keywords=("blood pressure", "lisinopril", "amlodipine"),
        interaction="Monitor blood pressure regularly",
        timing="Take at same time daily for consistency",
        side_effect="May cause dizziness or lightheadedness",
        food_restriction="Limit sodium intake",
    ),
    DrugClass(
        name="antidiabetic",
        keywords=("diabetes", "metformin", "insulin"),
        interaction="Monitor blood sugar levels closely",
        timing="Take with meals to reduce side effects",
        side_effect="May cause low blood sugar or stomach upset",
        food_restriction="Maintain consistent carbohydrate intake",
    ),
    DrugClass(
        name="antibiotic",
        keywords=("antibiotic", "amoxicillin", "azithromycin"),
        interaction="Complete full course even if feeling better",
        timing="Take at evenly spaced intervals",
        side_effect="May cause digestive upset or yeast infections",
        food_restriction="Avoid dairy products if specified",
        reminder="Take probiotics to maintain gut health",
    ),
)

MULTI_DRUG_INTERACTION = "Multiple medications increase interaction risk"
MULTI_DRUG_TIMING = "Space different medications 1-2 hours apart when possible"
MULTI_DRUG_REMINDER = "Consult pharmacist about drug interactions"

BASE_REMINDERS = ("Set daily alarms", "Use pill organizer", "Keep medication list updated")

MAX_INTERACTIONS = 3
MAX_TIMING_ADVICE = 3
MAX_SIDE_EFFECTS = 3
MAX_FOOD_RESTRICTIONS = 2
MAX_REMINDERS = 3


def _bounded(items: list, default: str, limit: int, tail: Optional[str] = None) -> list:
    """Specific items (or the default), truncated so ``tail`` always fits."""
    items = items or [default]
    if tail is None:
        return items[:limit]
    return items[: limit - 1] + [tail]


def matching_drug_classes(medications: list[str]) -> list[DrugClass]:
    lowered = [med.lower() for med in medications]
    return [
        drug_class
        for drug_class in DRUG_CLASSES
        if any(k in med for med in lowered for k in drug_class.keywords)
    ]


def medication_analysis_fallback(medications: list[str]) -> MedicationAnalysis:
    classes = matching_drug_classes(medications)
    multiple = len(medications) > 1

    reminders = [c.reminder for c in classes if c.reminder] + list(BASE_REMINDERS)

    return MedicationAnalysis(
        interactions=_bounded(
            [c.interaction for c in classes],
            "No major interactions detected",
            MAX_INTERACTIONS,
            MULTI_DRUG_INTERACTION if multiple else None,
        ),
        timing_advice=_bounded(
            [c.timing for c in classes],
            "Take medications as prescribed",
            MAX_TIMING_ADVICE,
            MULTI_DRUG_TIMING if multiple else None,
        ),
        side_effects=_bounded(
            [c.side_effect for c in classes],
            "Monitor for unusual symptoms",
            MAX_SIDE_EFFECTS,
        ),
        food_restrictions=_bounded(
            [c.food_restriction for c in classes],
            "Follow medication label instructions",
            MAX_FOOD_RESTRICTIONS,
        ),
        reminders=_bounded(
            reminders,
            BASE_REMINDERS[0],
            MAX_REMINDERS,
            MULTI_DRUG_REMINDER if multiple else None,
        ),
    )


# =============================================================================
# EMERGENCY GUIDANCE
# =============================================================================

EMERGENCY_RULES = (
    (
        KeywordRule(("choking", "choke")),
        (
            "If the person cannot cough, speak or breathe, give 5 firm back blows between the shoulder blades",
            "Follow with 5 abdominal thrusts (Heimlich maneuver) and repeat until the object is out",
        ),
    ),
    (
        KeywordRule(("bleeding", "blood loss", "wound", "laceration")),
        (
            "Apply firm, direct pressure to the wound with a clean cloth",
            "Keep the injured area raised above heart level if possible",
            "Do not remove soaked cloths; add more layers on top",
        ),
    ),
    (
        KeywordRule(("burn", "scald")),
        (
            "Cool the burn under cool running water for at least 20 minutes",
            "Remove jewellery and tight clothing near the burn unless stuck to the skin",
            "Cover loosely with cling film or a clean non-fluffy cloth; do not apply ice or butter",
        ),
    ),
    (
        KeywordRule(("chest pain", "heart attack", "cardiac")),
        (
            "Sit the person down and keep them calm and still",
            "If not allergic, have them chew one adult aspirin (300mg)",
            "If they become unresponsive and stop breathing normally, start CPR",
        ),
    ),
    (
        KeywordRule(("stroke", "face drooping", "slurred speech")),
        (
            "Check FAST: Face drooping, Arm weakness, Speech difficulty, Time to call",
            "Note the time symptoms started",
            "Do not give food, drink or medication",
        ),
    ),
    (
        KeywordRule(("seizure", "convulsion")),
        (
            "Clear the area around the person and cushion their head",
            "Do not restrain them or put anything in their mouth",
            "Once the seizure stops, place them in the recovery position",
        ),
    ),
    (
        KeywordRule(("unconscious", "not breathing", "unresponsive", "collapsed")),
        (
            "Check for responsiveness and normal breathing",
            "If not breathing normally, start CPR: 30 chest compressions then 2 rescue breaths",
            "If breathing, place the person in the recovery position",
        ),
    ),
    (
        KeywordRule(("poison", "overdose", "swallowed")),
        (
            "Contact poison control or emergency services with the substance name",
            "Do not induce vomiting unless told to by a professional",
            "Keep the container or packaging to show responders",
        ),
    ),
)

QUICK_DIAL = "Quick dial: 112 (all emergencies), 108 (ambulance), 101 (fire), 100 (police)"

EMERGENCY_DISCLAIMER = (
    "IMPORTANT: This is general guidance. Always call emergency services for serious situations."
)

DEFAULT_EMERGENCY_STEPS = (
    "Stay calm and assess the situation",
    "Call emergency services (112/911) immediately if life-threatening",
    "Provide first aid if trained",
    "Do not move injured person unless in immediate danger",
    "Stay with the person until help arrives",
)


def emergency_guidance_fallback(situation: str) -> str:
    specific = _first_match(situation, EMERGENCY_RULES)
    if specific is None:
        steps = DEFAULT_EMERGENCY_STEPS
    else:
        steps = (
            ("Call emergency services (112/911) immediately",)
            + specific
            + ("Stay with the person until help arrives",)
        )

    numbered = "\n".join(f"{i}. {step}" for i, step in enumerate(steps, start=1))
    return (
        f"Emergency Guidance for: {situation}\n\n"
        f"{numbered}\n\n"
        f"{QUICK_DIAL}\n\n"
        f"{EMERGENCY_DISCLAIMER}"
    )


# =============================================================================
# PRESCRIPTION OCR
# =============================================================================

UNREADABLE = "Unable to read clearly"
VERIFY_WITH_DOCTOR = "Please verify with doctor"


def prescription_extraction_fallback() -> PrescriptionExtraction:
    return PrescriptionExtraction(
        doctor_name=UNREADABLE,
        patient_name=UNREADABLE,
        date=UNREADABLE,
        medications=[
            PrescribedMedication(
                name="Medication name unclear",
                dosage=VERIFY_WITH_DOCTOR,
                frequency=VERIFY_WITH_DOCTOR,
                duration=VERIFY_WITH_DOCTOR,
                instructions="Consult prescribing physician",
            )
        ],
        diagnosis="Not clearly visible",
        warnings=[
            "Image analysis not available",
            "Always verify prescription details with your doctor",
            "Do not rely solely on AI analysis for medication",
        ],
        confidence="Low",
    )


# =============================================================================
# NUTRITION & ALLERGY CHECK
# =============================================================================

# Top-9 allergens and the foods that commonly carry them
ALLERGEN_KEYWORDS = {
    "milk": (
        "milk", "cheese", "butter", "cream", "yogurt", "yoghurt", "paneer",
        "ghee", "whey", "dairy", "lactose", "ice cream",
    ),
    "egg": ("egg", "mayonnaise", "omelette", "omelet", "meringue"),
    "fish": ("fish", "salmon", "tuna", "cod", "anchov", "sardine", "tilapia"),
    "shellfish": (
        "shellfish", "shrimp", "prawn", "crab", "lobster", "clam", "oyster",
        "mussel", "scallop",
    ),
    "tree nuts": (
        "tree nut", "almond", "cashew", "walnut", "pecan", "pistachio",
        "hazelnut", "macadamia",
    ),
    "peanuts": ("peanut",),
    "wheat": (
        "wheat", "gluten", "bread", "pasta", "flour", "noodle", "cake", "pancake",
        "cookie", "biscuit", "cracker", "roti", "naan", "pizza", "sandwich",
        "burger", "couscous",
    ),
    "soy": ("soy", "tofu", "edamame", "tempeh", "miso"),
    "sesame": ("sesame", "tahini", "hummus"),
}

WHOLESOME_KEYWORDS = (
    "salad", "vegetable", "veggie", "fruit", "grilled", "steamed", "baked",
    "whole grain", "oats", "lentil", "beans", "quinoa",
)
INDULGENT_KEYWORDS = (
    "fried", "fries", "soda", "candy", "cake", "chips", "processed", "sugary",
    "pastry", "donut", "doughnut", "bacon",
)

BASE_FOOD_SCORE = 5
MAX_FOOD_SCORE = 10


def _mentions(text: str, keyword: str) -> bool:
    # Word-start boundary so "egg" matches "eggs" but not "veggie"
    return re.search(r"\b" + re.escape(keyword), text) is not None


def detect_allergens(text: str) -> list[str]:
    lowered = text.lower()
    return [
        allergen
        for allergen, keywords in ALLERGEN_KEYWORDS.items()
        if any(_mentions(lowered, k) for k in keywords)
    ]


def _allergy_matches(allergy: str, allergen: str) -> bool:
    allergy = allergy.lower().strip()
    names = {allergy, allergy[:-1] if allergy.endswith("s") else allergy}
    aliases = {allergen, allergen.rstrip("s"), *ALLERGEN_KEYWORDS[allergen]}
    if allergen in ("tree nuts", "peanuts"):
        aliases.update(("nut", "nuts"))
    return bool(names & aliases)


def allergy_warnings(text: str, allergies: list[str], detected: list[str]) -> list[str]:
    allergies = [a.strip() for a in allergies if a and a.strip()]
    if not allergies:
        return []

    lowered = text.lower()
    warnings = []
    for allergy in allergies:
        matched = [a for a in detected if _allergy_matches(allergy, a)]
        if matched:
            warnings.append(
                f"May contain {', '.join(matched)} - you have listed an allergy to {allergy}"
            )
        elif _mentions(lowered, allergy.lower()):
            warnings.append(f"Mentions {allergy}, which is on your allergy list")

    if not warnings:
        warnings.append(
            f"Please check ingredients for potential allergens: {', '.join(allergies)}"
        )
    return warnings


def food_health_score(text: str) -> int:
    lowered = text.lower()
    score = BASE_FOOD_SCORE
    score += sum(1 for k in WHOLESOME_KEYWORDS if _mentions(lowered, k))
    score -= sum(1 for k in INDULGENT_KEYWORDS if _mentions(lowered, k))
    return max(0, min(MAX_FOOD_SCORE, score))


def food_analysis_fallback(food_item: str, allergies: list[str]) -> FoodAnalysis:
    detected = detect_allergens(food_item)
    score = food_health_score(food_item)

    recommendations = []
    if any(_mentions(food_item.lower(), k) for k in ("fried", "fries")):
        recommendations.append(
            "Choose grilled, baked or steamed preparation instead of frying"
        )
    if score < BASE_FOOD_SCORE:
        recommendations.append("Balance this with vegetables, fruit or whole grains")
    recommendations.extend(
        [
            "Check ingredient labels carefully",
            "Consult with healthcare provider for dietary advice",
        ]
    )

    return FoodAnalysis(
        nutrition=(
            f'Analysis for "{food_item}" - Please consult nutrition labels for '
            "detailed information."
        ),
        allergy_warnings=allergy_warnings(food_item, allergies, detected),
        health_score=score,
        recommendations=recommendations,
        potential_allergens=detected
        or ["Common allergens may be present - check labels"],
    )
