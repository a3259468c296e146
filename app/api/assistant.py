"""API endpoints for the AI health assistant."""

from functools import lru_cache
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from pydantic import BaseModel, StringConstraints

from app.services.ai_schemas import HealthProfile
from app.services.ai_service import (
    HealthAssistantService,
    get_health_assistant_service,
)
from app.services.file_service import InvalidImageError, file_service

router = APIRouter(prefix="/assistant", tags=["assistant"])

NonBlankStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


@lru_cache
def get_assistant_service() -> HealthAssistantService:
    """One Claude client per process; override in tests via dependency_overrides."""
    return get_health_assistant_service()


class ChatRequest(BaseModel):
    message: NonBlankStr


class SymptomsRequest(BaseModel):
    symptoms: NonBlankStr


class MedicationsRequest(BaseModel):
    medications: list[str]


class EmergencyRequest(BaseModel):
    situation: NonBlankStr


def parse_allergies(allergies: Optional[str]) -> list[str]:
    """Split a comma-separated allergy list, dropping blanks."""
    if not allergies:
        return []
    return [a.strip() for a in allergies.split(",") if a.strip()]


@router.post("/chat")
async def chat(
    body: ChatRequest,
    service: HealthAssistantService = Depends(get_assistant_service),
):
    """Free-text health question."""
    response = await service.generate_health_response(body.message)
    return {"response": response}


@router.post("/symptoms")
async def analyze_symptoms(
    body: SymptomsRequest,
    service: HealthAssistantService = Depends(get_assistant_service),
):
    return await service.analyze_symptoms(body.symptoms)


@router.post("/health-plan")
async def generate_health_plan(
    profile: HealthProfile,
    service: HealthAssistantService = Depends(get_assistant_service),
):
    return await service.generate_health_plan(profile)


@router.post("/medications")
async def analyze_medications(
    body: MedicationsRequest,
    service: HealthAssistantService = Depends(get_assistant_service),
):
    """
    Medication safety analysis.

    Blank entries (empty form rows) are ignored; at least one name is required.
    """
    medications = [m.strip() for m in body.medications if m.strip()]
    if not medications:
        raise HTTPException(status_code=400, detail="At least one medication is required")
    return await service.analyze_medication(medications)


@router.post("/emergency")
async def emergency_guidance(
    body: EmergencyRequest,
    service: HealthAssistantService = Depends(get_assistant_service),
):
    guidance = await service.generate_emergency_guidance(body.situation)
    return {"guidance": guidance}


@router.post("/prescription")
async def analyze_prescription(
    image: UploadFile = File(...),
    service: HealthAssistantService = Depends(get_assistant_service),
):
    """Extract medication details from a prescription photo."""
    try:
        attachment = await file_service.load_upload(image)
    except InvalidImageError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return await service.analyze_prescription_image(attachment)


@router.post("/food")
async def analyze_food(
    food_item: Optional[str] = Form(None),
    allergies: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    service: HealthAssistantService = Depends(get_assistant_service),
):
    """
    Nutrition and allergy check for a food description and/or photo.

    Returns: FoodAnalysis dict (nutrition, allergyWarnings, healthScore, ...)
    """
    food_item = (food_item or "").strip()

    attachment = None
    if image and image.filename:
        try:
            attachment = await file_service.load_upload(image)
        except InvalidImageError as e:
            raise HTTPException(status_code=400, detail=str(e))

    if not food_item and attachment is None:
        raise HTTPException(
            status_code=400, detail="Describe the food or attach a photo"
        )

    return await service.analyze_food(
        food_item, allergies=parse_allergies(allergies), image=attachment
    )
