"""CLI commands for the HealthLink health assistant."""

import argparse
import asyncio
import json
import logging
import sys

from app.config import settings
from app.services.ai_service import (
    HealthAssistantService,
    get_health_assistant_service,
)
from app.services.file_service import InvalidImageError, file_service


def _print_result(result) -> None:
    if isinstance(result, str):
        print(result)
    else:
        print(json.dumps(result, indent=2, ensure_ascii=False))


def _require_text(value: str, what: str) -> None:
    if not value.strip():
        print(f"Error: {what} is required.")
        sys.exit(1)


async def run_command(args: argparse.Namespace, service: HealthAssistantService):
    """Dispatch a parsed command to the matching assistant feature."""
    if args.command == "ask":
        _require_text(args.question, "A question")
        return await service.generate_health_response(args.question)

    if args.command == "symptoms":
        _require_text(args.symptoms, "A symptom description")
        return await service.analyze_symptoms(args.symptoms)

    if args.command == "plan":
        return await service.generate_health_plan(
            {
                "age": args.age,
                "gender": args.gender,
                "goals": args.goals,
                "conditions": args.conditions,
                "activity_level": args.activity,
            }
        )

    if args.command == "meds":
        medications = [m.strip() for m in args.medications if m.strip()]
        if not medications:
            print("Error: At least one medication is required.")
            sys.exit(1)
        return await service.analyze_medication(medications)

    if args.command == "emergency":
        _require_text(args.situation, "A situation description")
        return await service.generate_emergency_guidance(args.situation)

    if args.command == "prescription":
        image = file_service.load_path(args.image)
        return await service.analyze_prescription_image(image)

    if args.command == "food":
        image = file_service.load_path(args.image) if args.image else None
        if not (args.food_item or "").strip() and image is None:
            print("Error: Describe the food or pass --image.")
            sys.exit(1)
        allergies = [a.strip() for a in (args.allergies or "").split(",") if a.strip()]
        return await service.analyze_food(
            args.food_item or "", allergies=allergies, image=image
        )

    raise ValueError(f"Unknown command: {args.command}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="HealthLink AI health assistant")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    ask_parser = subparsers.add_parser("ask", help="Ask a general health question")
    ask_parser.add_argument("question", help="Your question")

    symptoms_parser = subparsers.add_parser("symptoms", help="Analyze symptoms")
    symptoms_parser.add_argument("symptoms", help="Describe your symptoms")

    plan_parser = subparsers.add_parser("plan", help="Generate a health plan")
    plan_parser.add_argument("--age", default="")
    plan_parser.add_argument("--gender", default="")
    plan_parser.add_argument("--goals", default="")
    plan_parser.add_argument("--conditions", default="")
    plan_parser.add_argument("--activity", default="")

    meds_parser = subparsers.add_parser("meds", help="Analyze medications")
    meds_parser.add_argument("medications", nargs="+", help="Medication names")

    emergency_parser = subparsers.add_parser(
        "emergency", help="Get emergency first-aid guidance"
    )
    emergency_parser.add_argument("situation", help="Describe the situation")

    prescription_parser = subparsers.add_parser(
        "prescription", help="Read a prescription photo"
    )
    prescription_parser.add_argument("image", help="Path to prescription image")

    food_parser = subparsers.add_parser("food", help="Check food nutrition & allergens")
    food_parser.add_argument("food_item", nargs="?", default="", help="Food description")
    food_parser.add_argument("--allergies", help="Comma-separated allergy list")
    food_parser.add_argument("--image", help="Path to food photo")

    return parser


def main():
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    service = get_health_assistant_service()
    try:
        result = asyncio.run(run_command(args, service))
    except InvalidImageError as e:
        print(f"Error: {e}")
        sys.exit(1)

    _print_result(result)


if __name__ == "__main__":
    main()
