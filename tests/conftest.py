"""
Shared journey fixtures for the jctl test suite
"""

import copy
import json

import pytest
from loguru import logger

from jctl.core.journey.journey_models import Journey


PERMIT_JOURNEY = {
    "id": "apply-for-permit",
    "name": "Apply for a parking permit",
    "startPage": "personal-details",
    "checkYourAnswersPage": "check-your-answers",
    "completionPage": "confirmation",
    "pages": {
        "personal-details": {
            "id": "personal-details",
            "title": "Your details",
            "components": [
                {
                    "type": "textInput",
                    "id": "firstName",
                    "props": {"id": "firstName", "name": "firstName", "label": "First name"},
                    "validation": {"required": True, "errorMessages": {"required": "Enter your first name"}}
                },
                {
                    "type": "email",
                    "id": "email",
                    "props": {"id": "email", "name": "email", "label": "Email address"},
                    "validation": {
                        "required": True,
                        "pattern": "email",
                        "errorMessages": {"required": "Enter your email address"}
                    }
                }
            ],
            "nextPage": "has-vehicle"
        },
        "has-vehicle": {
            "id": "has-vehicle",
            "title": "Do you own a vehicle?",
            "components": [
                {
                    "type": "radios",
                    "id": "hasVehicle",
                    "props": {
                        "id": "hasVehicle",
                        "name": "hasVehicle",
                        "legend": "Do you own a vehicle?",
                        "items": [{"value": "yes", "text": "Yes"}, {"value": "no", "text": "No"}]
                    },
                    "validation": {"required": True, "errorMessages": {"required": "Select yes if you own a vehicle"}}
                }
            ],
            "previousPage": "personal-details",
            "conditionalRouting": {"yes": "vehicle-details", "no": "check-your-answers"}
        },
        "vehicle-details": {
            "id": "vehicle-details",
            "title": "Vehicle details",
            "components": [
                {
                    "type": "textInput",
                    "id": "registration",
                    "props": {"id": "registration", "name": "registration", "label": "Registration number"},
                    "validation": {"required": True, "errorMessages": {"required": "Enter the registration number"}}
                },
                {
                    "type": "checkboxes",
                    "id": "vehicleUse",
                    "props": {
                        "id": "vehicleUse",
                        "name": "vehicleUse",
                        "legend": "How do you use the vehicle?",
                        "items": [
                            {"value": "personal", "text": "Personal"},
                            {"value": "business", "text": "Business"}
                        ]
                    },
                    "validation": {"required": False}
                }
            ],
            "nextPage": "check-your-answers",
            "previousPage": "has-vehicle"
        },
        "check-your-answers": {
            "id": "check-your-answers",
            "title": "Check your answers",
            "components": [{"type": "summaryList", "props": {"rows": []}}],
            "nextPage": "confirmation",
            "previousPage": "has-vehicle"
        },
        "confirmation": {
            "id": "confirmation",
            "title": "Application complete",
            "components": [{"type": "panel", "props": {"title": "Application complete"}}]
        }
    }
}


@pytest.fixture
def permit_declaration():
    """Fresh copy of a valid five-page journey declaration"""
    return copy.deepcopy(PERMIT_JOURNEY)


@pytest.fixture
def permit_journey(permit_declaration):
    return Journey.from_declaration(permit_declaration)


@pytest.fixture
def journey_file(tmp_path, permit_declaration):
    path = tmp_path / "apply-for-permit.json"
    path.write_text(json.dumps(permit_declaration), encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def reset_logger():
    """Drop sinks added by CLI commands so they never outlive a captured stream"""
    yield
    logger.remove()
