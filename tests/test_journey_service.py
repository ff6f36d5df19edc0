"""
Unit tests for JourneyService - validation reports and the form submission boundary
"""

import json
from pathlib import Path
import re

import pytest

from jctl.core.config import load_engine_config
from jctl.core.exceptions import ConfigurationFault, JourneyReferenceError, JourneySchemaError
from jctl.core.journey.journey_models import Journey
from jctl.services.journey.journey_service import JourneyService


class TestValidationWorkflows:

    def test_validate_file(self, journey_file):
        result = JourneyService().validate_file(journey_file)
        assert result["success"]
        assert result["is_valid"]
        assert result["exit_code"] == 0
        assert result["result"]["isValid"] is True
        assert result["report"]["summary"]["totalPages"] == 5

    def test_malformed_json_is_single_schema_error(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text('{"id": "broken", "pages": {', encoding="utf-8")
        result = JourneyService().validate_file(path)
        assert result["success"]
        assert not result["is_valid"]
        assert result["exit_code"] == 1
        errors = result["result"]["errors"]
        assert len(errors) == 1
        assert errors[0]["type"] == "schema"
        assert errors[0]["journeyId"] == "broken"

    def test_validate_text(self, permit_declaration):
        service = JourneyService()
        assert service.validate_text(json.dumps(permit_declaration))["is_valid"]
        assert len(service.validate_text("not json")["report"]["errors"]) == 1

    def test_validate_directory(self, tmp_path, permit_declaration):
        (tmp_path / "apply-for-permit.json").write_text(json.dumps(permit_declaration), encoding="utf-8")
        (tmp_path / "index.json").write_text(json.dumps({"journeys": [{
            "id": "apply-for-permit", "name": "Apply", "description": "Apply for a permit",
            "slug": "apply", "department": "Transport", "departmentSlug": "transport"
        }]}), encoding="utf-8")
        result = JourneyService().validate_directory(tmp_path)
        assert result["is_valid"]
        assert result["result"]["summary"]["totalJourneys"] == 1

    def test_validate_missing_directory(self, tmp_path):
        result = JourneyService().validate_directory(tmp_path / "absent")
        assert not result["success"]
        assert "not found" in result["error"]

    def test_lint_file(self, journey_file):
        result = JourneyService().lint_file(journey_file)
        assert result["is_valid"]
        assert len(result["result"]["warnings"]) == 1


class TestSubmitForm:
    """Section-by-section outputs of the submission boundary"""

    def test_unknown_page(self, permit_journey):
        result = JourneyService().submit_form(permit_journey, "nowhere", {})
        assert result == {"success": False, "errors": {"_page": "Page not found"}}

    def test_failure(self, permit_journey):
        result = JourneyService().submit_form(permit_journey, "personal-details", {"email": "nope"})
        assert result == {"success": False, "errors": {
            "firstName": "Enter your first name",
            "email": "Enter a valid email address"
        }}

    def test_moves_on(self, permit_journey):
        result = JourneyService().submit_form(permit_journey, "has-vehicle", {"hasVehicle": "no"})
        assert result == {
            "success": True,
            "complete": False,
            "nextPage": "check-your-answers",
            "currentPage": "has-vehicle",
            "data": {"hasVehicle": "no"}
        }

    def test_single_checkbox_is_coerced_to_list(self, permit_journey):
        result = JourneyService().submit_form(permit_journey, "vehicle-details",
                                              {"registration": "CU57ABC", "vehicleUse": "personal"})
        assert result["success"]
        assert result["data"]["vehicleUse"] == ["personal"]

    def test_check_your_answers_completes(self, permit_journey):
        answers = {"firstName": "Jane", "email": "jane@example.com", "hasVehicle": "no"}
        result = JourneyService().submit_form(permit_journey, "check-your-answers", answers)
        assert result["success"]
        assert result["complete"]
        assert result["nextPage"] == "confirmation"
        assert re.match(r"^APP-[0-9A-Z]+-[0-9A-Z]{5}$", result["referenceNumber"])
        assert result["data"] == answers

    def test_check_your_answers_rechecks_values(self, permit_journey):
        result = JourneyService().submit_form(permit_journey, "check-your-answers", {"email": "nope"})
        assert result == {"success": False, "errors": {"email": "Enter a valid email address"}}

    def test_configuration_fault_propagates(self):
        journey = Journey.from_declaration({
            "id": "bad", "name": "Bad", "startPage": "start",
            "pages": {"start": {"id": "start", "title": "Start", "components": [], "nextPage": "ghost"}}
        })
        with pytest.raises(ConfigurationFault):
            JourneyService().submit_form(journey, "start", {})


class TestStrictLoading:
    """load_journey(strict=True) raises the exception for the first error"""

    def test_valid_journey_loads(self, journey_file):
        journey = JourneyService().load_journey(journey_file, strict=True)
        assert journey.id == "apply-for-permit"

    def test_dangling_reference(self, tmp_path, permit_declaration):
        permit_declaration["checkYourAnswersPage"] = "ghost"
        path = tmp_path / "dangling.json"
        path.write_text(json.dumps(permit_declaration), encoding="utf-8")
        with pytest.raises(JourneyReferenceError) as exc_info:
            JourneyService().load_journey(path, strict=True)
        assert "ghost" in str(exc_info.value)

    def test_missing_name(self, tmp_path, permit_declaration):
        del permit_declaration["name"]
        path = tmp_path / "nameless.json"
        path.write_text(json.dumps(permit_declaration), encoding="utf-8")
        with pytest.raises(JourneySchemaError):
            JourneyService().load_journey(path, strict=True)

    def test_lenient_by_default(self, tmp_path, permit_declaration):
        permit_declaration["checkYourAnswersPage"] = "ghost"
        path = tmp_path / "dangling.json"
        path.write_text(json.dumps(permit_declaration), encoding="utf-8")
        assert JourneyService().load_journey(path).check_your_answers_page == "ghost"


class TestSampleData:

    def test_sample_data_satisfies_page(self, journey_file, permit_journey):
        service = JourneyService()
        for page_id in ("personal-details", "has-vehicle", "vehicle-details"):
            result = service.sample_data(journey_file, page_id)
            assert result["success"]
            submitted = service.submit_form(permit_journey, page_id, result["data"])
            assert submitted["success"], submitted

    def test_unknown_page(self, journey_file):
        result = JourneyService().sample_data(journey_file, "nowhere")
        assert not result["success"]


@pytest.mark.integration
class TestPublishedJourneys:
    """Runs against --journeys-dir, else the journeys directory named in the engine config"""

    def test_configured_directory_is_valid(self, journeys_dir_option):
        service = JourneyService(load_engine_config())
        directory = Path(journeys_dir_option or service.config.journeys_dir)
        if not directory.is_dir():
            pytest.skip(f"No journeys directory at {directory}")
        result = service.validate_directory(directory)
        assert result["is_valid"], result["formatted"]
