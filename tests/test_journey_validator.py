"""
Unit tests for journey declaration validation
"""

import pytest

from jctl.core.exceptions import JourneyLogicError
from jctl.core.journey.journey_validator import (
    JourneyValidator,
    format_validation_results,
    validate_all_journeys,
    validate_journey,
    validate_journey_index,
)


def _messages(issues):
    return [issue.message for issue in issues]


class TestJourneyValidator:
    """Structural, component, reference and logic checks"""

    def test_valid_journey(self, permit_declaration):
        result = validate_journey(permit_declaration)
        assert result.is_valid
        assert result.errors == []
        # hasVehicle and vehicleUse have no catalog rule
        assert {issue.type for issue in result.warnings} == {"reference"}
        assert len(result.warnings) == 2

    def test_summary_counts(self, permit_declaration):
        summary = validate_journey(permit_declaration).summary
        assert summary.total_pages == 5
        assert summary.total_components == 7
        assert summary.input_components == 5
        assert summary.components_with_validation == 5
        assert summary.validation_coverage_percent == 100
        assert summary.component_types["textInput"] == 2
        assert summary.valid_journeys == 1

    def test_structural_failure_stops_validation(self):
        result = validate_journey({"id": "broken", "pages": {}})
        assert not result.is_valid
        assert len(result.errors) == 1
        assert result.errors[0].type == "schema"
        assert result.errors[0].message.startswith("Journey schema validation failed")

    def test_missing_check_your_answers_page(self, permit_declaration):
        permit_declaration["checkYourAnswersPage"] = "cya"
        result = validate_journey(permit_declaration)
        assert not result.is_valid
        assert len(result.errors) == 1
        assert result.errors[0].type == "reference"
        assert '"cya"' in result.errors[0].message

    def test_dangling_next_page(self, permit_declaration):
        permit_declaration["pages"]["personal-details"]["nextPage"] = "nowhere"
        result = validate_journey(permit_declaration)
        assert not result.is_valid
        error = result.errors[0]
        assert error.type == "reference"
        assert error.page_id == "personal-details"
        assert 'Next page reference "nowhere" does not exist' == error.message

    def test_dangling_routing_target(self, permit_declaration):
        permit_declaration["pages"]["has-vehicle"]["conditionalRouting"] = {"yes": "missing-page"}
        result = validate_journey(permit_declaration)
        assert 'Conditional route target "missing-page" does not exist' in _messages(result.errors)

    def test_dangling_previous_page(self, permit_declaration):
        permit_declaration["pages"]["vehicle-details"]["previousPage"] = "gone"
        result = validate_journey(permit_declaration)
        assert not result.is_valid
        assert [(error.type, error.page_id, error.message) for error in result.errors] == [
            ("reference", "vehicle-details", 'Previous page reference "gone" does not exist')]

    def test_dangling_start_page(self, permit_declaration):
        permit_declaration["startPage"] = "welcome"
        result = validate_journey(permit_declaration)
        assert not result.is_valid
        assert [(error.type, error.message) for error in result.errors] == [
            ("reference", 'Start page "welcome" does not exist')]

    def test_dangling_completion_page(self, permit_declaration):
        permit_declaration["completionPage"] = "done"
        result = validate_journey(permit_declaration)
        assert not result.is_valid
        assert [(error.type, error.message) for error in result.errors] == [
            ("reference", 'Completion page "done" does not exist')]

    def test_value_map_routing_without_input_is_schema_error(self, permit_declaration):
        permit_declaration["pages"]["check-your-answers"]["conditionalRouting"] = {"yes": "confirmation"}
        result = validate_journey(permit_declaration)
        assert not result.is_valid
        assert len(result.errors) == 1
        assert result.errors[0].type == "schema"
        assert "needs an input component to route on" in result.errors[0].message

    def test_non_string_journey_id(self, permit_declaration):
        permit_declaration["id"] = 123
        result = validate_journey(permit_declaration)
        assert not result.is_valid
        assert len(result.errors) == 1
        assert result.errors[0].type == "schema"
        assert result.errors[0].journey_id is None

    def test_invalid_component_is_reported_with_index(self, permit_declaration):
        del permit_declaration["pages"]["personal-details"]["components"][0]["props"]["label"]
        result = validate_journey(permit_declaration)
        assert not result.is_valid
        error = result.errors[0]
        assert error.type == "schema"
        assert error.component_index == 0
        assert result.summary.invalid_components == 1

    def test_duplicate_heading_is_logic_error(self, permit_declaration):
        page = permit_declaration["pages"]["personal-details"]
        page["components"].insert(0, {"type": "heading", "props": {"text": "Your details"}})
        result = validate_journey(permit_declaration)
        assert not result.is_valid
        logic = [issue for issue in result.errors if issue.type == "logic"]
        assert len(logic) == 1
        assert logic[0].component_index == 0

    def test_raise_for_errors_uses_first_error_type(self, permit_declaration):
        page = permit_declaration["pages"]["personal-details"]
        page["components"].insert(0, {"type": "heading", "props": {"text": "Your details"}})
        with pytest.raises(JourneyLogicError) as exc_info:
            validate_journey(permit_declaration).raise_for_errors()
        assert "(page personal-details)" in str(exc_info.value)

    def test_raise_for_errors_is_silent_when_valid(self, permit_declaration):
        validate_journey(permit_declaration).raise_for_errors()

    def test_unknown_pattern_and_page_rule_are_warnings(self, permit_declaration):
        page = permit_declaration["pages"]["personal-details"]
        page["components"][0]["validation"]["pattern"] = "shoe-size"
        page["validation"] = "no-such-rule"
        result = validate_journey(permit_declaration)
        assert result.is_valid
        messages = _messages(result.warnings)
        assert 'Unknown validation pattern "shoe-size"' in messages
        assert 'Page validation rule "no-such-rule" is not defined' in messages

    def test_revalidation_is_idempotent(self, permit_declaration):
        permit_declaration["pages"]["personal-details"]["nextPage"] = "nowhere"
        validator = JourneyValidator()
        first = validator.validate(permit_declaration).to_dict()
        second = validator.validate(permit_declaration).to_dict()
        assert first == second

    def test_is_valid_tracks_errors_only(self, permit_declaration):
        result = validate_journey(permit_declaration)
        assert result.is_valid == (len(result.errors) == 0)
        assert result.warnings

    def test_report_shape(self, permit_declaration):
        report = validate_journey(permit_declaration).to_report()
        assert set(report) == {"errors", "warnings", "summary"}
        assert set(report["summary"]) == {"totalPages", "totalComponents", "componentTypes",
                                          "validationCoveragePercent"}


class TestJourneyCollections:

    def test_index_validation(self):
        assert validate_journey_index({"journeys": []}) == []
        issues = validate_journey_index({"journeys": [{"id": "x"}]})
        assert len(issues) == 1
        assert issues[0].severity == "error"

    def test_validate_all_journeys(self, permit_declaration):
        broken = {"id": "broken"}
        result = validate_all_journeys({"apply-for-permit": permit_declaration, "broken": broken},
                                       index={"journeys": "nope"})
        assert not result.is_valid
        assert result.summary.total_journeys == 2
        assert result.summary.valid_journeys == 1
        assert result.summary.total_pages == 5
        # one index error and one structural error
        assert len(result.errors) == 2

    def test_format_validation_results(self, permit_declaration):
        text = format_validation_results(validate_journey(permit_declaration))
        assert "Journeys: 1/1 valid" in text
        assert "textInput: 2" in text
        assert "✅ All journeys are valid!" in text

        permit_declaration["checkYourAnswersPage"] = "cya"
        text = format_validation_results(validate_journey(permit_declaration))
        assert "❌ Errors (1):" in text
        assert "All journeys are valid" not in text
