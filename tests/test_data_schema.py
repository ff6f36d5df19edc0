"""
Unit tests for the dynamic data-validation schema builder
"""

import pytest
from pydantic import ValidationError

from jctl.core.exceptions import JourneySchemaError
from jctl.core.journey.data_schema import (
    build_journey_validator,
    build_page_validator,
    is_required,
)
from jctl.core.journey.component_models import validate_component
from jctl.core.journey.validation_models import FieldError


def _text(name, label="Name", **validation):
    component = {"type": "textInput", "id": name, "props": {"id": name, "name": name, "label": label}}
    if validation:
        component["validation"] = validation
    return component


class TestTextConstraints:
    """Empty, length and pattern checks short-circuit in order"""

    def test_email_scenario(self):
        components = [{"type": "email", "props": {"id": "email", "name": "email", "label": "Email"},
                       "validation": {"required": True}}]
        result = build_page_validator(components).check({"email": "not-an-email"})
        assert not result.success
        assert result.errors == [FieldError(field="email", message="Enter a valid email address")]

    def test_required_default_message(self):
        result = build_page_validator([_text("nickname", "Nickname")]).check({"nickname": "  "})
        assert result.error_map() == {"nickname": "Enter nickname"}

    def test_declared_messages_override_defaults(self):
        component = _text("nickname", "Nickname", required=True, minLength=3, errorMessages={
            "required": "Enter a nickname", "minLength": "Nickname is too short"})
        validator = build_page_validator([component])
        assert validator.check({}).error_map() == {"nickname": "Enter a nickname"}
        assert validator.check({"nickname": "ab"}).error_map() == {"nickname": "Nickname is too short"}

    def test_length_checks_precede_pattern(self):
        component = _text("code", "Code", minLength=2, maxLength=4, customPattern=r"[A-Z]+")
        validator = build_page_validator([component])
        assert validator.check({"code": "A"}).error_map() == {"code": "Must be at least 2 characters"}
        assert validator.check({"code": "ABCDE"}).error_map() == {"code": "Must be 4 characters or less"}
        assert validator.check({"code": "ab1"}).error_map() == {"code": "Invalid format"}
        assert validator.check({"code": "ABC"}).success

    def test_named_pattern_with_custom_message(self):
        component = _text("website", "Website", pattern="url", errorMessages={"pattern": "Enter a web address"})
        validator = build_page_validator([component])
        assert validator.check({"website": "example"}).error_map() == {"website": "Enter a web address"}
        assert validator.check({"website": "https://example.com"}).success

    def test_unknown_pattern_is_skipped(self):
        validator = build_page_validator([_text("shoe", "Shoe", pattern="shoe-size")])
        assert validator.check({"shoe": "anything"}).success

    def test_text_input_typed_tel_uses_phone_pattern(self):
        component = {"type": "textInput", "props": {"id": "mobile", "name": "mobile", "label": "Mobile",
                                                   "type": "tel"}}
        result = build_page_validator([component]).check({"mobile": "call me"})
        assert result.error_map() == {"mobile": "Enter a valid phone number"}

    def test_catalog_rule_applies_to_known_fields(self):
        result = build_page_validator([_text("postcode", "Postcode")]).check({"postcode": "nowhere"})
        assert result.error_map() == {"postcode": "Enter a valid UK postcode, like SW1A 1AA"}

    def test_optional_field_accepts_empty(self):
        validator = build_page_validator([_text("middleName", "Middle name (optional)")])
        assert validator.required_fields == set()
        assert validator.check({}).success

    def test_non_string_value(self):
        result = build_page_validator([_text("nickname", "Nickname")]).check({"nickname": ["a"]})
        assert result.error_map() == {"nickname": "Enter a valid value"}


class TestChoiceConstraints:

    RADIOS = {
        "type": "radios",
        "props": {"id": "colour", "name": "colour", "legend": "Colour",
                  "items": [{"value": "red", "text": "Red"}, {"value": "blue", "text": "Blue"}]}
    }
    CHECKBOXES = {
        "type": "checkboxes",
        "props": {"id": "extras", "name": "extras", "legend": "Extras",
                  "items": [{"value": "a", "text": "A"}, {"value": "b", "text": "B"}]}
    }

    def test_single_choice(self):
        validator = build_page_validator([self.RADIOS])
        assert validator.check({"colour": "red"}).success
        assert validator.check({}).error_map() == {"colour": "Select colour"}
        assert validator.check({"colour": "green"}).error_map() == {"colour": "Select a valid option"}

    def test_multi_choice(self):
        validator = build_page_validator([self.CHECKBOXES])
        assert validator.check({"extras": ["a", "b"]}).success
        assert validator.check({"extras": ["a", "z"]}).error_map() == {"extras": "Select a valid option"}
        assert validator.check({"extras": "a"}).error_map() == {"extras": "Select a valid option"}
        assert validator.check({"extras": []}).error_map() == {"extras": "Select extras"}


class TestDateConstraints:

    DATE = {"type": "dateInput", "props": {"id": "dateOfBirth", "name": "dateOfBirth", "legend": "Date of birth"}}
    START = {"type": "dateInput", "props": {"id": "moveDate", "name": "moveDate", "legend": "Moving date"}}

    def test_iso_and_structured_values(self):
        validator = build_page_validator([self.START])
        assert validator.check({"moveDate": "2024-04-01"}).success
        assert validator.check({"moveDate": {"day": "1", "month": "4", "year": "2024"}}).success
        assert validator.check({"moveDate": "01/04/2024"}).error_map() == {"moveDate": "Enter a valid date"}
        assert validator.check({"moveDate": {"day": "1"}}).error_map() == {"moveDate": "Enter a valid date"}

    def test_day_31_in_april_passes(self):
        result = build_page_validator([self.DATE]).check({"dateOfBirth": {"day": "31", "month": "4", "year": "2024"}})
        assert result.success

    def test_catalog_date_rule_reports_parts(self):
        result = build_page_validator([self.DATE]).check({"dateOfBirth": {"day": "32", "month": "4", "year": "2024"}})
        assert result.errors == [FieldError(field="dateOfBirth.day", message="Day must be between 1 and 31")]


class TestValidatorShape:

    def test_required_fields_match_required_components(self, permit_journey):
        for page in permit_journey.pages.values():
            expected = {component.field_name for component in page.input_components if is_required(component)}
            assert build_page_validator(page.components).required_fields == expected

    def test_content_components_contribute_nothing(self):
        validator = build_page_validator([{"type": "paragraph", "props": {"text": "Hi"}}])
        assert validator.fields == []

    def test_invalid_declaration_raises(self):
        with pytest.raises(JourneySchemaError):
            build_page_validator([{"type": "radios", "props": {}}])

    def test_typed_components_accepted(self):
        component = validate_component(_text("nickname", "Nickname"))
        assert build_page_validator([component]).fields == ["nickname"]

    def test_first_declaration_wins(self):
        first = _text("nickname", "Nickname", maxLength=3)
        second = _text("nickname", "Nickname again")
        validator = build_page_validator([first, second])
        assert validator.check({"nickname": "abcd"}).error_map() == {"nickname": "Must be 3 characters or less"}


class TestJourneyValidator:
    """Whole-journey variant: every field optional, duplicates deduplicated"""

    def test_all_fields_optional(self, permit_journey):
        validator = build_journey_validator(permit_journey)
        assert validator.required_fields == set()
        assert validator.check({}).success
        assert set(validator.fields) == {"firstName", "email", "hasVehicle", "registration", "vehicleUse"}

    def test_present_values_still_checked(self, permit_journey):
        result = build_journey_validator(permit_journey).check({"email": "nope", "hasVehicle": "maybe"})
        assert result.error_map() == {"email": "Enter a valid email address", "hasVehicle": "Select a valid option"}

    def test_page_validator_of_one_journey_page(self, permit_journey):
        page = permit_journey.page("has-vehicle")
        result = build_page_validator(page.components).check({})
        assert result.error_map() == {"hasVehicle": "Select yes if you own a vehicle"}


class TestSubmissionModel:
    """Each validator is backed by a pydantic model keyed by submitted field names"""

    def test_model_validates_by_field_name(self):
        validator = build_page_validator([TestDateConstraints.DATE, _text("nickname", "Nickname")])
        submission = validator.model.model_validate(
            {"nickname": " Jo ", "dateOfBirth": {"day": "1", "month": "2", "year": "1990"}})
        dumped = submission.model_dump(by_alias=True)
        assert dumped["nickname"] == "Jo"
        assert dumped["dateOfBirth"] == {"day": "1", "month": "2", "year": "1990"}

    def test_model_errors_carry_part_locations(self):
        validator = build_page_validator([TestDateConstraints.DATE])
        with pytest.raises(ValidationError) as excinfo:
            validator.model.model_validate({"dateOfBirth": {"day": "1", "month": "13", "year": "1990"}})
        assert excinfo.value.errors()[0]["loc"] == ("dateOfBirth", "month")

    def test_field_names_clashing_with_model_attributes(self):
        validator = build_page_validator([_text("model_config", "Config")])
        assert validator.check({}).error_map() == {"model_config": "Enter config"}
        assert validator.check({"model_config": "x"}).success

    def test_journey_model_fields_are_optional(self, permit_journey):
        validator = build_journey_validator(permit_journey)
        submission = validator.model.model_validate({})
        assert all(value is None for value in submission.model_dump().values())
