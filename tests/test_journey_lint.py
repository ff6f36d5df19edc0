"""
Unit tests for the journey house-style checks
"""

from jctl.core.config import EngineConfig
from jctl.core.journey.journey_lint import JourneyLinter, is_kebab_case, lint_journey, to_kebab_case


def _messages(issues):
    return [issue.message for issue in issues]


class TestKebabCase:

    def test_is_kebab_case(self):
        assert is_kebab_case("check-your-answers")
        assert is_kebab_case("step2")
        assert not is_kebab_case("check_your_answers")
        assert not is_kebab_case("checkYourAnswers")
        assert not is_kebab_case("-leading")

    def test_to_kebab_case(self):
        assert to_kebab_case("check_your_answers") == "check-your-answers"
        assert to_kebab_case("personalDetails") == "personal-details"


class TestJourneyLinter:
    """Convention checks on raw declarations"""

    def test_clean_journey_has_no_errors(self, permit_declaration):
        result = lint_journey(permit_declaration)
        assert result.is_valid
        # vehicleUse declares validation without errorMessages
        assert _messages(result.warnings) == ['Component "vehicleUse" validation missing errorMessages']

    def test_check_your_answers_page_must_use_convention(self, permit_declaration):
        permit_declaration["checkYourAnswersPage"] = "review"
        result = lint_journey(permit_declaration)
        assert not result.is_valid
        assert 'checkYourAnswersPage should be "check-your-answers", got "review"' in _messages(result.errors)

    def test_convention_comes_from_config(self, permit_declaration):
        config = EngineConfig(check_your_answers_page="review")
        result = JourneyLinter(config).lint(permit_declaration)
        messages = _messages(result.errors)
        assert 'checkYourAnswersPage should be "review", got "check-your-answers"' in messages
        assert 'Missing "review" page in pages object' in messages

    def test_page_id_conventions(self, permit_declaration):
        pages = permit_declaration["pages"]
        pages["Extra_Page"] = {"id": "extra-page", "title": "Extra", "components": [
            {"type": "paragraph", "props": {"text": "Hello"}}
        ]}
        result = lint_journey(permit_declaration)
        messages = _messages(result.warnings)
        assert 'Page ID "Extra_Page" should use kebab-case (lowercase with hyphens)' in messages
        assert 'Page key "Extra_Page" doesn\'t match page.id "extra-page"' in messages
        assert result.is_valid

    def test_imperative_verb(self, permit_declaration):
        component = permit_declaration["pages"]["personal-details"]["components"][0]
        component["validation"]["errorMessages"]["required"] = "First name is required"
        result = lint_journey(permit_declaration)
        warning = next(issue for issue in result.warnings if "imperative verb" in issue.message)
        assert warning.suggestion == 'Change to: "Enter first name"'
        assert warning.page_id == "personal-details"
        assert warning.component_index == 0

    def test_email_typed_text_input_needs_pattern(self, permit_declaration):
        component = permit_declaration["pages"]["personal-details"]["components"][0]
        component["props"]["type"] = "email"
        result = lint_journey(permit_declaration)
        assert 'Email field "firstName" missing pattern validation' in _messages(result.warnings)

    def test_missing_validation_is_warning(self, permit_declaration):
        del permit_declaration["pages"]["personal-details"]["components"][0]["validation"]
        result = lint_journey(permit_declaration)
        assert result.is_valid
        assert 'Component "firstName" on page "personal-details" missing validation' in _messages(result.warnings)
        assert result.summary.components_with_validation == 4
        assert result.summary.validation_coverage_percent == 80

    def test_props_name_mismatch(self, permit_declaration):
        component = permit_declaration["pages"]["personal-details"]["components"][0]
        component["props"]["name"] = "givenName"
        result = lint_journey(permit_declaration)
        assert 'Component "firstName": props.name "givenName" doesn\'t match component.id' in \
            _messages(result.warnings)

    def test_navigation_references(self, permit_declaration):
        permit_declaration["pages"]["vehicle-details"]["previousPage"] = "gone"
        result = lint_journey(permit_declaration)
        assert 'Page "vehicle-details" previousPage "gone" doesn\'t exist' in _messages(result.errors)

    def test_missing_pages(self):
        result = lint_journey({"id": "x", "name": "X", "checkYourAnswersPage": "check-your-answers",
                               "completionPage": "confirmation"})
        assert _messages(result.errors) == ['Missing "pages" object']


class TestMalformedDeclarations:
    """Wrongly typed values are reported, never raised"""

    def test_non_string_journey_id(self, permit_declaration):
        permit_declaration["id"] = 123
        result = lint_journey(permit_declaration)
        assert not result.is_valid
        assert _messages(result.errors) == ['"id" must be a string, got 123']
        assert result.errors[0].type == "schema"
        assert result.errors[0].journey_id is None

    def test_non_string_required_message(self, permit_declaration):
        component = permit_declaration["pages"]["personal-details"]["components"][0]
        component["validation"]["errorMessages"]["required"] = ["Enter your first name"]
        result = lint_journey(permit_declaration)
        assert not result.is_valid
        error = result.errors[0]
        assert error.message == 'Component "firstName" errorMessages.required must be a string'
        assert error.suggestion == 'Change to: "Enter first name"'
        assert error.component_index == 0

    def test_non_string_page_key(self, permit_declaration):
        permit_declaration["pages"][404] = {"id": "not-found", "title": "Not found", "components": []}
        result = lint_journey(permit_declaration)
        assert not result.is_valid
        assert _messages(result.errors) == ["Page key 404 must be a string"]
        assert result.errors[0].page_id is None

    def test_components_not_a_list(self, permit_declaration):
        permit_declaration["pages"]["confirmation"]["components"] = "panel"
        result = lint_journey(permit_declaration)
        assert _messages(result.errors) == ['Page "confirmation" components must be an array']
