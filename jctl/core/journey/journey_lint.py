"""
Journey lint checks - Core layer

House-style checks for hand-written or generated journey files, run on the
raw declaration before (or alongside) the schema validator. Conventions
come from EngineConfig: the check-your-answers page id and the verbs a
required-field message should start with.
"""

import re
from typing import Any, List, Mapping, Optional
from loguru import logger

from ..config import EngineConfig
from .component_models import INPUT_TYPES
from .validation_models import ValidationIssue, ValidationResult, ValidationSummary


KEBAB_CASE = re.compile(r"[a-z0-9]+(-[a-z0-9]+)*")


def is_kebab_case(page_id: str) -> bool:
    return KEBAB_CASE.fullmatch(page_id) is not None


def to_kebab_case(page_id: str) -> str:
    split = re.sub(r"(?<=[a-z0-9])(?=[A-Z])", "-", page_id)
    return re.sub(r"[^a-z0-9]+", "-", split.lower()).strip("-")


def label_text(props: Mapping[str, Any]) -> str:
    return str(props.get("label") or props.get("legend") or "value").lower()


class JourneyLinter:
    """Collects house-style issues for one raw journey declaration"""

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()
        self._journey_id: Optional[str] = None

    def lint(self, declaration: Any, journey_id: Optional[str] = None) -> ValidationResult:
        summary = ValidationSummary(total_journeys=1)
        if not isinstance(declaration, Mapping):
            return ValidationResult.from_issues([ValidationIssue(
                type="schema",
                severity="error",
                journey_id=journey_id,
                message="Journey declaration must be an object",
            )], summary)

        declared_id = declaration.get("id")
        journey_id = journey_id or (declared_id if isinstance(declared_id, str) else None)
        self._journey_id = journey_id
        issues = self._check_journey(declaration)

        pages = declaration.get("pages")
        if not isinstance(pages, Mapping):
            issues.append(self._issue("schema", "error", 'Missing "pages" object',
                                      'Add "pages": {} with page definitions'))
            return ValidationResult.from_issues(issues, summary)

        summary.total_pages = len(pages)
        issues.extend(self._check_required_pages(declaration, pages))
        for page_id, page in pages.items():
            issues.extend(self._check_page(page_id, page, pages, summary))

        if not any(issue.severity == "error" for issue in issues):
            summary.valid_journeys = 1
        logger.debug(f"Lint of {journey_id}: {len(issues)} issue(s)")
        return ValidationResult.from_issues(issues, summary)

    def _issue(self, issue_type: str, severity: str, message: str, suggestion: Optional[str] = None,
               page_id: Optional[str] = None, component_index: Optional[int] = None) -> ValidationIssue:
        return ValidationIssue(
            type=issue_type,
            severity=severity,
            journey_id=self._journey_id,
            page_id=page_id,
            component_index=component_index,
            message=message,
            suggestion=suggestion,
        )

    def _check_journey(self, declaration: Mapping[str, Any]) -> List[ValidationIssue]:
        issues = []
        expected_cya = self.config.check_your_answers_page
        for key, example in (("id", "journey-name"), ("name", "Human Readable Name")):
            value = declaration.get(key)
            if not value:
                issues.append(self._issue("schema", "error", f'Missing "{key}" property',
                                          f'Add "{key}": "{example}" to the root of the JSON'))
            elif not isinstance(value, str):
                issues.append(self._issue("schema", "error", f'"{key}" must be a string, got {value!r}',
                                          f'Use "{key}": "{example}"'))

        cya = declaration.get("checkYourAnswersPage")
        if not cya:
            issues.append(self._issue("schema", "error", 'Missing "checkYourAnswersPage" property',
                                      f'Add "checkYourAnswersPage": "{expected_cya}" to the root of the JSON'))
        elif cya != expected_cya:
            issues.append(self._issue("logic", "error",
                                      f'checkYourAnswersPage should be "{expected_cya}", got "{cya}"',
                                      f'Change to "checkYourAnswersPage": "{expected_cya}"'))

        if not declaration.get("completionPage"):
            issues.append(self._issue("schema", "error", 'Missing "completionPage" property',
                                      f'Add "completionPage": "{self.config.default_completion_page}" '
                                      "to the root of the JSON"))
        return issues

    def _check_required_pages(self, declaration: Mapping[str, Any],
                              pages: Mapping[str, Any]) -> List[ValidationIssue]:
        issues = []
        expected_cya = self.config.check_your_answers_page
        if expected_cya not in pages:
            issues.append(self._issue("reference", "error", f'Missing "{expected_cya}" page in pages object',
                                      f'Add a page with id "{expected_cya}" to the pages object'))
        completion = declaration.get("completionPage")
        if isinstance(completion, str) and completion and completion not in pages:
            issues.append(self._issue("reference", "error", f'Missing "{completion}" page in pages object',
                                      f'Add a page with id "{completion}" to the pages object'))
        return issues

    def _check_page(self, page_id: str, page: Any, pages: Mapping[str, Any],
                    summary: ValidationSummary) -> List[ValidationIssue]:
        if not isinstance(page_id, str):
            return [self._issue("schema", "error", f"Page key {page_id!r} must be a string",
                                f'Quote the key: "{page_id}"')]
        if not isinstance(page, Mapping):
            return [self._issue("schema", "error", f'Page "{page_id}" must be an object', page_id=page_id)]

        issues = []
        declared_id = page.get("id")
        if not declared_id:
            issues.append(self._issue("schema", "error", f'Page "{page_id}" missing "id" property',
                                      f'Add "id": "{page_id}" to the page object', page_id=page_id))
        elif declared_id != page_id:
            issues.append(self._issue("logic", "warning",
                                      f'Page key "{page_id}" doesn\'t match page.id "{declared_id}"',
                                      f'Make them consistent: "{page_id}"', page_id=page_id))

        if not page.get("title"):
            issues.append(self._issue("schema", "warning", f'Page "{page_id}" missing "title" property',
                                      "Add a descriptive title for the page", page_id=page_id))

        if not is_kebab_case(page_id):
            issues.append(self._issue("logic", "warning",
                                      f'Page ID "{page_id}" should use kebab-case (lowercase with hyphens)',
                                      f'Rename to: "{to_kebab_case(page_id)}"', page_id=page_id))

        for key in ("nextPage", "previousPage"):
            target = page.get(key)
            if isinstance(target, str) and target and target not in pages:
                issues.append(self._issue("reference", "error",
                                          f'Page "{page_id}" {key} "{target}" doesn\'t exist',
                                          f'Create page "{target}" or fix the {key} reference', page_id=page_id))

        components = page.get("components")
        if not components:
            issues.append(self._issue("schema", "warning", f'Page "{page_id}" has no components',
                                      "Add components array with at least one component", page_id=page_id))
            return issues

        if not isinstance(components, list):
            issues.append(self._issue("schema", "error", f'Page "{page_id}" components must be an array',
                                      "Use a components array", page_id=page_id))
            return issues

        for index, component in enumerate(components):
            summary.total_components += 1
            if isinstance(component, Mapping) and component.get("type") in INPUT_TYPES:
                summary.input_components += 1
                issues.extend(self._check_input(page_id, index, component, summary))
        return issues

    def _check_input(self, page_id: str, index: int, component: Mapping[str, Any],
                     summary: ValidationSummary) -> List[ValidationIssue]:
        issues = []
        component_id = component.get("id")

        def issue(issue_type: str, severity: str, message: str, suggestion: str) -> ValidationIssue:
            return self._issue(issue_type, severity, message, suggestion, page_id=page_id, component_index=index)

        if not component_id:
            issues.append(issue("schema", "error", f'Component on page "{page_id}" missing "id"',
                                "Add unique id to the component"))

        props = component.get("props")
        if not isinstance(props, Mapping):
            issues.append(issue("schema", "error", f'Component "{component_id}" on page "{page_id}" missing "props"',
                                "Add props object with id, name, label"))
            return issues

        if props.get("id") != component_id:
            issues.append(issue("logic", "warning",
                                f'Component "{component_id}": props.id "{props.get("id")}" doesn\'t match component.id',
                                f'Make them consistent: "{component_id}"'))
        if props.get("name") and props.get("name") != component_id:
            issues.append(issue("logic", "warning",
                                f'Component "{component_id}": props.name "{props["name"]}" '
                                "doesn't match component.id",
                                f'Use consistent naming: "{component_id}"'))
        if not (props.get("label") or props.get("legend")):
            issues.append(issue("schema", "error", f'Component "{component_id}" on page "{page_id}" missing props.label',
                                "Add a descriptive label for the field"))

        validation = component.get("validation")
        if not isinstance(validation, Mapping) or not validation:
            issues.append(issue("logic", "warning", f'Component "{component_id}" on page "{page_id}" missing validation',
                                "Add validation object with required and errorMessages"))
            return issues

        summary.components_with_validation += 1
        messages = validation.get("errorMessages")
        if not isinstance(messages, Mapping) or not messages:
            issues.append(issue("logic", "warning", f'Component "{component_id}" validation missing errorMessages',
                                "Add errorMessages object with required, pattern, etc."))
            return issues

        required_message = messages.get("required")
        if validation.get("required") and required_message:
            if not isinstance(required_message, str):
                issues.append(issue("schema", "error",
                                    f'Component "{component_id}" errorMessages.required must be a string',
                                    f'Change to: "Enter {label_text(props)}"'))
            elif not any(required_message.startswith(verb) for verb in self.config.imperative_verbs):
                issues.append(issue("logic", "warning",
                                    f'Component "{component_id}" error message doesn\'t start with '
                                    f'imperative verb: "{required_message}"',
                                    f'Change to: "Enter {label_text(props)}"'))

        field_type = props.get("type") or component.get("type")
        for kind, pattern, description in (("email", "email", "Email"), ("tel", "phone", "Phone")):
            if field_type == kind and not validation.get("pattern"):
                issues.append(issue("logic", "warning", f'{description} field "{component_id}" missing pattern validation',
                                    f'Add "pattern": "{pattern}" to validation'))
        return issues


def lint_journey(declaration: Any, config: Optional[EngineConfig] = None) -> ValidationResult:
    """Lint one raw journey declaration"""
    return JourneyLinter(config).lint(declaration)
