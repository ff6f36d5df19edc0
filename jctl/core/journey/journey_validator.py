"""
Journey declaration validator - Core layer

Checks a parsed journey declaration against the journey shape, the
component schemas and the field catalog. Recoverable problems are
collected as ValidationIssues; nothing here raises for them.
"""

from typing import Any, Dict, List, Mapping, Optional
from loguru import logger
from pydantic import ValidationError

from ..exceptions import JourneySchemaError
from .component_models import (
    INPUT_TYPES,
    ComponentSchemaRegistry,
    component_registry,
    declared_field_name,
)
from .field_catalog import NAMED_PATTERNS, FieldCatalog, MissingField, get_default_catalog
from .journey_models import JourneyIndex, JourneyShape
from .page_rules import MissingRule, get_page_rule
from .validation_models import ValidationIssue, ValidationResult, ValidationSummary


class JourneyValidator:
    """
    Validates journey declarations.

    Order of checks:
    1. Journey shape. A failure here stops validation of that journey.
    2. Per page: component schemas, duplicate headings, page references,
       routing targets, named page rules and field catalog coverage.
    3. Journey-level references (start, check answers, completion pages).
    """

    def __init__(self, catalog: Optional[FieldCatalog] = None,
                 registry: Optional[ComponentSchemaRegistry] = None):
        self.catalog = catalog or get_default_catalog()
        self.registry = registry or component_registry

    def validate(self, declaration: Any, journey_id: Optional[str] = None) -> ValidationResult:
        issues, summary = self.collect(declaration, journey_id)
        return ValidationResult.from_issues(issues, summary)

    def collect(self, declaration: Any,
                journey_id: Optional[str] = None) -> tuple[List[ValidationIssue], ValidationSummary]:
        """Run every check, returning issues in discovery order and the counts"""
        summary = ValidationSummary(total_journeys=1)
        if journey_id is None and isinstance(declaration, Mapping):
            declared_id = declaration.get("id")
            journey_id = declared_id if isinstance(declared_id, str) else None

        try:
            shape = JourneyShape.model_validate(declaration)
        except ValidationError as e:
            logger.debug(f"Journey {journey_id} failed the structural pass")
            return [ValidationIssue(
                type="schema",
                severity="error",
                journey_id=journey_id,
                message=f"Journey schema validation failed: {e}",
                suggestion="Check the journey structure matches the expected schema"
            )], summary

        issues: List[ValidationIssue] = []
        summary.total_pages = len(shape.pages)

        for page_id, page in shape.pages.items():
            raw_components = declaration["pages"][page_id]["components"]
            issues.extend(self._check_components(journey_id, page_id, page.title, raw_components, summary))
            issues.extend(self._check_page_references(journey_id, page_id, page, shape))
            issues.extend(self._check_field_references(journey_id, page_id, raw_components))

        issues.extend(self._check_journey_references(journey_id, shape))

        if not any(issue.severity == "error" for issue in issues):
            summary.valid_journeys = 1
        logger.debug(f"Journey {journey_id}: {len(issues)} issue(s) across {summary.total_pages} page(s)")
        return issues, summary

    def _check_components(self, journey_id: Optional[str], page_id: str, title: str,
                          components: List[Dict[str, Any]],
                          summary: ValidationSummary) -> List[ValidationIssue]:
        issues = []
        for index, component in enumerate(components):
            component_type = component.get("type")
            summary.total_components += 1
            summary.component_types[component_type] = summary.component_types.get(component_type, 0) + 1
            if component_type in INPUT_TYPES:
                summary.input_components += 1
                if component.get("validation"):
                    summary.components_with_validation += 1

            try:
                self.registry.validate(component)
                summary.valid_components += 1
            except JourneySchemaError as e:
                summary.invalid_components += 1
                issues.append(ValidationIssue(
                    type="schema",
                    severity="error",
                    journey_id=journey_id,
                    page_id=page_id,
                    component_index=index,
                    message=f"Component validation failed: {e}",
                    suggestion="Check component props match the expected schema for this component type"
                ))

            if component_type == "heading" and title:
                props = component.get("props") or {}
                heading_text = props.get("text") or props.get("content")
                if heading_text and heading_text == title:
                    issues.append(ValidationIssue(
                        type="logic",
                        severity="error",
                        journey_id=journey_id,
                        page_id=page_id,
                        component_index=index,
                        message=(
                            f'Heading component duplicates the page title "{title}". The page title is '
                            "already rendered as the page's main heading, so this creates two top-level headings."
                        ),
                        suggestion="Remove this heading component or change its text to be different from the page title"
                    ))

            pattern = (component.get("validation") or {}).get("pattern")
            if component_type in INPUT_TYPES and pattern and pattern not in NAMED_PATTERNS:
                issues.append(ValidationIssue(
                    type="reference",
                    severity="warning",
                    journey_id=journey_id,
                    page_id=page_id,
                    component_index=index,
                    message=f'Unknown validation pattern "{pattern}"',
                    suggestion=f"Use one of: {', '.join(NAMED_PATTERNS)}, or a customPattern"
                ))
        return issues

    def _check_page_references(self, journey_id: Optional[str], page_id: str, page: Any,
                               shape: JourneyShape) -> List[ValidationIssue]:
        issues = []
        if page.next_page and page.next_page not in shape.pages:
            issues.append(_missing_page(journey_id, page_id, f'Next page reference "{page.next_page}" does not exist',
                                        page.next_page))
        if page.previous_page and page.previous_page not in shape.pages:
            issues.append(_missing_page(journey_id, page_id,
                                        f'Previous page reference "{page.previous_page}" does not exist',
                                        page.previous_page))
        if page.conditional_routing:
            for target in page.conditional_routing.targets():
                if target not in shape.pages:
                    issues.append(_missing_page(journey_id, page_id,
                                                f'Conditional route target "{target}" does not exist', target))
        if page.validation and isinstance(get_page_rule(page.validation), MissingRule):
            issues.append(ValidationIssue(
                type="reference",
                severity="warning",
                journey_id=journey_id,
                page_id=page_id,
                message=f'Page validation rule "{page.validation}" is not defined',
                suggestion="Use a registered page rule name or remove the validation reference"
            ))
        return issues

    def _check_field_references(self, journey_id: Optional[str], page_id: str,
                                components: List[Dict[str, Any]]) -> List[ValidationIssue]:
        issues = []
        for index, component in enumerate(components):
            if component.get("type") not in INPUT_TYPES:
                continue
            field_name = declared_field_name(component)
            if field_name and isinstance(self.catalog.lookup(field_name), MissingField):
                issues.append(ValidationIssue(
                    type="reference",
                    severity="warning",
                    journey_id=journey_id,
                    page_id=page_id,
                    component_index=index,
                    message=f'Field "{field_name}" has no validation schema defined',
                    suggestion=f'Add a validation rule for "{field_name}" to the field catalog'
                ))
        return issues

    def _check_journey_references(self, journey_id: Optional[str],
                                  shape: JourneyShape) -> List[ValidationIssue]:
        issues = []
        if shape.start_page not in shape.pages:
            issues.append(ValidationIssue(
                type="reference",
                severity="error",
                journey_id=journey_id,
                message=f'Start page "{shape.start_page}" does not exist',
                suggestion=f'Create page "{shape.start_page}" or update the startPage reference'
            ))
        if shape.check_your_answers_page and shape.check_your_answers_page not in shape.pages:
            issues.append(ValidationIssue(
                type="reference",
                severity="error",
                journey_id=journey_id,
                message=f'Check answers page "{shape.check_your_answers_page}" does not exist',
                suggestion=(f'Create page "{shape.check_your_answers_page}" '
                            "or remove the checkYourAnswersPage reference")
            ))
        if shape.completion_page and shape.completion_page not in shape.pages:
            issues.append(ValidationIssue(
                type="reference",
                severity="error",
                journey_id=journey_id,
                message=f'Completion page "{shape.completion_page}" does not exist',
                suggestion=f'Create page "{shape.completion_page}" or remove the completionPage reference'
            ))
        return issues


def _missing_page(journey_id: Optional[str], page_id: str, message: str, target: str) -> ValidationIssue:
    return ValidationIssue(
        type="reference",
        severity="error",
        journey_id=journey_id,
        page_id=page_id,
        message=message,
        suggestion=f'Create page "{target}" or update the reference'
    )


def validate_journey(declaration: Any, journey_id: Optional[str] = None) -> ValidationResult:
    """Validate one journey declaration with the default catalog and registry"""
    return JourneyValidator().validate(declaration, journey_id)


def validate_journey_index(index: Any) -> List[ValidationIssue]:
    """Validate the journey index file shape"""
    try:
        JourneyIndex.model_validate(index)
    except ValidationError as e:
        return [ValidationIssue(
            type="schema",
            severity="error",
            message=f"Journey index schema validation failed: {e}",
            suggestion="Check the journey index structure matches the expected schema"
        )]
    return []


def validate_all_journeys(journeys: Mapping[str, Any], index: Any = None,
                          validator: Optional[JourneyValidator] = None) -> ValidationResult:
    """
    Validate a collection of journeys (journey id -> declaration).

    The index, when given, is validated too and its issues merged in.
    """
    validator = validator or JourneyValidator()
    issues: List[ValidationIssue] = []
    summary = ValidationSummary()

    if index is not None:
        issues.extend(validate_journey_index(index))

    for journey_id, declaration in journeys.items():
        journey_issues, journey_summary = validator.collect(declaration, journey_id)
        issues.extend(journey_issues)
        summary.merge(journey_summary)

    return ValidationResult.from_issues(issues, summary)


def format_validation_results(result: ValidationResult) -> str:
    """Render a validation result for console output"""
    lines = ["🔍 Journey Validation Results", "═" * 50, "📊 Summary:"]
    summary = result.summary
    lines.append(f"   Journeys: {summary.valid_journeys}/{summary.total_journeys} valid")
    lines.append(f"   Pages: {summary.total_pages}")
    lines.append(f"   Components: {summary.total_components}")
    lines.append(f"   Validation coverage: {summary.validation_coverage_percent}%")

    if summary.component_types:
        lines.append("   Component Types:")
        for component_type, count in sorted(summary.component_types.items(), key=lambda item: (-item[1], item[0])):
            lines.append(f"     {component_type}: {count}")

    for heading, issues in ((f"❌ Errors ({len(result.errors)}):", result.errors),
                            (f"⚠️  Warnings ({len(result.warnings)}):", result.warnings)):
        if not issues:
            continue
        lines.append("")
        lines.append(heading)
        for number, issue in enumerate(issues, 1):
            lines.append(f"   {number}. {issue.message}")
            if issue.journey_id:
                lines.append(f"      Journey: {issue.journey_id}")
            if issue.page_id:
                lines.append(f"      Page: {issue.page_id}")
            if issue.component_index is not None:
                lines.append(f"      Component: {issue.component_index}")
            if issue.suggestion:
                lines.append(f"      💡 {issue.suggestion}")

    if result.is_valid:
        lines.append("")
        lines.append("✅ All journeys are valid!")

    return "\n".join(lines)
