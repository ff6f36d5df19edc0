"""
Validation result models - Core layer

Issues produced while checking a journey declaration, and field errors
produced while checking submitted form data.
"""

from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..exceptions import JourneyLogicError, JourneyReferenceError, JourneySchemaError


IssueType = Literal["schema", "reference", "logic"]
Severity = Literal["error", "warning"]


ISSUE_EXCEPTIONS = {
    "schema": JourneySchemaError,
    "reference": JourneyReferenceError,
    "logic": JourneyLogicError,
}


class ValidationIssue(BaseModel):
    """
    One problem found in a journey declaration.

    Attributes:
        type: schema (shape violation), reference (dangling id) or logic
            (structurally valid but semantically wrong)
        severity: error blocks publishing, warning is advisory
        journey_id: Journey the issue belongs to, when known
        page_id: Page the issue belongs to, when page-scoped
        component_index: Position of the offending component on its page
        message: Human readable description
        suggestion: Remediation hint
    """
    model_config = ConfigDict(validate_by_name=True, frozen=True)

    type: IssueType
    severity: Severity
    journey_id: Optional[str] = Field(default=None, alias="journeyId")
    page_id: Optional[str] = Field(default=None, alias="pageId")
    component_index: Optional[int] = Field(default=None, alias="componentIndex")
    message: str
    suggestion: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Wire form (camelCase, unset location fields omitted)"""
        return self.model_dump(by_alias=True, exclude_none=True)


class ValidationSummary(BaseModel):
    """Aggregate counts collected during journey validation"""
    model_config = ConfigDict(validate_by_name=True)

    total_journeys: int = Field(default=0, alias="totalJourneys")
    valid_journeys: int = Field(default=0, alias="validJourneys")
    total_pages: int = Field(default=0, alias="totalPages")
    total_components: int = Field(default=0, alias="totalComponents")
    valid_components: int = Field(default=0, alias="validComponents")
    invalid_components: int = Field(default=0, alias="invalidComponents")
    component_types: Dict[str, int] = Field(default_factory=dict, alias="componentTypes")
    input_components: int = Field(default=0, alias="inputComponents")
    components_with_validation: int = Field(default=0, alias="componentsWithValidation")

    @property
    def validation_coverage_percent(self) -> int:
        """Share of input components that declare a validation block"""
        if self.input_components == 0:
            return 0
        return round(self.components_with_validation / self.input_components * 100)

    def merge(self, other: "ValidationSummary") -> None:
        """Add another summary's counts into this one"""
        self.total_journeys += other.total_journeys
        self.valid_journeys += other.valid_journeys
        self.total_pages += other.total_pages
        self.total_components += other.total_components
        self.valid_components += other.valid_components
        self.invalid_components += other.invalid_components
        self.input_components += other.input_components
        self.components_with_validation += other.components_with_validation
        for component_type, count in other.component_types.items():
            self.component_types[component_type] = self.component_types.get(component_type, 0) + count

    def to_dict(self) -> Dict[str, Any]:
        result = self.model_dump(by_alias=True)
        result["validationCoveragePercent"] = self.validation_coverage_percent
        return result


class ValidationResult(BaseModel):
    """Outcome of validating one or more journey declarations"""
    model_config = ConfigDict(validate_by_name=True)

    is_valid: bool = Field(alias="isValid")
    errors: List[ValidationIssue] = Field(default_factory=list)
    warnings: List[ValidationIssue] = Field(default_factory=list)
    summary: ValidationSummary = Field(default_factory=ValidationSummary)

    @classmethod
    def from_issues(cls, issues: List[ValidationIssue],
                    summary: Optional[ValidationSummary] = None) -> "ValidationResult":
        """Split issues by severity; valid iff there are no errors"""
        errors = [issue for issue in issues if issue.severity == "error"]
        warnings = [issue for issue in issues if issue.severity == "warning"]
        return cls(
            is_valid=not errors,
            errors=errors,
            warnings=warnings,
            summary=summary or ValidationSummary()
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isValid": self.is_valid,
            "errors": [issue.to_dict() for issue in self.errors],
            "warnings": [issue.to_dict() for issue in self.warnings],
            "summary": self.summary.to_dict()
        }

    def raise_for_errors(self) -> None:
        """
        Raise the exception matching the first error's type, if any.

        Raises:
            JourneySchemaError, JourneyReferenceError or JourneyLogicError
        """
        if self.is_valid:
            return
        first = self.errors[0]
        location = f" (page {first.page_id})" if first.page_id else ""
        more = f" and {len(self.errors) - 1} more error(s)" if len(self.errors) > 1 else ""
        raise ISSUE_EXCEPTIONS[first.type](f"{first.message}{location}{more}")

    def to_report(self) -> Dict[str, Any]:
        """Report shape consumed by external reporting tools"""
        return {
            "errors": [issue.to_dict() for issue in self.errors],
            "warnings": [issue.to_dict() for issue in self.warnings],
            "summary": {
                "totalPages": self.summary.total_pages,
                "totalComponents": self.summary.total_components,
                "componentTypes": dict(self.summary.component_types),
                "validationCoveragePercent": self.summary.validation_coverage_percent
            }
        }


class FieldError(BaseModel):
    """A submitted value that failed its constraint"""
    model_config = ConfigDict(frozen=True)

    field: str
    message: str


class DataValidationResult(BaseModel):
    """Outcome of checking submitted form data"""
    success: bool
    errors: List[FieldError] = Field(default_factory=list)

    @classmethod
    def from_errors(cls, errors: List[FieldError]) -> "DataValidationResult":
        return cls(success=not errors, errors=errors)

    def error_map(self) -> Dict[str, str]:
        """Field -> message, keeping the first message reported for a field"""
        result: Dict[str, str] = {}
        for error in self.errors:
            result.setdefault(error.field, error.message)
        return result

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"success": self.success}
        if not self.success:
            result["errors"] = [error.model_dump() for error in self.errors]
        return result


def field_errors(error: ValidationError, prefix: Optional[str] = None) -> List[FieldError]:
    """
    One FieldError per pydantic error, located by its dotted path.

    A part error on ``dateOfBirth`` comes back as ``dateOfBirth.day``.
    """
    errors = []
    for detail in error.errors():
        path = [prefix] if prefix else []
        path.extend(str(part) for part in detail["loc"])
        errors.append(FieldError(field=".".join(path), message=detail["msg"]))
    return errors
