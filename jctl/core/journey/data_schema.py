"""
Dynamic data-validation schema builder - Core layer

Turns a page's (or a whole journey's) input components into a validator
for submitted form data. Each input component contributes one field to a
pydantic model built with create_model, keyed by its field name; content
components contribute nothing.
"""

import re
from typing import Annotated, Any, Callable, Dict, Iterable, List, Mapping, Optional, Set, Tuple, Union
from loguru import logger
from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    ValidationError,
    WrapValidator,
    create_model,
)
from pydantic_core import PydanticCustomError

from .component_models import (
    BaseComponent,
    ComponentType,
    InputComponent,
    InputKind,
    InputValidation,
    ErrorMessages,
    component_registry,
)
from .field_catalog import (
    DATE_PARTS,
    NAMED_PATTERNS,
    DateParts,
    DateRule,
    FieldCatalog,
    FieldMetadata,
    PatternCheck,
    TextRule,
    compose,
    get_default_catalog,
)
from .journey_models import Journey
from .validation_models import DataValidationResult, field_errors


ISO_DATE_PATTERN = r"\d{4}-\d{2}-\d{2}"

# Input types whose value format is implied by the type itself
IMPLIED_PATTERNS = {
    ComponentType.EMAIL: "email",
    ComponentType.TEL: "phone",
}


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple)):
        return len(value) == 0
    if isinstance(value, Mapping):
        return not any(str(part or "").strip() for part in value.values())
    return False


class FieldConstraint(BaseModel):
    """
    Constraint on one submitted field.

    ``annotation`` is the pydantic type of the field: empty values fail
    with the required message (or become None when optional), anything
    else is checked against ``value_type``.

    Attributes:
        field: Submitted data key
        label: Field label used to build default messages
        required: Whether an empty value fails
        messages: Per-check overrides declared on the component
        catalog_entry: Field catalog metadata when the field has a rule
    """
    model_config = ConfigDict(frozen=True)

    field: str
    label: str = ""
    required: bool = True
    messages: ErrorMessages = Field(default_factory=ErrorMessages)
    catalog_entry: Optional[FieldMetadata] = None

    def as_optional(self) -> "FieldConstraint":
        return self.model_copy(update={"required": False})

    def required_message(self) -> str:
        if self.messages.required:
            return self.messages.required
        return f"Enter {self.label.lower()}" if self.label else "Enter a value"

    def _prepare(self, value: Any) -> Any:
        if _is_empty(value):
            if self.required:
                raise PydanticCustomError("missing", self.required_message())
            return None
        return self.prepare_value(value)

    def prepare_value(self, value: Any) -> Any:
        return value

    @property
    def value_type(self) -> Any:
        raise NotImplementedError

    @property
    def annotation(self) -> Any:
        return Annotated[Optional[self.value_type], BeforeValidator(self._prepare)]


class TextConstraint(FieldConstraint):
    """Non-empty, then length bounds, then format; first failure wins"""
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    pattern_checks: Tuple[PatternCheck, ...] = ()

    def prepare_value(self, value: Any) -> str:
        if not isinstance(value, str):
            raise PydanticCustomError("string_type", self.messages.invalid or "Enter a valid value")
        return value.strip()

    def _check_length(self, value: str) -> str:
        if self.min_length is not None and len(value) < self.min_length:
            raise PydanticCustomError(
                "string_too_short", self.messages.min_length or f"Must be at least {self.min_length} characters")
        if self.max_length is not None and len(value) > self.max_length:
            raise PydanticCustomError(
                "string_too_long", self.messages.max_length or f"Must be {self.max_length} characters or less")
        return value

    @property
    def value_type(self) -> Any:
        checks = self.pattern_checks
        if self.messages.pattern:
            checks = tuple(check.model_copy(update={"message": self.messages.pattern}) for check in checks)
        if self.catalog_entry is not None and isinstance(self.catalog_entry.validator, TextRule):
            checks += self.catalog_entry.validator.checks
        return compose(str, AfterValidator(self._check_length), *(AfterValidator(check.check) for check in checks))


class ChoiceConstraint(FieldConstraint):
    """Value must be one of the declared option values"""
    options: Tuple[str, ...] = ()

    def required_message(self) -> str:
        if self.messages.required:
            return self.messages.required
        return f"Select {self.label.lower()}" if self.label else "Select an option"

    def _invalid(self) -> PydanticCustomError:
        return PydanticCustomError("invalid_choice", self.messages.invalid or "Select a valid option")

    def _member(self, value: str) -> str:
        if value not in self.options:
            raise self._invalid()
        return value

    def _as_invalid(self, value: Any, handler: Callable[[Any], Any]) -> Any:
        try:
            return handler(value)
        except ValidationError:
            raise self._invalid()

    @property
    def option_type(self) -> Any:
        return Annotated[str, AfterValidator(self._member)]

    @property
    def value_type(self) -> Any:
        return Annotated[self.option_type, WrapValidator(self._as_invalid)]


class MultiChoiceConstraint(ChoiceConstraint):
    """Value must be a list whose every element is a declared option value"""

    @property
    def value_type(self) -> Any:
        return Annotated[List[self.option_type], WrapValidator(self._as_invalid)]


class DateConstraint(FieldConstraint):
    """
    Value must be an ISO date string or a {day, month, year} record.

    Range checks only apply when the field catalog has a date rule for
    the field; each failing part is then reported as ``field.part``.
    """

    def prepare_value(self, value: Any) -> Dict[str, str]:
        invalid = PydanticCustomError(
            "date_type", self.messages.invalid or self.messages.pattern or "Enter a valid date")
        if isinstance(value, str):
            if re.fullmatch(ISO_DATE_PATTERN, value.strip()) is None:
                raise invalid
            year, month, day = value.strip().split("-")
            return {"day": day, "month": month, "year": year}
        if isinstance(value, Mapping) and all(isinstance(value.get(part), (str, int)) for part in DATE_PARTS):
            return {part: str(value[part]) for part in DATE_PARTS}
        raise invalid

    @property
    def value_type(self) -> Any:
        if self.catalog_entry is not None and isinstance(self.catalog_entry.validator, DateRule):
            return DateParts
        return Dict[str, str]


def is_required(component: InputComponent) -> bool:
    """
    Whether a component's field must be filled in.

    An explicit ``validation.required`` decides. Without one, fields whose
    label or hint mentions "optional" are optional and the rest required.
    """
    if component.validation is not None and component.validation.required is not None:
        return component.validation.required
    hint = getattr(component.props, "hint", None) or ""
    return "optional" not in f"{component.label} {hint}".lower()


def _pattern_checks(component: InputComponent, validation: InputValidation) -> Tuple[PatternCheck, ...]:
    checks: List[PatternCheck] = []
    pattern_name = validation.pattern
    if pattern_name is None:
        pattern_name = IMPLIED_PATTERNS.get(component.component_type)
        input_type = getattr(component.props, "input_type", None)
        if pattern_name is None and input_type in ("email", "tel"):
            pattern_name = "email" if input_type == "email" else "phone"

    if pattern_name is not None:
        check = NAMED_PATTERNS.get(pattern_name)
        if check is None:
            logger.warning(f"Unknown validation pattern '{pattern_name}' on field {component.field_name}; skipped")
        else:
            checks.append(check)

    if validation.custom_pattern:
        checks.append(PatternCheck(pattern=validation.custom_pattern, message="Invalid format"))
    return tuple(checks)


def _text_constraint(component: InputComponent, base: Dict[str, Any]) -> FieldConstraint:
    validation = component.validation or InputValidation()
    max_length = validation.max_length
    if max_length is None:
        max_length = getattr(component.props, "maxlength", None)
    return TextConstraint(
        **base,
        min_length=validation.min_length,
        max_length=max_length,
        pattern_checks=_pattern_checks(component, validation),
    )


def _choice_constraint(component: InputComponent, base: Dict[str, Any]) -> FieldConstraint:
    return ChoiceConstraint(**base, options=tuple(component.option_values))


def _multi_choice_constraint(component: InputComponent, base: Dict[str, Any]) -> FieldConstraint:
    return MultiChoiceConstraint(**base, options=tuple(component.option_values))


def _date_constraint(component: InputComponent, base: Dict[str, Any]) -> FieldConstraint:
    return DateConstraint(**base)


CONSTRAINT_FACTORIES: Dict[InputKind, Callable[[InputComponent, Dict[str, Any]], FieldConstraint]] = {
    InputKind.TEXT: _text_constraint,
    InputKind.SINGLE_CHOICE: _choice_constraint,
    InputKind.MULTI_CHOICE: _multi_choice_constraint,
    InputKind.DATE: _date_constraint,
}


def build_constraint(component: InputComponent, catalog: FieldCatalog) -> FieldConstraint:
    """Derive the data constraint for one input component"""
    entry = catalog.lookup(component.field_name)
    base = {
        "field": component.field_name,
        "label": component.label,
        "required": is_required(component),
        "messages": (component.validation.error_messages if component.validation else None) or ErrorMessages(),
        "catalog_entry": entry if isinstance(entry, FieldMetadata) else None,
    }
    return CONSTRAINT_FACTORIES[component.input_kind](component, base)


class SubmittedData(BaseModel):
    """Base of the models built for submitted form data"""
    model_config = ConfigDict(frozen=True, validate_default=True)


class DataValidator:
    """
    Checks a submission against a set of field constraints.

    The constraints become the fields of one pydantic model. Model fields
    are named positionally and aliased to the submitted keys, so any key
    (including ones clashing with BaseModel attributes) can be validated.
    """

    def __init__(self, constraints: Mapping[str, FieldConstraint]):
        self.constraints: Dict[str, FieldConstraint] = dict(constraints)
        self.model = create_model(
            "PageSubmission",
            __base__=SubmittedData,
            **{
                f"field_{index}": (constraint.annotation, Field(default=None, alias=name))
                for index, (name, constraint) in enumerate(self.constraints.items())
            },
        )

    @property
    def fields(self) -> List[str]:
        return list(self.constraints)

    @property
    def required_fields(self) -> Set[str]:
        return {name for name, constraint in self.constraints.items() if constraint.required}

    def partial(self) -> "DataValidator":
        """Same constraints with every field optional"""
        return DataValidator({name: constraint.as_optional() for name, constraint in self.constraints.items()})

    def check(self, submission: Mapping[str, Any]) -> DataValidationResult:
        try:
            self.model.model_validate(dict(submission))
        except ValidationError as e:
            return DataValidationResult.from_errors(field_errors(e))
        return DataValidationResult.from_errors([])


def _typed_components(components: Iterable[Union[BaseComponent, Mapping[str, Any]]]) -> List[BaseComponent]:
    typed = []
    for component in components:
        if isinstance(component, BaseComponent):
            typed.append(component)
        else:
            typed.append(component_registry.validate(component))
    return typed


def _collect_constraints(components: Iterable[BaseComponent], catalog: FieldCatalog,
                         constraints: Dict[str, FieldConstraint]) -> None:
    for component in components:
        if not isinstance(component, InputComponent):
            continue
        name = component.field_name
        if name in constraints:
            # First declaration of a shared field wins
            continue
        constraints[name] = build_constraint(component, catalog)


def build_page_validator(components: Iterable[Union[BaseComponent, Mapping[str, Any]]],
                         catalog: Optional[FieldCatalog] = None) -> DataValidator:
    """
    Build a data validator from a page's components.

    Raw component declarations are validated against the component schemas
    first (JourneySchemaError on failure).
    """
    constraints: Dict[str, FieldConstraint] = {}
    _collect_constraints(_typed_components(components), catalog or get_default_catalog(), constraints)
    return DataValidator(constraints)


def build_journey_validator(journey: Journey, catalog: Optional[FieldCatalog] = None) -> DataValidator:
    """
    Build a validator over every page of a journey.

    All fields are optional so partially collected data can be rechecked.
    """
    catalog = catalog or get_default_catalog()
    constraints: Dict[str, FieldConstraint] = {}
    for page in journey.pages.values():
        _collect_constraints(page.components, catalog, constraints)
    return DataValidator(constraints).partial()
