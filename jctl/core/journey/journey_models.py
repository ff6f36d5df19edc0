"""
Journey models and types - Core layer

Two views of a journey declaration:
- JourneyShape: the loose structural shape checked before anything else
  (components are still untyped dicts)
- Journey: the typed runtime model used for data validation and routing
"""

from typing import Any, Callable, Dict, List, Literal, Mapping, Optional, Union
from pydantic import ConfigDict, Field, ValidationError, model_validator

from ..exceptions import JourneySchemaError
from .component_models import CamelModel, Component, InputComponent, InputKind


Operator = Literal[
    "equals",
    "not_equals",
    "notEquals",
    "contains",
    "not_contains",
    "greater_than",
    "greaterThan",
    "less_than",
    "lessThan",
    "isEmpty",
    "isNotEmpty",
]

# Python-declared journeys may compute the next page or validate a page in code
NextPageResolver = Callable[[Dict[str, Any]], Optional[str]]
PageValidator = Callable[[Dict[str, Any]], Optional[Dict[str, str]]]


class RouteCondition(CamelModel):
    """Test applied to one submitted field"""
    field: str
    operator: Operator = "equals"
    value: Any = None


class RouteRule(CamelModel):
    """Send the user to ``goto`` when ``when`` holds"""
    when: RouteCondition
    goto: str
    priority: int = 0


class ConditionalRouting(CamelModel):
    """Ordered routing rules with an optional fallback page"""
    conditions: List[RouteRule] = Field(default_factory=list)
    default: Optional[str] = None

    def targets(self) -> List[str]:
        targets = [rule.goto for rule in self.conditions]
        if self.default:
            targets.append(self.default)
        return targets


def routing_field(components: List[Any]) -> Optional[str]:
    """
    Field a value->page routing map is keyed on.

    The first radios/select component wins, else the first input component.
    Accepts raw declaration dicts or typed components.
    """
    if not isinstance(components, (list, tuple)):
        return None

    def describe(component: Any) -> tuple[Optional[str], Optional[str]]:
        if isinstance(component, InputComponent):
            return component.type, component.field_name
        if isinstance(component, Mapping):
            props = component.get("props") or {}
            name = props.get("name") if isinstance(props, Mapping) else None
            return component.get("type"), name or component.get("id")
        return getattr(component, "type", None), None

    described = [describe(component) for component in components]
    for component_type, name in described:
        if component_type in ("radios", "select") and name:
            return name
    for component_type, name in described:
        if component_type in ("textInput", "email", "tel", "textarea", "dateInput", "checkboxes") and name:
            return name
    return None


def normalize_conditional_routing(raw: Any, components: List[Any]) -> Any:
    """
    Convert the value->page shorthand into the canonical rule list.

    ``{"yes": "page-a", "no": "page-b"}`` becomes equals-conditions on the
    page's routing field, and a "default" key becomes the fallback page.
    Anything already canonical (a "conditions" key) or malformed is returned
    untouched for the model to validate.
    """
    if not isinstance(raw, Mapping) or "conditions" in raw:
        return raw

    routes = {value: target for value, target in raw.items() if value != "default"}
    normalized: Dict[str, Any] = {"conditions": [], "default": raw.get("default")}
    if not routes:
        return normalized

    field = routing_field(components)
    if field is None:
        raise ValueError("conditionalRouting value map needs an input component to route on")

    normalized["conditions"] = [
        {"when": {"field": field, "operator": "equals", "value": value}, "goto": target}
        for value, target in routes.items()
    ]
    return normalized


# ==============================================================================
# Landing page and journey index
# ==============================================================================

class LandingPageSection(CamelModel):
    type: Literal["paragraph", "heading", "list", "insetText", "warningText", "details"]
    content: Union[str, List[str]]
    level: Optional[Literal["s", "m", "l", "xl"]] = None
    summary: Optional[str] = None
    list_type: Optional[Literal["bullet", "number"]] = None


class LandingPage(CamelModel):
    title: str
    lead: str
    sections: List[LandingPageSection]
    start_button_text: Optional[str] = None
    start_button_href: str


class JourneyMetadata(CamelModel):
    """One entry of the journey index file"""
    id: str
    name: str
    description: str
    slug: str
    department: str
    department_slug: str
    enabled: bool = True


class JourneyIndex(CamelModel):
    journeys: List[JourneyMetadata]

    def enabled_ids(self) -> List[str]:
        return [journey.id for journey in self.journeys if journey.enabled]


# ==============================================================================
# Structural shape (declaration checks)
# ==============================================================================

class ComponentConfig(CamelModel):
    """Untyped component declaration; props are checked per type later"""
    model_config = ConfigDict(extra="allow")

    type: str
    props: Dict[str, Any] = Field(default_factory=dict)


class PageShape(CamelModel):
    id: str
    title: str
    components: List[ComponentConfig]
    next_page: Optional[str] = None
    previous_page: Optional[str] = None
    validation: Optional[str] = None
    conditional_routing: Optional[ConditionalRouting] = None

    @model_validator(mode="before")
    @classmethod
    def _normalize_routing(cls, data: Any) -> Any:
        if isinstance(data, Mapping) and data.get("conditionalRouting") is not None:
            data = dict(data)
            data["conditionalRouting"] = normalize_conditional_routing(
                data["conditionalRouting"], data.get("components") or []
            )
        return data


class JourneyShape(CamelModel):
    id: str
    name: str
    landing_page: Optional[LandingPage] = None
    start_page: str
    pages: Dict[str, PageShape]
    check_your_answers_page: Optional[str] = None
    completion_page: Optional[str] = None


# ==============================================================================
# Runtime model
# ==============================================================================

class JourneyPage(CamelModel):
    """
    One screen of a journey.

    Attributes:
        id: Page id, equal to its key in Journey.pages
        title: Rendered as the page's main heading
        components: Typed components in display order
        next_page: Static next page id, or a resolver computing it from data
        previous_page: Page the back link points to
        validation: Named page rule, or a callable returning field errors
        conditional_routing: Rules checked before next_page
    """
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    components: List[Component] = Field(default_factory=list)
    next_page: Optional[Union[str, NextPageResolver]] = None
    previous_page: Optional[str] = None
    validation: Optional[Union[str, PageValidator]] = None
    conditional_routing: Optional[ConditionalRouting] = None

    @model_validator(mode="before")
    @classmethod
    def _normalize_routing(cls, data: Any) -> Any:
        if isinstance(data, Mapping):
            raw = data.get("conditionalRouting", data.get("conditional_routing"))
            if raw is not None:
                data = {k: v for k, v in data.items() if k not in ("conditionalRouting", "conditional_routing")}
                data["conditionalRouting"] = normalize_conditional_routing(raw, data.get("components") or [])
        return data

    @property
    def input_components(self) -> List[InputComponent]:
        return [component for component in self.components if isinstance(component, InputComponent)]

    def has_field(self, field_name: str) -> bool:
        return any(
            field_name in (component.field_name, component.props.id)
            for component in self.input_components
        )

    def component_for(self, field_name: str) -> Optional[InputComponent]:
        for component in self.input_components:
            if component.field_name == field_name:
                return component
        return None

    def multi_choice_fields(self) -> List[str]:
        return [
            component.field_name for component in self.input_components
            if component.input_kind == InputKind.MULTI_CHOICE
        ]


class Journey(CamelModel):
    """A complete multi-page form flow"""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    landing_page: Optional[LandingPage] = None
    start_page: str
    pages: Dict[str, JourneyPage]
    check_your_answers_page: Optional[str] = None
    completion_page: Optional[str] = None

    @classmethod
    def from_declaration(cls, declaration: Mapping[str, Any]) -> "Journey":
        """
        Build the runtime model from a parsed journey declaration.

        Raises:
            JourneySchemaError: declaration does not fit the journey schema
        """
        try:
            return cls.model_validate(declaration)
        except ValidationError as e:
            journey_id = declaration.get("id") if isinstance(declaration, Mapping) else None
            raise JourneySchemaError(f"Journey '{journey_id}' is not valid: {e}")

    def page(self, page_id: str) -> Optional[JourneyPage]:
        return self.pages.get(page_id)

    def find_page_for_field(self, field_name: str) -> Optional[str]:
        """First page (declaration order) holding an input for the field"""
        for page_id, page in self.pages.items():
            if page.has_field(field_name):
                return page_id
        return None
