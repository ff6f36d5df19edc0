"""
Component models and schema registry - Core layer

Every page component is a tagged declaration ``{"type": ..., "props": {...}}``.
The set of types is closed; each type has its own props model, and the
union is discriminated on ``type``.
"""

from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Mapping, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, model_validator
from pydantic.alias_generators import to_camel

from ..exceptions import JourneySchemaError


class CamelModel(BaseModel):
    """Base model reading and writing the camelCase JSON wire names"""
    model_config = ConfigDict(alias_generator=to_camel, validate_by_name=True)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class ComponentType(str, Enum):
    """All component types a journey page may declare"""

    # Form inputs
    TEXT_INPUT = "textInput"
    EMAIL = "email"
    TEL = "tel"
    TEXTAREA = "textarea"
    DATE_INPUT = "dateInput"
    RADIOS = "radios"
    CHECKBOXES = "checkboxes"
    SELECT = "select"

    # Content
    HEADING = "heading"
    PARAGRAPH = "paragraph"
    LIST = "list"
    INSET_TEXT = "insetText"
    WARNING_TEXT = "warningText"
    DETAILS = "details"

    # Display
    PANEL = "panel"
    SUMMARY_LIST = "summaryList"
    TABLE = "table"
    NOTIFICATION_BANNER = "notificationBanner"

    # Interactive
    BUTTON = "button"

    # Journey type markers
    DATA_ENTRY = "data-entry"
    DATA_LOOKUP = "data-lookup"
    SUCCESS = "success"


class InputKind(str, Enum):
    """How an input component's submitted value is shaped"""
    TEXT = "text"
    SINGLE_CHOICE = "single_choice"
    MULTI_CHOICE = "multi_choice"
    DATE = "date"


# Input component type -> value shape. Types absent here collect no data.
INPUT_KINDS: Dict[ComponentType, InputKind] = {
    ComponentType.TEXT_INPUT: InputKind.TEXT,
    ComponentType.EMAIL: InputKind.TEXT,
    ComponentType.TEL: InputKind.TEXT,
    ComponentType.TEXTAREA: InputKind.TEXT,
    ComponentType.RADIOS: InputKind.SINGLE_CHOICE,
    ComponentType.SELECT: InputKind.SINGLE_CHOICE,
    ComponentType.CHECKBOXES: InputKind.MULTI_CHOICE,
    ComponentType.DATE_INPUT: InputKind.DATE,
}

INPUT_TYPES = frozenset(component_type.value for component_type in INPUT_KINDS)

Width = Literal["5", "10", "20", "30", "full"]
Size = Literal["s", "m", "l", "xl"]
HeadingLevel = Literal["1", "2", "3", "4", "5", "6"]


# ==============================================================================
# Validation block declared on input components
# ==============================================================================

class ErrorMessages(CamelModel):
    """Per-check error messages overriding the defaults"""
    required: Optional[str] = None
    min_length: Optional[str] = None
    max_length: Optional[str] = None
    pattern: Optional[str] = None
    invalid: Optional[str] = None


class InputValidation(CamelModel):
    """
    Data constraints declared on an input component.

    Attributes:
        required: Whether a value must be supplied. None means not declared.
        min_length / max_length: Length bounds for text values
        pattern: Name of a built-in format (email, phone, postcode, url, ni-number)
        custom_pattern: Regular expression the whole value must match
        error_messages: Messages overriding the defaults per check
    """
    required: Optional[bool] = None
    min_length: Optional[int] = Field(default=None, ge=0)
    max_length: Optional[int] = Field(default=None, ge=0)
    pattern: Optional[str] = None
    custom_pattern: Optional[str] = None
    error_messages: Optional[ErrorMessages] = None


# ==============================================================================
# Props
# ==============================================================================

class BaseProps(CamelModel):
    id: Optional[str] = None
    classes: Optional[str] = None


class TextFieldProps(BaseProps):
    id: str
    name: str
    label: str
    hint: Optional[str] = None
    value: Optional[str] = None
    width: Optional[Width] = None
    autocomplete: Optional[str] = None
    spellcheck: Optional[bool] = None


class TextInputProps(TextFieldProps):
    disabled: Optional[bool] = None
    readonly: Optional[bool] = None
    # HTML input type; "email" and "tel" imply a format check
    input_type: Optional[str] = Field(default=None, alias="type")


class TelProps(BaseProps):
    id: str
    name: str
    label: str
    hint: Optional[str] = None
    value: Optional[str] = None
    width: Optional[Width] = None
    autocomplete: Optional[str] = None


class TextareaProps(BaseProps):
    id: str
    name: str
    label: str
    hint: Optional[str] = None
    value: Optional[str] = None
    rows: Optional[int] = Field(default=None, ge=1, le=20)
    maxlength: Optional[int] = None
    spellcheck: Optional[bool] = None


class DateItem(CamelModel):
    id: str
    name: str
    label: str
    value: Optional[str] = None
    classes: Optional[str] = None


class DateInputProps(BaseProps):
    id: str
    name: str
    legend: str
    hint: Optional[str] = None
    items: Optional[List[DateItem]] = None


class ConditionalReveal(CamelModel):
    # Opaque markup revealed when the option is chosen; never parsed
    html: str


class RadioItem(CamelModel):
    value: str
    text: str
    hint: Optional[str] = None
    checked: Optional[bool] = None
    disabled: Optional[bool] = None
    conditional: Optional[ConditionalReveal] = None


class RadiosProps(BaseProps):
    id: str
    name: str
    legend: str
    hint: Optional[str] = None
    items: List[RadioItem]


class CheckboxItem(CamelModel):
    value: str
    text: str
    hint: Optional[str] = None
    checked: Optional[bool] = None
    disabled: Optional[bool] = None


class CheckboxesProps(BaseProps):
    id: str
    name: str
    legend: str
    hint: Optional[str] = None
    items: List[CheckboxItem]


class SelectItem(CamelModel):
    value: str
    text: str
    selected: Optional[bool] = None
    disabled: Optional[bool] = None


class SelectProps(BaseProps):
    id: str
    name: str
    label: str
    hint: Optional[str] = None
    items: List[SelectItem]


def _require_one_of(props: BaseModel, keys: tuple[str, ...], component: str) -> None:
    if all(getattr(props, key) in (None, "", []) for key in keys):
        quoted = " or ".join(f"'{key}'" for key in keys)
        raise ValueError(f"{component} must have either {quoted} property")


class HeadingProps(BaseProps):
    text: Optional[str] = None
    content: Optional[str] = None
    level: Optional[Size] = None
    size: Optional[Size] = None
    tag: Optional[Literal["h1", "h2", "h3", "h4", "h5", "h6"]] = None
    caption: Optional[str] = None

    @model_validator(mode="after")
    def _text_or_content(self) -> "HeadingProps":
        _require_one_of(self, ("text", "content"), "Heading")
        return self

    @property
    def display_text(self) -> Optional[str]:
        return self.text or self.content


class ParagraphProps(BaseProps):
    text: Optional[str] = None
    content: Optional[str] = None
    lead: Optional[bool] = None

    @model_validator(mode="after")
    def _text_or_content(self) -> "ParagraphProps":
        _require_one_of(self, ("text", "content"), "Paragraph")
        return self


class ListProps(BaseProps):
    content: Optional[List[str]] = None
    items: Optional[List[str]] = None
    list_type: Optional[Literal["bullet", "number"]] = None
    spaced: Optional[bool] = None

    @model_validator(mode="after")
    def _content_or_items(self) -> "ListProps":
        _require_one_of(self, ("content", "items"), "List")
        return self


class InsetTextProps(BaseProps):
    text: Optional[str] = None
    content: Optional[str] = None

    @model_validator(mode="after")
    def _text_or_content(self) -> "InsetTextProps":
        _require_one_of(self, ("text", "content"), "InsetText")
        return self


class WarningTextProps(BaseProps):
    content: str
    icon_fallback_text: Optional[str] = None


class DetailsProps(BaseProps):
    summary: str
    content: str
    open: Optional[bool] = None


class PanelProps(BaseProps):
    title: str
    content: Optional[str] = None
    heading_level: Optional[HeadingLevel] = None


class TextCell(CamelModel):
    text: str
    classes: Optional[str] = None


class HtmlCell(CamelModel):
    text: str
    html: Optional[str] = None
    classes: Optional[str] = None


class ActionLink(CamelModel):
    href: str
    text: str
    visually_hidden_text: Optional[str] = None


class ActionList(CamelModel):
    items: List[ActionLink]


class SummaryRow(CamelModel):
    key: Union[str, TextCell]
    value: Union[str, HtmlCell]
    actions: Optional[ActionList] = None


class CardTitle(CamelModel):
    text: str


class SummaryCard(CamelModel):
    title: Optional[CardTitle] = None
    actions: Optional[ActionList] = None


class SummaryListProps(BaseProps):
    rows: List[SummaryRow]
    card: Optional[SummaryCard] = None


class TableHeadCell(CamelModel):
    text: str
    classes: Optional[str] = None
    colspan: Optional[int] = None
    rowspan: Optional[int] = None


class TableCell(TableHeadCell):
    html: Optional[str] = None


class TableProps(BaseProps):
    caption: Optional[str] = None
    caption_classes: Optional[str] = None
    first_cell_is_header: Optional[bool] = None
    head: Optional[List[TableHeadCell]] = None
    rows: List[List[TableCell]]


class NotificationBannerProps(BaseProps):
    title: str
    content: str
    banner_type: Optional[Literal["success", "important"]] = Field(default=None, alias="type")
    role: Optional[str] = None
    title_heading_level: Optional[HeadingLevel] = None


class ButtonProps(BaseProps):
    text: str
    href: Optional[str] = None
    element: Optional[Literal["a", "button", "input"]] = None
    name: Optional[str] = None
    button_type: Optional[Literal["button", "submit", "reset"]] = Field(default=None, alias="type")
    value: Optional[str] = None
    disabled: Optional[bool] = None
    prevent_double_click: Optional[bool] = None
    is_start_button: Optional[bool] = None


# ==============================================================================
# Components
# ==============================================================================

class BaseComponent(CamelModel):
    """Fields shared by every component declaration"""
    id: Optional[str] = None

    @property
    def component_type(self) -> ComponentType:
        return ComponentType(self.type)

    @property
    def is_input(self) -> bool:
        return self.component_type in INPUT_KINDS


class InputComponent(BaseComponent):
    """Component that collects a value from the user"""
    validation: Optional[InputValidation] = None

    @property
    def input_kind(self) -> InputKind:
        return INPUT_KINDS[self.component_type]

    @property
    def field_name(self) -> str:
        """Key the submitted value is stored under"""
        return self.props.name or self.id or self.props.id

    @property
    def label(self) -> str:
        return getattr(self.props, "label", None) or getattr(self.props, "legend", None) or ""

    @property
    def option_values(self) -> List[str]:
        items = getattr(self.props, "items", None) or []
        return [item.value for item in items if hasattr(item, "value")]


class TextInputComponent(InputComponent):
    type: Literal["textInput"]
    props: TextInputProps


class EmailInputComponent(InputComponent):
    type: Literal["email"]
    props: TextFieldProps


class TelInputComponent(InputComponent):
    type: Literal["tel"]
    props: TelProps


class TextareaComponent(InputComponent):
    type: Literal["textarea"]
    props: TextareaProps


class DateInputComponent(InputComponent):
    type: Literal["dateInput"]
    props: DateInputProps


class RadiosComponent(InputComponent):
    type: Literal["radios"]
    props: RadiosProps


class CheckboxesComponent(InputComponent):
    type: Literal["checkboxes"]
    props: CheckboxesProps


class SelectComponent(InputComponent):
    type: Literal["select"]
    props: SelectProps


class HeadingComponent(BaseComponent):
    type: Literal["heading"]
    props: HeadingProps


class ParagraphComponent(BaseComponent):
    type: Literal["paragraph"]
    props: ParagraphProps


class ListComponent(BaseComponent):
    type: Literal["list"]
    props: ListProps


class InsetTextComponent(BaseComponent):
    type: Literal["insetText"]
    props: InsetTextProps


class WarningTextComponent(BaseComponent):
    type: Literal["warningText"]
    props: WarningTextProps


class DetailsComponent(BaseComponent):
    type: Literal["details"]
    props: DetailsProps


class PanelComponent(BaseComponent):
    type: Literal["panel"]
    props: PanelProps


class SummaryListComponent(BaseComponent):
    type: Literal["summaryList"]
    props: SummaryListProps


class TableComponent(BaseComponent):
    type: Literal["table"]
    props: TableProps


class NotificationBannerComponent(BaseComponent):
    type: Literal["notificationBanner"]
    props: NotificationBannerProps


class ButtonComponent(BaseComponent):
    type: Literal["button"]
    props: ButtonProps


class DataEntryComponent(BaseComponent):
    type: Literal["data-entry"]


class DataLookupComponent(BaseComponent):
    type: Literal["data-lookup"]


class SuccessComponent(BaseComponent):
    type: Literal["success"]


Component = Annotated[
    Union[
        TextInputComponent,
        EmailInputComponent,
        TelInputComponent,
        TextareaComponent,
        DateInputComponent,
        RadiosComponent,
        CheckboxesComponent,
        SelectComponent,
        HeadingComponent,
        ParagraphComponent,
        ListComponent,
        InsetTextComponent,
        WarningTextComponent,
        DetailsComponent,
        PanelComponent,
        SummaryListComponent,
        TableComponent,
        NotificationBannerComponent,
        ButtonComponent,
        DataEntryComponent,
        DataLookupComponent,
        SuccessComponent,
    ],
    Field(discriminator="type"),
]


def _format_errors(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        # Drop the union tag from locations: ("textInput", "props", "label") -> props.label
        location = ".".join(str(part) for part in item["loc"][1:]) or "component"
        parts.append(f"{location}: {item['msg']}")
    return "; ".join(parts)


class ComponentSchemaRegistry:
    """Validates single component declarations against their type's schema"""

    def __init__(self):
        self._adapter = TypeAdapter(Component)

    @staticmethod
    def known_types() -> List[str]:
        return [component_type.value for component_type in ComponentType]

    def validate(self, declaration: Any) -> BaseComponent:
        """
        Validate one component declaration.

        Returns:
            The typed component model

        Raises:
            JourneySchemaError: unknown type or props not matching the type's schema
        """
        if not isinstance(declaration, Mapping):
            raise JourneySchemaError("Invalid component configuration: component must be an object")

        component_type = declaration.get("type")
        if component_type not in self.known_types():
            raise JourneySchemaError(f"Invalid component configuration: unknown component type '{component_type}'")

        try:
            return self._adapter.validate_python(dict(declaration))
        except ValidationError as e:
            raise JourneySchemaError(
                f"Invalid component configuration ({component_type}): {_format_errors(e)}"
            )


def declared_field_name(declaration: Mapping[str, Any]) -> Optional[str]:
    """Field name of a raw input declaration: props.name, else the component id"""
    props = declaration.get("props")
    if isinstance(props, Mapping) and props.get("name"):
        return props["name"]
    return declaration.get("id") or (props.get("id") if isinstance(props, Mapping) else None)


component_registry = ComponentSchemaRegistry()


def validate_component(declaration: Any) -> BaseComponent:
    """Validate a component declaration with the shared registry"""
    return component_registry.validate(declaration)
