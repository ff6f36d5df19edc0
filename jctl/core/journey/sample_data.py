"""
Sample submission generation - Core layer

Builds form data that satisfies a page, for demos and manual testing:
catalog examples where a field has metadata, otherwise a plausible value
guessed from the field id and label.
"""

from typing import Any, Dict, Optional

from .component_models import InputComponent, InputKind
from .field_catalog import FieldCatalog, get_default_catalog
from .journey_models import JourneyPage


DEFAULT_DATE = {"day": "1", "month": "1", "year": "1990"}


def generic_value(field_id: str, label: Optional[str] = None) -> str:
    """Guess a plausible text value from a field's id and label"""
    key = field_id.lower()
    text = (label or "").lower()

    if "name" in key or "name" in text:
        if "first" in key or "first" in text:
            return "John"
        if "last" in key or "last" in text:
            return "Smith"
        if "account" in key:
            return "John Smith"
        if "course" in key:
            return "Computer Science"
        return "Test Name"
    if "email" in key or "email" in text:
        return "test@example.com"
    if "phone" in key or "phone" in text or "telephone" in text:
        return "07700900000"
    if "postcode" in key or "postcode" in text:
        return "SW1A 1AA"
    if "address" in key:
        if "line2" in key or "2" in key:
            return ""
        return "10 Downing Street"
    if "city" in key or "city" in text or "town" in text:
        return "London"
    if "income" in key or "income" in text:
        return "25000"
    if "account" in key and "number" in key:
        return "12345678"
    if "sort" in key and "code" in key:
        return "12-34-56"
    if "university" in key or "university" in text:
        return "University of Example"
    if "course" in key:
        return "3" if "length" in text else "Test Course"
    return "Test Value"


def _sample_date(example: Optional[str]) -> Dict[str, str]:
    if not example:
        return dict(DEFAULT_DATE)
    parts = example.split()
    return {
        "day": parts[0] if len(parts) > 0 else DEFAULT_DATE["day"],
        "month": parts[1] if len(parts) > 1 else DEFAULT_DATE["month"],
        "year": parts[2] if len(parts) > 2 else DEFAULT_DATE["year"],
    }


def _sample_value(component: InputComponent, catalog: FieldCatalog) -> Any:
    field = component.field_name
    example = catalog.example(field)
    kind = component.input_kind

    if kind == InputKind.TEXT:
        return example or generic_value(field, component.label)
    if kind == InputKind.DATE:
        return _sample_date(example)
    options = [value for value in component.option_values if value]
    if not options:
        return None
    if kind == InputKind.MULTI_CHOICE:
        return [options[0]]
    return options[0]


def generate_test_data(page: JourneyPage, catalog: Optional[FieldCatalog] = None) -> Dict[str, Any]:
    """
    Sample submission for every input on a page.

    Choice inputs take their first non-empty option; inputs without any
    option are left out.
    """
    catalog = catalog or get_default_catalog()
    data: Dict[str, Any] = {}
    for component in page.input_components:
        value = _sample_value(component, catalog)
        if value is not None:
            data[component.field_name] = value
    return data
