"""
Named page-level validation rules - Core layer

A page may name one of these rules in its ``validation`` property. A rule
receives the data collected so far and returns field -> message for every
problem it finds, or None when the page is acceptable.
"""

import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Union

from .field_catalog import EMAIL_PATTERN


PageRule = Callable[[Dict[str, Any]], Optional[Dict[str, str]]]


def _is_blank(value: Any) -> bool:
    return value is None or value == "" or value == [] or (isinstance(value, str) and not value.strip())


def personal_details(data: Dict[str, Any]) -> Optional[Dict[str, str]]:
    errors: Dict[str, str] = {}
    if _is_blank(data.get("firstName")):
        errors["firstName"] = "Enter your first name"
    if _is_blank(data.get("lastName")):
        errors["lastName"] = "Enter your last name"
    if _is_blank(data.get("dateOfBirth")):
        errors["dateOfBirth"] = "Enter your date of birth"
    return errors or None


def contact_details(data: Dict[str, Any]) -> Optional[Dict[str, str]]:
    errors: Dict[str, str] = {}
    email = data.get("email")
    if _is_blank(email):
        errors["email"] = "Enter your email address"
    elif not re.fullmatch(EMAIL_PATTERN, str(email)):
        errors["email"] = "Enter a valid email address"

    if _is_blank(data.get("contactPreference")):
        errors["contactPreference"] = "Select how you would prefer to be contacted"
    return errors or None


def address(data: Dict[str, Any]) -> Optional[Dict[str, str]]:
    errors: Dict[str, str] = {}
    if _is_blank(data.get("addressLine1")):
        errors["addressLine1"] = "Enter address line 1"
    if _is_blank(data.get("city")):
        errors["city"] = "Enter a town or city"
    if _is_blank(data.get("postcode")):
        errors["postcode"] = "Enter a postcode"
    return errors or None


def required(data: Dict[str, Any]) -> Optional[Dict[str, str]]:
    """Every submitted key must carry a value"""
    errors = {key: f"{key} is required" for key, value in data.items() if _is_blank(value)}
    return errors or None


def passport_status_search(data: Dict[str, Any]) -> Optional[Dict[str, str]]:
    reference = data.get("reference")
    if _is_blank(reference):
        return {"reference": "Enter your application reference number"}
    if not re.fullmatch(r"[A-Z]{3}\d{6}", str(reference).strip(), re.IGNORECASE):
        return {"reference": "Enter a valid reference number, like ABC123456"}
    return None


PAGE_RULES: Dict[str, PageRule] = {
    "personal-details": personal_details,
    "contact-details": contact_details,
    "address": address,
    "required": required,
    "passport-status-search": passport_status_search,
}


@dataclass(frozen=True)
class MissingRule:
    """Lookup result for a rule name that is not registered"""
    name: str


def get_page_rule(name: str) -> Union[PageRule, MissingRule]:
    """Look up a named page rule; unknown names return MissingRule"""
    rule = PAGE_RULES.get(name)
    if rule is None:
        return MissingRule(name)
    return rule
