"""
Field catalog - Core layer

Reusable field-level validation rules keyed by field identifier, plus the
descriptive metadata (example, hint, autocomplete, width) shown alongside
a field. The catalog is built once and only read afterwards.

Rules are pydantic types: ``TextRule.annotation`` and ``DateRule.annotation``
can be used as a model field type or wrapped in a TypeAdapter. Every check
raises a PydanticCustomError carrying its human-readable message.
"""

import re
from datetime import date
from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any, Dict, Mapping, Optional, Tuple, Union
from loguru import logger
from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, TypeAdapter, ValidationError
from pydantic_core import PydanticCustomError

from ..config import ConfigLoader
from .validation_models import FieldError, field_errors


FIELD_METADATA_FILE = Path(__file__).with_name("field_metadata.yaml")


def compose(base: Any, *validators: Any) -> Any:
    """``Annotated[base, *validators]``, or plain ``base`` when there are none"""
    return Annotated[(base, *validators)] if validators else base


class RuleSuccess(BaseModel):
    """Value passed the rule; holds the normalized value"""
    model_config = ConfigDict(frozen=True)

    value: Any


class RuleFailure(BaseModel):
    """Value failed the rule; one or more field errors"""
    model_config = ConfigDict(frozen=True)

    errors: Tuple[FieldError, ...]

    @property
    def message(self) -> str:
        return self.errors[0].message


RuleOutcome = Union[RuleSuccess, RuleFailure]


class PatternCheck(BaseModel):
    """Format check applied after the non-empty check"""
    model_config = ConfigDict(frozen=True)

    pattern: str
    message: str
    ignore_case: bool = False

    def matches(self, value: str) -> bool:
        flags = re.IGNORECASE if self.ignore_case else 0
        return re.fullmatch(self.pattern, value, flags) is not None

    def check(self, value: str) -> str:
        if not self.matches(value):
            raise PydanticCustomError("pattern_mismatch", self.message)
        return value


class Rule(BaseModel):
    """Base of the catalog rules"""
    model_config = ConfigDict(frozen=True)

    is_optional: bool = False

    def optional(self) -> "Rule":
        return self.model_copy(update={"is_optional": True})

    @property
    def annotation(self) -> Any:
        raise NotImplementedError

    def validate(self, value: Any, field: str) -> RuleOutcome:
        """Check one value, reporting errors under ``field``"""
        try:
            result = TypeAdapter(self.annotation).validate_python(value)
        except ValidationError as e:
            return RuleFailure(errors=tuple(field_errors(e, field)))
        if isinstance(result, BaseModel):
            result = result.model_dump()
        return RuleSuccess(value=result)


class TextRule(Rule):
    """
    Rule for a single text value.

    Checks run in order: non-empty, then each format check. The first
    failing check produces the message and later checks are skipped.
    The optional variant accepts an empty value but still applies the
    format checks to anything entered.
    """
    required_message: str
    checks: Tuple[PatternCheck, ...] = ()

    def _prepare(self, value: Any) -> Optional[str]:
        if value is None:
            value = ""
        if not isinstance(value, str):
            raise PydanticCustomError("string_type", self.required_message)
        value = value.strip()
        if value:
            return value
        if self.is_optional:
            return None
        raise PydanticCustomError("missing", self.required_message)

    @property
    def annotation(self) -> Any:
        checked = compose(str, *(AfterValidator(check.check) for check in self.checks))
        return Annotated[Optional[checked], BeforeValidator(self._prepare)]


class DatePartRule(BaseModel):
    """One numeric part of a day/month/year date"""
    model_config = ConfigDict(frozen=True)

    name: str
    empty_message: str
    pattern: str
    pattern_message: str
    minimum: int
    maximum: Optional[int]
    range_message: str

    def check(self, value: Any) -> str:
        value = "" if value is None else str(value).strip()
        if not value:
            raise PydanticCustomError("missing", self.empty_message)
        if re.fullmatch(self.pattern, value) is None:
            raise PydanticCustomError("pattern_mismatch", self.pattern_message)
        # Upper bound None means "current year"
        maximum = self.maximum if self.maximum is not None else date.today().year
        if not self.minimum <= int(value) <= maximum:
            raise PydanticCustomError("out_of_range", self.range_message)
        return value


DAY_PART = DatePartRule(
    name="day",
    empty_message="Enter a day",
    pattern=r"\d{1,2}",
    pattern_message="Day must be a number",
    minimum=1,
    maximum=31,
    range_message="Day must be between 1 and 31",
)

MONTH_PART = DatePartRule(
    name="month",
    empty_message="Enter a month",
    pattern=r"\d{1,2}",
    pattern_message="Month must be a number",
    minimum=1,
    maximum=12,
    range_message="Month must be between 1 and 12",
)

YEAR_PART = DatePartRule(
    name="year",
    empty_message="Enter a year",
    pattern=r"\d{4}",
    pattern_message="Year must be 4 digits",
    minimum=1900,
    maximum=None,
    range_message="Enter a valid year between 1900 and current year",
)

DATE_PARTS = (DAY_PART.name, MONTH_PART.name, YEAR_PART.name)


class DateParts(BaseModel):
    """
    A day/month/year date.

    Each part is checked on its own and reports under its own name, so
    several part errors can be returned together. The day is not checked
    against the month: 31/4/2024 passes.
    """
    model_config = ConfigDict(frozen=True, validate_default=True)

    day: Annotated[str, BeforeValidator(DAY_PART.check)] = ""
    month: Annotated[str, BeforeValidator(MONTH_PART.check)] = ""
    year: Annotated[str, BeforeValidator(YEAR_PART.check)] = ""


def is_blank_date(value: Mapping[str, Any]) -> bool:
    return not any(str(value.get(part) or "").strip() for part in DATE_PARTS)


class DateRule(Rule):
    """Rule for a composite day/month/year value"""
    message: str = "Enter a date"

    def _prepare(self, value: Any) -> Any:
        if value is None or value == "":
            if self.is_optional:
                return None
            raise PydanticCustomError("missing", self.message)
        if not isinstance(value, Mapping):
            raise PydanticCustomError("date_type", self.message)
        if self.is_optional and is_blank_date(value):
            return None
        return value

    @property
    def annotation(self) -> Any:
        return Annotated[Optional[DateParts], BeforeValidator(self._prepare)]


FieldRule = Union[TextRule, DateRule]


def _format(pattern: str, message: str, ignore_case: bool = False) -> PatternCheck:
    return PatternCheck(pattern=pattern, message=message, ignore_case=ignore_case)


def _text(required_message: str, *checks: PatternCheck) -> TextRule:
    return TextRule(required_message=required_message, checks=checks)


EMAIL_PATTERN = r"[^\s@]+@[^\s@]+\.[^\s@]+"
PHONE_PATTERN = r"[0-9\s\-\+\(\)]+"
POSTCODE_PATTERN = r"[A-Z]{1,2}\d{1,2}[A-Z]?\s?\d[A-Z]{2}"

first_name = _text("Enter your first name")
last_name = _text("Enter your last name")
date_of_birth = DateRule(message="Enter your date of birth")
email = _text("Enter your email address", _format(EMAIL_PATTERN, "Enter a valid email address"))
phone = _text("Enter your phone number", _format(PHONE_PATTERN, "Enter a valid phone number"))
address_line_1 = _text("Enter address line 1")
address_line_2 = _text("Enter address line 2").optional()
city = _text("Enter a town or city")
postcode = _text(
    "Enter a postcode",
    _format(POSTCODE_PATTERN, "Enter a valid UK postcode, like SW1A 1AA", ignore_case=True),
)
nhs_number = _text(
    "Enter your NHS number",
    _format(r"\d{3}\s?\d{3}\s?\d{4}", "Enter a valid NHS number, like 485 777 3456"),
)
national_insurance = _text(
    "Enter your National Insurance number",
    _format(r"[A-Z]{2}\d{6}[A-Z]", "Enter a valid National Insurance number, like QQ123456C",
                 ignore_case=True),
)
passport_number = _text(
    "Enter your passport number",
    _format(r"[A-Z0-9]{6,9}", "Enter a valid passport number", ignore_case=True),
)
driving_licence = _text(
    "Enter your driving licence number",
    _format(r"[A-Z0-9]{16}", "Enter a valid UK driving licence number (16 characters)",
                 ignore_case=True),
)
registration = _text(
    "Enter a vehicle registration number",
    _format(r"[A-Z]{2}\d{2}\s?[A-Z]{3}|[A-Z]\d{1,3}\s?[A-Z]{3}",
                 "Enter a valid registration number, like CU57ABC", ignore_case=True),
)
reference = _text(
    "Enter your application reference number",
    _format(r"[A-Z]{3}\d{6}", "Enter a valid reference number, like ABC123456", ignore_case=True),
)
case_number = _text("Enter your case number")
service_number = _text("Enter your service number")
nationality = _text("Enter your nationality")
household_income = _text(
    "Enter your household income",
    _format(r"\d+(\.\d{1,2})?", "Enter a valid amount, like 25000 or 25000.50"),
)
account_number = _text(
    "Enter your account number",
    _format(r"\d{8}", "Enter a valid 8-digit UK account number"),
)
sort_code = _text(
    "Enter your sort code",
    _format(r"\d{2}-?\d{2}-?\d{2}", "Enter a valid sort code, like 12-34-56"),
)
account_name = _text("Enter the account holder name")
course_start_date = DateRule(message="Enter your course start date")
course_length = _text("Select course length")


# Rule name -> rule. Field metadata refers to rules by these names.
RULES: Dict[str, FieldRule] = {
    "firstName": first_name,
    "lastName": last_name,
    "dateOfBirth": date_of_birth,
    "email": email,
    "phone": phone,
    "addressLine1": address_line_1,
    "addressLine2": address_line_2,
    "city": city,
    "postcode": postcode,
    "ukAddressLine1": address_line_1,
    "ukAddressLine2": address_line_2,
    "ukCity": city,
    "ukPostcode": postcode,
    "nhsNumber": nhs_number,
    "nationalInsurance": national_insurance,
    "passportNumber": passport_number,
    "drivingLicence": driving_licence,
    "registration": registration,
    "reference": reference,
    "caseNumber": case_number,
    "serviceNumber": service_number,
    "nationality": nationality,
    "householdIncome": household_income,
    "accountNumber": account_number,
    "sortCode": sort_code,
    "accountName": account_name,
    "courseStartDate": course_start_date,
    "courseLength": course_length,
    "firstNameOptional": first_name.optional(),
    "lastNameOptional": last_name.optional(),
    "emailOptional": email.optional(),
    "phoneOptional": phone.optional(),
    "nhsNumberOptional": nhs_number.optional(),
}


# Built-in formats an input component may name in ``validation.pattern``
NAMED_PATTERNS: Dict[str, PatternCheck] = {
    "email": _format(EMAIL_PATTERN, "Enter a valid email address"),
    "phone": _format(PHONE_PATTERN, "Enter a valid phone number"),
    "postcode": _format(POSTCODE_PATTERN, "Enter a valid UK postcode, like SW1A 1AA", ignore_case=True),
    "url": _format(r"https?://.+", "Enter a valid URL, like https://www.example.com"),
    "ni-number": _format(r"[A-Z]{2}\d{6}[A-Z]", "Enter a valid National Insurance number, like QQ123456C",
                           ignore_case=True),
}


class FieldMetadata(BaseModel):
    """Validation rule and display metadata for one field"""
    model_config = ConfigDict(frozen=True)

    field_id: str
    validator: FieldRule
    example: Optional[str] = None
    hint: Optional[str] = None
    autocomplete: Optional[str] = None
    width: Optional[str] = None

    def validate(self, value: Any, field: Optional[str] = None) -> RuleOutcome:
        return self.validator.validate(value, field or self.field_id)


class MissingField(BaseModel):
    """Lookup result for a field with no catalog entry"""
    model_config = ConfigDict(frozen=True)

    field_id: str


FieldLookup = Union[FieldMetadata, MissingField]


class FieldCatalog:
    """Read-only lookup of field metadata by field id"""

    def __init__(self, entries: Mapping[str, FieldMetadata]):
        self._entries = dict(entries)

    def lookup(self, field_id: str) -> FieldLookup:
        """
        Find the metadata for a field.

        Fields without a metadata entry fall back to a rule of the same
        name. Returns MissingField when neither exists.
        """
        entry = self._entries.get(field_id)
        if entry is not None:
            return entry
        rule = RULES.get(field_id)
        if rule is not None:
            return FieldMetadata(field_id=field_id, validator=rule)
        return MissingField(field_id=field_id)

    def has(self, field_id: str) -> bool:
        return isinstance(self.lookup(field_id), FieldMetadata)

    def hint(self, field_id: str) -> Optional[str]:
        entry = self.lookup(field_id)
        return entry.hint if isinstance(entry, FieldMetadata) else None

    def example(self, field_id: str) -> Optional[str]:
        entry = self.lookup(field_id)
        return entry.example if isinstance(entry, FieldMetadata) else None

    def field_ids(self) -> list[str]:
        return sorted(set(self._entries) | set(RULES))

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Mapping[str, Any]]) -> "FieldCatalog":
        """Build a catalog from {fieldId: {schema, example, hint, autocomplete, width}}"""
        entries: Dict[str, FieldMetadata] = {}
        for field_id, meta in raw.items():
            rule = RULES.get(meta.get("schema", ""))
            if rule is None:
                logger.warning(f"No validation rule found for field: {field_id} (schema: {meta.get('schema')})")
                continue
            entries[field_id] = FieldMetadata(
                field_id=field_id,
                validator=rule,
                example=meta.get("example"),
                hint=meta.get("hint"),
                autocomplete=meta.get("autocomplete"),
                width=meta.get("width"),
            )
        return cls(entries)


@lru_cache(maxsize=1)
def get_default_catalog() -> FieldCatalog:
    """The catalog built from the bundled field metadata file"""
    raw = ConfigLoader().load_yaml(FIELD_METADATA_FILE)
    logger.debug(f"Loaded field metadata for {len(raw)} fields")
    return FieldCatalog.from_mapping(raw)
