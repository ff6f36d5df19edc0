"""
Navigation and routing resolver - Core layer

Decides which page follows a submitted page and moves a journey session
between its states:

    not-started -> on-page(startPage) -> ... -> completed

Session state is an immutable JourneyState. Every transition returns a new
state, so callers own where state lives between requests.
"""

import secrets
import time
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional
from loguru import logger
from pydantic import ConfigDict, Field

from ..config import EngineConfig
from ..exceptions import ConfigurationFault
from .component_models import CamelModel
from .data_schema import build_journey_validator, build_page_validator
from .field_catalog import FieldCatalog
from .journey_models import Journey, JourneyPage, RouteCondition
from .page_rules import MissingRule, get_page_rule


BASE36_ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"
REFERENCE_SUFFIX_LENGTH = 5


def _to_base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(BASE36_ALPHABET[remainder])
    return "".join(reversed(digits))


def generate_reference_number(prefix: str = "APP") -> str:
    """
    Mint an opaque submission reference: PREFIX-<base36 millis>-<5 random chars>
    """
    timestamp = _to_base36(int(time.time() * 1000))
    suffix = "".join(secrets.choice(BASE36_ALPHABET) for _ in range(REFERENCE_SUFFIX_LENGTH))
    return f"{prefix}-{timestamp}-{suffix}"


# ==============================================================================
# Condition evaluation
# ==============================================================================

def _is_empty_value(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (list, tuple, dict)):
        return len(value) == 0
    return str(value).strip() == ""


def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _contains(actual: Any, expected: Any) -> bool:
    if actual is None:
        return False
    if isinstance(actual, (list, tuple)):
        return expected in actual
    return str(expected) in str(actual)


def _compare(actual: Any, expected: Any, greater: bool) -> bool:
    left, right = _as_number(actual), _as_number(expected)
    if left is None or right is None:
        return False
    return left > right if greater else left < right


OPERATORS = {
    "equals": lambda actual, expected: actual == expected,
    "not_equals": lambda actual, expected: actual != expected,
    "notEquals": lambda actual, expected: actual != expected,
    "contains": _contains,
    "not_contains": lambda actual, expected: not _contains(actual, expected),
    "greater_than": lambda actual, expected: _compare(actual, expected, greater=True),
    "greaterThan": lambda actual, expected: _compare(actual, expected, greater=True),
    "less_than": lambda actual, expected: _compare(actual, expected, greater=False),
    "lessThan": lambda actual, expected: _compare(actual, expected, greater=False),
    "isEmpty": lambda actual, expected: _is_empty_value(actual),
    "isNotEmpty": lambda actual, expected: not _is_empty_value(actual),
}


def evaluate_condition(condition: RouteCondition, data: Mapping[str, Any]) -> bool:
    """
    Test one routing condition against submitted data.

    Numeric operators compare as numbers and are false when either side
    is not numeric.
    """
    return OPERATORS[condition.operator](data.get(condition.field), condition.value)


def resolve_next_page(page: JourneyPage, data: Mapping[str, Any]) -> Optional[str]:
    """
    Next page id for a submitted page, or None when nothing follows.

    Conditional routes are tried first, highest priority first (ties keep
    declaration order), then the route default, then the page's nextPage.
    """
    routing = page.conditional_routing
    if routing is not None:
        for rule in sorted(routing.conditions, key=lambda rule: -rule.priority):
            if evaluate_condition(rule.when, data):
                logger.debug(f"Page {page.id}: condition on {rule.when.field} matched, routing to {rule.goto}")
                return rule.goto
        if routing.default:
            logger.debug(f"Page {page.id}: no condition matched, routing to default {routing.default}")
            return routing.default

    if callable(page.next_page):
        return page.next_page(dict(data))
    return page.next_page


# ==============================================================================
# Session state
# ==============================================================================

class JourneyStatus(str, Enum):
    NOT_STARTED = "not-started"
    ON_PAGE = "on-page"
    COMPLETED = "completed"


class JourneyState(CamelModel):
    """
    Snapshot of one user's progress through a journey.

    Attributes:
        journey_id: Journey the session belongs to
        status: not-started, on-page or completed
        current_page_id: Page shown to the user (None before start)
        data: Answers accumulated across pages
        errors: Field -> message for the last rejected submission
        visited_pages: Pages reached, in first-visit order
        reference_number: Minted when the journey completes
    """
    model_config = ConfigDict(frozen=True)

    journey_id: str
    status: JourneyStatus = JourneyStatus.NOT_STARTED
    current_page_id: Optional[str] = None
    data: Dict[str, Any] = Field(default_factory=dict)
    errors: Dict[str, str] = Field(default_factory=dict)
    visited_pages: List[str] = Field(default_factory=list)
    reference_number: Optional[str] = None

    @property
    def completed(self) -> bool:
        return self.status == JourneyStatus.COMPLETED

    def visit(self, page_id: str) -> "JourneyState":
        """On-page state for page_id with errors cleared"""
        visited = self.visited_pages if page_id in self.visited_pages else [*self.visited_pages, page_id]
        return self.model_copy(update={
            "status": JourneyStatus.ON_PAGE,
            "current_page_id": page_id,
            "errors": {},
            "visited_pages": visited,
        })


class SubmitOutcome(CamelModel):
    """Result of submitting one page"""
    model_config = ConfigDict(frozen=True)

    success: bool
    state: JourneyState
    errors: Dict[str, str] = Field(default_factory=dict)
    complete: bool = False
    current_page: Optional[str] = None
    next_page: Optional[str] = None
    reference_number: Optional[str] = None


class SummaryItem(CamelModel):
    """One check-your-answers row"""
    key: str
    field: str
    value: str
    change_link: Optional[str] = None


def _format_value(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return ", ".join(str(item) for item in value)
    if isinstance(value, Mapping) and {"day", "month", "year"} <= set(value):
        return f"{value['day']}/{value['month']}/{value['year']}"
    return "" if value is None else str(value)


class JourneyNavigator:
    """
    Runs journey sessions for one journey.

    Holds only read-only collaborators; all session data lives in the
    JourneyState values passed in and returned.
    """

    def __init__(self, journey: Journey, config: Optional[EngineConfig] = None,
                 catalog: Optional[FieldCatalog] = None):
        self.journey = journey
        self.config = config or EngineConfig()
        self.catalog = catalog

    @property
    def check_your_answers_page(self) -> str:
        return self.journey.check_your_answers_page or self.config.check_your_answers_page

    @property
    def completion_page(self) -> str:
        return self.journey.completion_page or self.config.default_completion_page

    def _require_page(self, page_id: Optional[str]) -> JourneyPage:
        page = self.journey.page(page_id) if page_id is not None else None
        if page is None:
            raise ConfigurationFault(f"Page '{page_id}' does not exist in journey '{self.journey.id}'")
        return page

    def initial_state(self) -> JourneyState:
        return JourneyState(journey_id=self.journey.id)

    def start(self, state: Optional[JourneyState] = None) -> JourneyState:
        """Enter the journey at its start page, keeping any data already held"""
        state = state or self.initial_state()
        self._require_page(self.journey.start_page)
        return state.visit(self.journey.start_page)

    def resolve_next_page(self, page_id: str, data: Mapping[str, Any]) -> Optional[str]:
        return resolve_next_page(self._require_page(page_id), data)

    def _page_errors(self, page: JourneyPage, fields: Mapping[str, Any]) -> Dict[str, str]:
        if page.id == self.check_your_answers_page:
            validator = build_journey_validator(self.journey, self.catalog)
        else:
            validator = build_page_validator(page.components, self.catalog)

        errors = validator.check(fields).error_map()
        if errors or not page.validation:
            return errors

        rule = page.validation if callable(page.validation) else get_page_rule(page.validation)
        if isinstance(rule, MissingRule):
            logger.warning(f"Page {page.id} names unknown validation rule '{rule.name}'; skipped")
            return {}
        return rule(dict(fields)) or {}

    def submit(self, state: JourneyState, fields: Mapping[str, Any],
               page_id: Optional[str] = None) -> SubmitOutcome:
        """
        Validate a page submission and move to the next page.

        Raises:
            ConfigurationFault: the submitted page or the resolved next page
                does not exist
        """
        page = self._require_page(page_id or state.current_page_id)

        errors = self._page_errors(page, fields)
        if errors:
            logger.debug(f"Page {page.id} rejected: {sorted(errors)}")
            rejected = state.model_copy(update={"current_page_id": page.id, "errors": errors})
            return SubmitOutcome(success=False, state=rejected, errors=errors, current_page=page.id)

        data = {**state.data, **fields}
        next_page = resolve_next_page(page, data)

        is_review_page = page.id == self.check_your_answers_page
        if is_review_page or next_page is None or next_page == self.journey.completion_page:
            reference_number = generate_reference_number(self.config.reference_prefix)
            completed = state.model_copy(update={
                "status": JourneyStatus.COMPLETED,
                "current_page_id": page.id,
                "data": data,
                "errors": {},
                "reference_number": reference_number,
            })
            logger.debug(f"Journey {self.journey.id} completed with reference {reference_number}")
            return SubmitOutcome(
                success=True,
                state=completed,
                complete=True,
                current_page=page.id,
                next_page=self.completion_page,
                reference_number=reference_number,
            )

        self._require_page(next_page)
        moved = state.model_copy(update={"data": data}).visit(next_page)
        logger.debug(f"Journey {self.journey.id}: {page.id} -> {next_page}")
        return SubmitOutcome(success=True, state=moved, current_page=page.id, next_page=next_page)

    def go_to_page(self, state: JourneyState, page_id: str) -> JourneyState:
        """Jump to any declared page; answers are kept, errors cleared"""
        self._require_page(page_id)
        return state.visit(page_id)

    def can_go_back(self, state: JourneyState) -> bool:
        page = self.journey.page(state.current_page_id) if state.current_page_id else None
        return page is not None and bool(page.previous_page)

    def go_back(self, state: JourneyState) -> JourneyState:
        """Move to the current page's previousPage; unchanged when there is none"""
        if not self.can_go_back(state):
            return state
        previous = self.journey.pages[state.current_page_id].previous_page
        self._require_page(previous)
        return state.visit(previous)

    @staticmethod
    def update_field(state: JourneyState, key: str, value: Any) -> JourneyState:
        errors = {field: message for field, message in state.errors.items() if field != key}
        return state.model_copy(update={"data": {**state.data, key: value}, "errors": errors})

    def progress(self, state: JourneyState) -> int:
        """Visited pages as a rounded percentage of all pages"""
        if not self.journey.pages:
            return 0
        return round(len(state.visited_pages) / len(self.journey.pages) * 100)

    def summary(self, state: JourneyState) -> List[SummaryItem]:
        """Check-your-answers rows, each linking back to the page holding the field"""
        items = []
        for field, value in state.data.items():
            page_id = self.journey.find_page_for_field(field)
            component = self.journey.pages[page_id].component_for(field) if page_id else None
            items.append(SummaryItem(
                key=component.label if component is not None and component.label else field,
                field=field,
                value=_format_value(value),
                change_link=page_id,
            ))
        return items

    def reset(self, state: Optional[JourneyState] = None) -> JourneyState:
        return self.initial_state()
