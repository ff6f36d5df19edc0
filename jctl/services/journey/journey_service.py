"""
Journey Service - Internal API for journey validation and form submission
Follows three-layer architecture: Service Layer coordinates the loader and
the journey core, and talks to callers in plain dicts
"""

from pathlib import Path
from typing import Dict, Any, Mapping, Optional
from loguru import logger

from ...core.journey.journey_models import Journey
from ...core.journey.journey_validator import JourneyValidator, validate_all_journeys, format_validation_results
from ...core.journey.journey_lint import JourneyLinter
from ...core.journey.routing import JourneyNavigator, JourneyState
from ...core.journey.sample_data import generate_test_data
from ...core.journey.validation_models import ValidationIssue, ValidationResult, ValidationSummary
from ...core.config import EngineConfig
from ...core.exceptions import JourneyParseError, JourneySchemaError, ServiceError
from .journey_loader import JourneyLoader


class JourneyService:
    """
    Service layer for journey operations

    Service Layer Rules (from three-layer architecture):
    - Workflows: load -> validate/lint -> report, page submission -> routing
    - Access: core/* (shared), core/journey/ (own domain), journey_loader for I/O
    - Communication: JSON/dict results ({"success": ..., ...})
    """

    def __init__(self, config: Optional[EngineConfig] = None, loader: Optional[JourneyLoader] = None):
        self.config = config or EngineConfig()
        self.loader = loader or JourneyLoader()
        self.validator = JourneyValidator()
        self.linter = JourneyLinter(self.config)
        self.logger = logger

    # ==========================================================================
    # Declaration validation
    # ==========================================================================

    @staticmethod
    def _parse_failure(error: JourneyParseError, journey_id: Optional[str] = None) -> ValidationResult:
        """Unparseable input is reported as one top-level schema error"""
        return ValidationResult.from_issues([ValidationIssue(
            type="schema",
            severity="error",
            journey_id=journey_id,
            message=f"Journey could not be parsed: {error}",
            suggestion="Fix the JSON syntax before validating the journey structure"
        )], ValidationSummary(total_journeys=1))

    @staticmethod
    def _result(result: ValidationResult) -> Dict[str, Any]:
        return {
            "success": True,
            "is_valid": result.is_valid,
            "result": result.to_dict(),
            "report": result.to_report(),
            "exit_code": 0 if result.is_valid else 1,
            "formatted": format_validation_results(result)
        }

    def validate_declaration(self, declaration: Any, journey_id: Optional[str] = None) -> Dict[str, Any]:
        """Validate an already parsed journey declaration"""
        result = self.validator.validate(declaration, journey_id)
        self.logger.debug(f"Journey {journey_id or 'declaration'}: {len(result.errors)} error(s), "
                          f"{len(result.warnings)} warning(s)")
        return self._result(result)

    def validate_text(self, content: str, journey_id: Optional[str] = None) -> Dict[str, Any]:
        """Validate raw journey JSON text"""
        try:
            declaration = self.loader.parse(content, journey_id or "<input>")
        except JourneyParseError as e:
            return self._result(self._parse_failure(e, journey_id))
        return self.validate_declaration(declaration, journey_id)

    def validate_file(self, path: str | Path) -> Dict[str, Any]:
        """Load and validate one journey file"""
        path = Path(path)
        try:
            declaration = self.loader.load_file(path)
        except JourneyParseError as e:
            return self._result(self._parse_failure(e, path.stem))
        except ServiceError as e:
            return {"success": False, "error": str(e)}
        return self.validate_declaration(declaration, path.stem)

    async def validate_url(self, url: str) -> Dict[str, Any]:
        """Fetch a published journey and validate it"""
        try:
            declaration = await self.loader.fetch_journey(url)
        except JourneyParseError as e:
            return self._result(self._parse_failure(e))
        except ServiceError as e:
            return {"success": False, "error": str(e)}
        return self.validate_declaration(declaration)

    def validate_directory(self, directory: str | Path) -> Dict[str, Any]:
        """Validate every journey in a directory, plus its index file"""
        try:
            loaded = self.loader.load_directory(directory)
        except (JourneyParseError, ServiceError) as e:
            return {"success": False, "error": str(e)}

        result = validate_all_journeys(loaded["journeys"], loaded["index"], self.validator)
        self.logger.info(f"Validated {result.summary.total_journeys} journey(s) in {directory}")
        return self._result(result)

    def lint_file(self, path: str | Path) -> Dict[str, Any]:
        """Run the house-style checks on one journey file"""
        path = Path(path)
        try:
            declaration = self.loader.load_file(path)
        except JourneyParseError as e:
            return self._result(self._parse_failure(e, path.stem))
        except ServiceError as e:
            return {"success": False, "error": str(e)}
        return self._result(self.linter.lint(declaration, path.stem))

    # ==========================================================================
    # Runtime
    # ==========================================================================

    def load_journey(self, path: str | Path, strict: bool = False) -> Journey:
        """
        Load a journey file into the runtime model.

        With strict, the declaration must also pass the journey validator;
        the first error is raised as its JourneyError subclass.
        """
        declaration = self.loader.load_file(path)
        if strict:
            result = self.validator.validate(declaration, Path(path).stem)
            self.logger.debug(f"Strict load of {path}: {len(result.errors)} error(s)")
            result.raise_for_errors()
        return Journey.from_declaration(declaration)

    def navigator(self, journey: Journey) -> JourneyNavigator:
        return JourneyNavigator(journey, self.config)

    def submit_form(self, journey: Journey, page: str, fields: Mapping[str, Any],
                    state: Optional[JourneyState] = None) -> Dict[str, Any]:
        """
        Form submission boundary

        Args:
            journey: Runtime journey model
            page: Id of the submitted page
            fields: Submitted values (strings, or lists for checkboxes)
            state: Session state so far; a fresh session when omitted

        Returns:
            {"success": False, "errors": {field: message}} on failure,
            {"success": True, "complete": False, "nextPage", "currentPage", "data"}
            when moving on, or
            {"success": True, "complete": True, "referenceNumber", "nextPage", "data"}
            when the journey completes

        Raises:
            ConfigurationFault: the page routes to a page that does not exist
        """
        journey_page = journey.page(page)
        if journey_page is None:
            return {"success": False, "errors": {"_page": "Page not found"}}

        fields = dict(fields)
        # A single ticked checkbox arrives as a plain string
        for name in journey_page.multi_choice_fields():
            if isinstance(fields.get(name), str):
                fields[name] = [fields[name]]

        navigator = self.navigator(journey)
        outcome = navigator.submit(state or navigator.initial_state(), fields, page_id=page)

        if not outcome.success:
            return {"success": False, "errors": dict(outcome.errors)}

        if outcome.complete:
            self.logger.info(f"Journey {journey.id} submitted: {outcome.reference_number}")
            return {
                "success": True,
                "complete": True,
                "referenceNumber": outcome.reference_number,
                "nextPage": outcome.next_page,
                "data": dict(outcome.state.data)
            }

        return {
            "success": True,
            "complete": False,
            "nextPage": outcome.next_page,
            "currentPage": outcome.current_page,
            "data": dict(outcome.state.data)
        }

    def sample_data(self, path: str | Path, page_id: str) -> Dict[str, Any]:
        """Sample submission for one page of a journey file"""
        try:
            journey = self.load_journey(path)
        except (JourneyParseError, JourneySchemaError, ServiceError) as e:
            return {"success": False, "error": str(e)}

        page = journey.page(page_id)
        if page is None:
            return {"success": False, "error": f"Page '{page_id}' not found in journey '{journey.id}'"}
        return {"success": True, "page": page_id, "data": generate_test_data(page)}
