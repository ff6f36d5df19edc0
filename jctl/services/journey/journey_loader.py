"""
Journey Loader - Internal API for reading journey declarations
Follows three-layer architecture: Service Layer owns the file and network I/O,
the core only ever sees parsed declarations
"""

import json
from pathlib import Path
from typing import Dict, Any, List, Optional
import yaml
from loguru import logger
from pydantic import ValidationError

from ...core.journey.journey_models import JourneyIndex
from ...core.http_client import HTTPClient
from ...core.exceptions import JourneyParseError, JourneySchemaError, ServiceError


INDEX_FILE = "index.json"
JOURNEY_SUFFIXES = (".json", ".yaml", ".yml")


class JourneyLoader:
    """
    Loads journey declarations from disk or over HTTP

    Service Layer Rules (from three-layer architecture):
    - File and network I/O for journey definitions
    - Access: core/* (shared), core/journey/ (own domain)
    - Communication: parsed declarations (plain dicts) handed to the core
    """

    def __init__(self, http_client: Optional[HTTPClient] = None):
        self.http_client = http_client or HTTPClient()
        self.logger = logger

    def parse(self, content: str, source: str, fmt: str = "json") -> Any:
        """
        Parse journey text

        Raises:
            JourneyParseError: malformed JSON or YAML
        """
        try:
            if fmt in ("yaml", "yml"):
                return yaml.safe_load(content)
            return json.loads(content)
        except json.JSONDecodeError as e:
            raise JourneyParseError(f"Invalid JSON in {source}: {e}")
        except yaml.YAMLError as e:
            raise JourneyParseError(f"Invalid YAML in {source}: {e}")

    def load_file(self, path: str | Path) -> Any:
        """Read and parse one journey file (.json, .yaml or .yml)"""
        path = Path(path)
        try:
            content = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ServiceError(f"Failed to read journey file {path}: {e}")

        declaration = self.parse(content, str(path), path.suffix.lstrip(".").lower())
        self.logger.debug(f"Loaded journey declaration from {path}")
        return declaration

    def load_directory(self, directory: str | Path) -> Dict[str, Any]:
        """
        Load every journey file in a directory

        Returns:
            Dict with "journeys" (journey id -> declaration, keyed by file
            stem) and "index" (parsed index.json or None)
        """
        directory = Path(directory)
        if not directory.is_dir():
            raise ServiceError(f"Journey directory not found: {directory}")

        journeys: Dict[str, Any] = {}
        index = None
        for path in sorted(directory.iterdir()):
            if not path.is_file() or path.suffix.lower() not in JOURNEY_SUFFIXES:
                continue
            if path.name == INDEX_FILE:
                index = self.load_file(path)
                continue
            journeys[path.stem] = self.load_file(path)

        self.logger.debug(f"Loaded {len(journeys)} journey(s) from {directory}")
        return {"journeys": journeys, "index": index}

    def load_index(self, path: str | Path) -> JourneyIndex:
        """Load and validate the journey index file"""
        raw = self.load_file(path)
        try:
            return JourneyIndex.model_validate(raw)
        except ValidationError as e:
            raise JourneySchemaError(f"Journey index {path} is not valid: {e}")

    @staticmethod
    def enabled_journey_ids(index: JourneyIndex | Dict[str, Any]) -> List[str]:
        """Ids of the journeys the index marks enabled"""
        if not isinstance(index, JourneyIndex):
            try:
                index = JourneyIndex.model_validate(index)
            except ValidationError as e:
                raise JourneySchemaError(f"Journey index is not valid: {e}")
        return index.enabled_ids()

    async def fetch_index(self, url: str) -> JourneyIndex:
        """Fetch and validate a published journey index"""
        raw = await self.http_client.get(url)
        try:
            return JourneyIndex.model_validate(raw)
        except ValidationError as e:
            raise JourneySchemaError(f"Journey index at {url} is not valid: {e}")

    async def fetch_journey(self, url: str) -> Any:
        """Fetch a published journey declaration over HTTP"""
        self.logger.debug(f"Fetching journey from {url}")
        content = await self.http_client.get_text(url)
        fmt = "yaml" if url.lower().endswith((".yaml", ".yml")) else "json"
        return self.parse(content, url, fmt)
