"""
Contract Sources - Paginated providers of raw agent contract records.

A source answers ``query(filter, cursor)`` with one page of flat records and
an optional continuation cursor. Records are opaque property bags; mapping
them into contracts is the registry's job.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import httpx
import yaml

from ..config import RegistryConfig
from ..errors import ConfigurationError, SourceUnavailable

logger = logging.getLogger(__name__)

CONTRACT_FILE_SUFFIXES = (".yaml", ".yml", ".json")

# Wire key -> Notion property names to try, in order
NOTION_PROPERTY_NAMES: dict[str, tuple[str, ...]] = {
    "AgentID": ("AgentID",),
    "Name": ("Name", "Agent Name"),
    "Role": ("Role",),
    "Category": ("Category",),
    "AutonomyLevel": ("AutonomyLevel",),
    "ExecutionPattern": ("ExecutionPattern",),
    "MCPEnabled": ("MCPEnabled",),
    "ToolSchema": ("ToolSchema",),
    "QualityScore": ("QualityScore",),
    "Status": ("Status",),
    "VertexAIModel": ("VertexAIModel",),
    "Architectures": ("Architectures", "Architecture"),
}


@dataclass
class SourcePage:
    """One page of raw records."""
    records: list[dict[str, Any]] = field(default_factory=list)
    next_cursor: Optional[str] = None


class ContractSource(ABC):
    """Abstract paginated contract source."""

    @abstractmethod
    async def query(
        self,
        filter: Optional[dict[str, Any]] = None,
        cursor: Optional[str] = None,
    ) -> SourcePage:
        """
        Fetch one page of records.

        Raises:
            SourceUnavailable: If the source is unreachable or the page is malformed
        """

    async def close(self) -> None:
        """Release resources held by the source."""


class InMemoryContractSource(ContractSource):
    """Serves a static list of records in fixed-size pages."""

    def __init__(self, records: list[dict[str, Any]], page_size: int = 100):
        if page_size < 1:
            raise ConfigurationError("page_size must be at least 1")
        self.records = list(records)
        self.page_size = page_size

    async def query(
        self,
        filter: Optional[dict[str, Any]] = None,
        cursor: Optional[str] = None,
    ) -> SourcePage:
        try:
            offset = int(cursor) if cursor else 0
        except ValueError as e:
            raise SourceUnavailable(f"Invalid cursor: {cursor}") from e

        end = offset + self.page_size
        page = self.records[offset:end]
        return SourcePage(
            records=[dict(r) for r in page],
            next_cursor=str(end) if end < len(self.records) else None,
        )


class FileContractSource(ContractSource):
    """
    Reads contract records from YAML/JSON files in a directory.

    Each file holds one record or a list of records. All files are served as
    a single page; a file that cannot be read is skipped with a warning.
    """

    def __init__(self, directory: str):
        self.directory = Path(directory)

    async def query(
        self,
        filter: Optional[dict[str, Any]] = None,
        cursor: Optional[str] = None,
    ) -> SourcePage:
        if not self.directory.is_dir():
            raise SourceUnavailable(f"Contracts directory not found: {self.directory}")

        records: list[dict[str, Any]] = []
        for path in sorted(self.directory.iterdir()):
            if path.suffix not in CONTRACT_FILE_SUFFIXES or not path.is_file():
                continue
            try:
                records.extend(load_contract_file(path))
            except (OSError, yaml.YAMLError, ValueError) as e:
                logger.warning(f"Skipping contract file {path.name}: {e}")

        logger.debug(f"Loaded {len(records)} contract records from {self.directory}")
        return SourcePage(records=records, next_cursor=None)


def load_contract_file(path: Path) -> list[dict[str, Any]]:
    """Load one or more contract records from a YAML or JSON file."""
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if data is None:
        return []
    if isinstance(data, dict):
        return [data]
    if isinstance(data, list) and all(isinstance(item, dict) for item in data):
        return data
    raise ValueError("file must contain a mapping or a list of mappings")


class NotionContractSource(ContractSource):
    """
    Contract source backed by a Notion database.

    Uses the Notion REST API directly; each page's properties are flattened
    into the wire record.
    """

    def __init__(
        self,
        api_key: str,
        database_id: str,
        base_url: str = "https://api.notion.com/v1",
        notion_version: str = "2022-06-28",
        page_size: int = 100,
        timeout_seconds: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        if not api_key:
            raise ConfigurationError("Notion API key is required (NOTION_API_KEY)")
        if not database_id:
            raise ConfigurationError("Notion database id is required (NOTION_AGENT_DB_ID)")

        self.api_key = api_key
        self.database_id = database_id
        self.base_url = base_url.rstrip("/")
        self.notion_version = notion_version
        self.page_size = min(page_size, 100)
        self.timeout_seconds = timeout_seconds
        self._client = client

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout_seconds)
        return self._client

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def query(
        self,
        filter: Optional[dict[str, Any]] = None,
        cursor: Optional[str] = None,
    ) -> SourcePage:
        client = await self._get_client()

        body: dict[str, Any] = {"page_size": self.page_size}
        if cursor:
            body["start_cursor"] = cursor
        notion_filter = build_notion_filter(filter)
        if notion_filter:
            body["filter"] = notion_filter

        try:
            response = await client.post(
                f"{self.base_url}/databases/{self.database_id}/query",
                json=body,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Notion-Version": self.notion_version,
                },
            )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise SourceUnavailable(
                f"Notion query failed with status {e.response.status_code}",
                {"database_id": self.database_id},
            ) from e
        except httpx.HTTPError as e:
            raise SourceUnavailable(f"Notion unreachable: {e}", {"database_id": self.database_id}) from e
        except ValueError as e:
            raise SourceUnavailable(f"Notion returned a non-JSON body: {e}") from e

        results = data.get("results") if isinstance(data, dict) else None
        if not isinstance(results, list):
            raise SourceUnavailable("Malformed Notion page: missing results list")

        next_cursor = data.get("next_cursor") if data.get("has_more") else None
        return SourcePage(
            records=[flatten_notion_page(page) for page in results if isinstance(page, dict)],
            next_cursor=next_cursor,
        )


def build_notion_filter(filter: Optional[dict[str, Any]]) -> Optional[dict[str, Any]]:
    """Translate ``{"Status": "Active"}`` equality filters into a Notion select filter."""
    if not filter:
        return None

    clauses = [
        {"property": prop, "select": {"equals": value}}
        for prop, value in filter.items()
    ]
    if len(clauses) == 1:
        return clauses[0]
    return {"and": clauses}


def extract_property(prop: dict[str, Any]) -> Any:
    """Extract a plain Python value from a Notion property object."""
    prop_type = prop.get("type")

    if prop_type in ("title", "rich_text"):
        return "".join(part.get("plain_text", "") for part in prop.get(prop_type) or [])
    if prop_type in ("select", "status"):
        option = prop.get(prop_type)
        return option.get("name") if option else None
    if prop_type == "multi_select":
        return [option.get("name") for option in prop.get("multi_select") or []]
    if prop_type == "checkbox":
        return bool(prop.get("checkbox"))
    if prop_type == "number":
        return prop.get("number")

    return None


def flatten_notion_page(page: dict[str, Any]) -> dict[str, Any]:
    """Flatten a Notion database page into a wire record."""
    props = page.get("properties") or {}
    record: dict[str, Any] = {}

    for wire_key, names in NOTION_PROPERTY_NAMES.items():
        for name in names:
            if name in props and isinstance(props[name], dict):
                value = extract_property(props[name])
                if value is not None:
                    record[wire_key] = value
                break

    if isinstance(record.get("MCPEnabled"), str):
        record["MCPEnabled"] = record["MCPEnabled"] == "__YES__"
    if record.get("ToolSchema") == "":
        record["ToolSchema"] = "{}"

    return record


def create_source(config: RegistryConfig) -> ContractSource:
    """Build the contract source selected by configuration."""
    if config.source == "file":
        return FileContractSource(config.contracts_dir)

    return NotionContractSource(
        api_key=config.notion_api_key or "",
        database_id=config.notion_database_id or "",
        base_url=config.notion_base_url,
        notion_version=config.notion_version,
        page_size=config.page_size,
        timeout_seconds=config.timeout_seconds,
    )
