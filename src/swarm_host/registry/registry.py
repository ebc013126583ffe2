"""
Contract Registry - Authoritative snapshot of eligible agent contracts.

Pulls every page from a contract source, maps and validates each record,
and publishes the active subset as one immutable snapshot.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Mapping, Optional

from ..batch import process_batch
from ..errors import ContractMappingError, SourceUnavailable
from .contract import AgentContract
from .schema import AgentStatus
from .sources import ContractSource

if TYPE_CHECKING:
    from ..validation.validator import ContractValidator

logger = logging.getLogger(__name__)

ACTIVE_FILTER = {"Status": AgentStatus.ACTIVE.value}


@dataclass(frozen=True)
class SkippedRecord:
    """A record left out of a snapshot and why."""
    agent_id: Optional[str]
    reason: str


@dataclass(frozen=True)
class RegistrySnapshot:
    """One complete, atomically published fetch result."""
    contracts: Mapping[str, AgentContract]
    fetched_at: datetime
    skipped: tuple[SkippedRecord, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.contracts)


class ContractRegistry:
    """
    Registry of agent contracts backed by a paginated source.

    The registry owns the id -> contract mapping of its current snapshot.
    A fetch either publishes a complete new snapshot or fails and leaves the
    previous one in place.
    """

    def __init__(
        self,
        source: ContractSource,
        validator: Optional["ContractValidator"] = None,
        max_pages: int = 1000,
    ):
        self.source = source
        self.validator = validator
        self.max_pages = max_pages
        self._snapshot: Optional[RegistrySnapshot] = None

    @property
    def snapshot(self) -> Optional[RegistrySnapshot]:
        return self._snapshot

    async def fetch_eligible_contracts(self) -> list[AgentContract]:
        """
        Fetch, map and filter contracts, then publish a new snapshot.

        Returns:
            Active contracts in source order

        Raises:
            SourceUnavailable: If any page cannot be fetched; the previous
                snapshot remains authoritative
        """
        records = await self.fetch_records(ACTIVE_FILTER)

        mapped = process_batch(records, self._map_record, describe=_record_label)
        skipped = [
            SkippedRecord(agent_id=_record_id(f.item), reason=f.message)
            for f in mapped.failed
        ]

        contracts: dict[str, AgentContract] = {}
        for contract in mapped.succeeded:
            if contract.status != AgentStatus.ACTIVE:
                continue
            if contract.id in contracts:
                logger.warning(f"Duplicate agent id {contract.id}, keeping first occurrence")
                skipped.append(SkippedRecord(agent_id=contract.id, reason="duplicate agent id"))
                continue
            contracts[contract.id] = contract

        self._snapshot = RegistrySnapshot(
            contracts=MappingProxyType(contracts),
            fetched_at=datetime.now(timezone.utc),
            skipped=tuple(skipped),
        )

        logger.info(
            f"Registry snapshot published: {len(contracts)} active contract(s), "
            f"{len(skipped)} skipped, {len(records)} record(s) fetched"
        )
        return list(contracts.values())

    async def fetch_records(self, filter: Optional[dict[str, Any]] = None) -> list[dict[str, Any]]:
        """Consume every page of raw records; any failure aborts the whole fetch."""
        records: list[dict[str, Any]] = []
        seen_cursors: set[str] = set()
        cursor: Optional[str] = None

        for page_number in range(1, self.max_pages + 1):
            try:
                page = await self.source.query(dict(filter) if filter else None, cursor)
            except SourceUnavailable:
                logger.error(f"Contract source unavailable on page {page_number}; keeping previous snapshot")
                raise
            except Exception as e:
                logger.error(f"Contract source failed on page {page_number}: {e}")
                raise SourceUnavailable(f"Contract source failed: {e}") from e

            records.extend(page.records)

            if not page.next_cursor:
                return records
            if page.next_cursor in seen_cursors:
                raise SourceUnavailable(f"Contract source repeated cursor {page.next_cursor}")
            seen_cursors.add(page.next_cursor)
            cursor = page.next_cursor

        raise SourceUnavailable(f"Contract source exceeded {self.max_pages} pages")

    def _map_record(self, record: dict[str, Any]) -> AgentContract:
        """Map one record; validation errors reject it, warnings are logged."""
        contract = AgentContract.from_wire(record)

        if self.validator is not None and contract.is_active:
            result = self.validator.validate(record)
            for warning in result.warnings:
                logger.warning(f"Contract {contract.id}: {warning.path}: {warning.message}")
            if not result.valid:
                summary = "; ".join(f"{e.path}: {e.message}" for e in result.errors)
                raise ContractMappingError(
                    f"Contract {contract.id} failed validation: {summary}",
                    [e.to_dict() for e in result.errors],
                )

        return contract

    def get(self, agent_id: str) -> Optional[AgentContract]:
        """Get a contract from the current snapshot by id."""
        if self._snapshot is None:
            return None
        return self._snapshot.contracts.get(agent_id)

    def list_contracts(self) -> list[AgentContract]:
        """List contracts in the current snapshot."""
        if self._snapshot is None:
            return []
        return list(self._snapshot.contracts.values())

    def __len__(self) -> int:
        return len(self._snapshot) if self._snapshot else 0

    def __contains__(self, agent_id: str) -> bool:
        return self.get(agent_id) is not None


def _record_id(record: Any) -> Optional[str]:
    if isinstance(record, dict) and isinstance(record.get("AgentID"), str):
        return record["AgentID"]
    return None


def _record_label(record: Any) -> str:
    return _record_id(record) or "<unknown>"
