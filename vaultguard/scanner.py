"""Discovery scanner: paged listing over a ledger that only offers lookups by id.

Invariants:
    - Ids are folded in ascending order starting at ``offset``
    - At most ``limit * horizon_factor`` ids are examined per request
    - Per-id failures never raise; they are counted in the ScanState
    - Argument errors are raised before the first ledger call

Known limitation: records sparser than the horizon allows are not found.
``has_more`` means "a full page was produced", not "more provably exist".
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Protocol

from vaultguard.addresses import is_address, same_address
from vaultguard.entities import Will, format_will
from vaultguard.errors import InvalidArgument, NotFound, RegistryError

logger = logging.getLogger(__name__)


class RecordSource(Protocol):
    """What the scanner needs from the ledger; an index-backed source fits too."""
    def fetch_owner(self, record_id: int) -> str: ...
    def fetch_record(self, record_id: int) -> Any: ...


class ProbeOutcome(str, Enum):
    FOUND = "found"
    ABSENT = "absent"
    FILTERED = "filtered"
    INVALID = "invalid"
    ERROR = "error"


@dataclass(frozen=True)
class ProbeResult:
    record_id: int
    outcome: ProbeOutcome
    will: Will | None = None
    reason: str | None = None


@dataclass
class ScanState:
    next_id: int
    examined: int = 0
    found: int = 0
    counts: dict[str, int] = field(default_factory=dict)
    errors: list[str] = field(default_factory=list)

    def fold(self, probe: ProbeResult) -> None:
        self.next_id = probe.record_id + 1
        self.examined += 1
        self.counts[probe.outcome.value] = self.counts.get(probe.outcome.value, 0) + 1
        if probe.outcome is ProbeOutcome.FOUND:
            self.found += 1
        elif probe.outcome is ProbeOutcome.ERROR:
            self.errors.append(f"{probe.record_id}: {probe.reason}")


@dataclass
class ScanResult:
    wills: list[Will]
    has_more: bool
    count_examined: int
    state: ScanState


class WillScanner:
    def __init__(
        self,
        source: RecordSource,
        horizon_factor: int = 10,
        max_page_size: int = 100,
        concurrency: int = 1,
    ):
        self.source = source
        self.horizon_factor = horizon_factor
        self.max_page_size = max_page_size
        self.concurrency = max(1, concurrency)

    def validate(self, owner: str | None, limit: int, offset: int) -> None:
        if not isinstance(limit, int) or not 1 <= limit <= self.max_page_size:
            raise InvalidArgument(f"Limit must be between 1 and {self.max_page_size}")
        if not isinstance(offset, int) or offset < 0:
            raise InvalidArgument("Offset must be a non-negative integer")
        if owner is not None and not is_address(owner):
            raise InvalidArgument("Invalid owner address")

    def probe(self, record_id: int, owner: str | None = None, now: float | None = None) -> ProbeResult:
        """Examine a single id; never raises for ledger failures."""
        try:
            resolved_owner = self.source.fetch_owner(record_id)
        except NotFound:
            return ProbeResult(record_id, ProbeOutcome.ABSENT)
        except RegistryError as e:
            return ProbeResult(record_id, ProbeOutcome.ERROR, reason=e.details or e.message)

        if owner is not None and not same_address(resolved_owner, owner):
            return ProbeResult(record_id, ProbeOutcome.FILTERED)

        try:
            raw = self.source.fetch_record(record_id)
        except NotFound:
            return ProbeResult(record_id, ProbeOutcome.ABSENT)
        except RegistryError as e:
            return ProbeResult(record_id, ProbeOutcome.ERROR, reason=e.details or e.message)

        will = format_will(raw, resolved_owner, record_id, now=now)
        if not will.has_valid_deadline():
            return ProbeResult(record_id, ProbeOutcome.INVALID)
        return ProbeResult(record_id, ProbeOutcome.FOUND, will=will)

    def list(self, owner: str | None = None, limit: int = 10, offset: int = 0,
             now: float | None = None) -> ScanResult:
        self.validate(owner, limit, offset)
        if now is None:
            now = datetime.now(timezone.utc).timestamp()

        horizon = limit * self.horizon_factor
        end = offset + horizon
        state = ScanState(next_id=offset)
        wills: list[Will] = []

        for probe in self._probes(offset, end, owner, now):
            state.fold(probe)
            if probe.will is not None:
                wills.append(probe.will)
                if len(wills) == limit:
                    break

        logger.info(
            "Scanned ids %d..%d: %d found, outcomes %s",
            offset, state.next_id - 1, state.found, state.counts,
            extra={"owner": owner},
        )
        if state.errors:
            logger.warning("Scan skipped %d ids on ledger errors: %s",
                           len(state.errors), "; ".join(state.errors[:5]))
        return ScanResult(
            wills=wills,
            has_more=len(wills) == limit,
            count_examined=state.examined,
            state=state,
        )

    def _probes(self, start, end, owner, now):
        """Yield probe results in ascending id order.

        With ``concurrency > 1`` ids are probed in windows on a thread pool;
        ``Executor.map`` keeps the id order, so folding stays identical to
        the sequential scan.
        """
        if self.concurrency == 1:
            for record_id in range(start, end):
                yield self.probe(record_id, owner, now)
            return

        with ThreadPoolExecutor(max_workers=self.concurrency) as pool:
            for window_start in range(start, end, self.concurrency):
                window = range(window_start, min(window_start + self.concurrency, end))
                yield from pool.map(lambda i: self.probe(i, owner, now), window)
