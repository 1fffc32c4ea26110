"""
token_ledger.sinks - pluggable sinks for committed ledger notifications.

External observers consume `Transfer` / `Approval` notifications through a
sink. Three backends ship here:

- InMemoryEventSink: fast, test/dev friendly; keeps all records in RAM.
- JsonlEventSink: append-only JSONL file; durable and simple to operate.
- NullEventSink: no-op sink for setups that ignore notifications.

Only events of *committed* operations reach a sink. Ordering is given by the
ledger: (op_index, log_index) strictly increases for appended records.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Protocol, runtime_checkable

from .types.address import Address, AddressLike
from .types.events import LedgerEvent, event_from_dict

# =============================================================================
# Public data model
# =============================================================================


@dataclass(frozen=True)
class EventRecord:
    """
    A committed event with its ledger context.

    op_index  : 0-based index of the committed operation on the ledger.
    log_index : 0-based index of the event inside that operation.
    operation : operation name ("mint", "transfer_from", ...).
    event     : the notification itself.
    """

    op_index: int
    log_index: int
    operation: str
    event: LedgerEvent

    @property
    def name(self) -> str:
        return self.event.name

    def involves(self, address: Address) -> bool:
        return address in self.event.args[:2]

    def to_dict(self) -> dict:
        return {
            "op_index": self.op_index,
            "log_index": self.log_index,
            "operation": self.operation,
            **self.event.to_dict(),
        }

    @classmethod
    def from_dict(cls, obj: dict) -> "EventRecord":
        return cls(
            op_index=int(obj["op_index"]),
            log_index=int(obj["log_index"]),
            operation=str(obj["operation"]),
            event=event_from_dict(obj),
        )


# =============================================================================
# Sink interface
# =============================================================================


@runtime_checkable
class EventSink(Protocol):
    def append(
        self, event: LedgerEvent, *, op_index: int, log_index: int, operation: str
    ) -> EventRecord:
        """Append a single committed event. Returns the stored record."""

    def get_logs(
        self,
        *,
        name: Optional[str] = None,
        address: Optional[AddressLike] = None,
        limit: Optional[int] = None,
    ) -> Iterable[EventRecord]:
        """Iterate matching records in ascending (op_index, log_index) order."""

    def flush(self) -> None:
        """Force persistence, if applicable."""

    def close(self) -> None:
        """Release resources (files, buffers)."""


def _filter(
    records: Iterable[EventRecord],
    name: Optional[str],
    address: Optional[AddressLike],
    limit: Optional[int],
) -> Iterator[EventRecord]:
    want = Address.coerce(address) if address is not None else None
    n = 0
    for rec in records:
        if name is not None and rec.name != name:
            continue
        if want is not None and not rec.involves(want):
            continue
        yield rec
        n += 1
        if limit is not None and n >= limit:
            break


# =============================================================================
# In-memory sink
# =============================================================================


class InMemoryEventSink(EventSink):
    """A simple, thread-safe in-memory sink."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._records: List[EventRecord] = []

    def append(
        self, event: LedgerEvent, *, op_index: int, log_index: int, operation: str
    ) -> EventRecord:
        rec = EventRecord(op_index=op_index, log_index=log_index, operation=operation, event=event)
        with self._lock:
            self._records.append(rec)
        return rec

    def get_logs(
        self,
        *,
        name: Optional[str] = None,
        address: Optional[AddressLike] = None,
        limit: Optional[int] = None,
    ) -> List[EventRecord]:
        with self._lock:
            snapshot = list(self._records)
        return list(_filter(snapshot, name, address, limit))

    def events(self) -> List[LedgerEvent]:
        with self._lock:
            return [rec.event for rec in self._records]

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def flush(self) -> None:
        return

    def close(self) -> None:
        with self._lock:
            self._records.clear()


# =============================================================================
# JSONL sink (durable)
# =============================================================================


class JsonlEventSink(EventSink):
    """
    Append-only JSONL sink. Each line is one EventRecord:

        {"op_index": 0, "log_index": 0, "operation": "mint",
         "event": "Transfer", "from": "0x…", "to": "0x…", "value": 1000}

    Values are written as JSON integers, so 256-bit amounts round-trip exactly.
    """

    def __init__(self, path: str | os.PathLike) -> None:
        self._path = os.fspath(path)
        os.makedirs(os.path.dirname(self._path) or ".", exist_ok=True)
        self._fh = open(self._path, "a+", encoding="utf-8", buffering=1)  # line-buffered
        self._lock = threading.RLock()
        self._log = logging.getLogger(__name__)

    @property
    def path(self) -> str:
        return self._path

    def append(
        self, event: LedgerEvent, *, op_index: int, log_index: int, operation: str
    ) -> EventRecord:
        rec = EventRecord(op_index=op_index, log_index=log_index, operation=operation, event=event)
        line = json.dumps(rec.to_dict(), separators=(",", ":"))
        with self._lock:
            self._fh.write(line + "\n")
        return rec

    def _iter_file(self) -> Iterator[EventRecord]:
        with self._lock:
            self._fh.flush()
            with open(self._path, "r", encoding="utf-8") as fh:
                lines = fh.readlines()
        for lineno, line in enumerate(lines, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                yield EventRecord.from_dict(json.loads(line))
            except (ValueError, KeyError) as e:
                self._log.warning("skipping malformed event line", extra={"path": self._path, "line": lineno, "err": str(e)})

    def get_logs(
        self,
        *,
        name: Optional[str] = None,
        address: Optional[AddressLike] = None,
        limit: Optional[int] = None,
    ) -> List[EventRecord]:
        return list(_filter(self._iter_file(), name, address, limit))

    def flush(self) -> None:
        with self._lock:
            self._fh.flush()
            os.fsync(self._fh.fileno())

    def close(self) -> None:
        with self._lock:
            if not self._fh.closed:
                self._fh.flush()
                self._fh.close()


# =============================================================================
# Null sink
# =============================================================================


class NullEventSink(EventSink):
    """Discards everything."""

    def append(
        self, event: LedgerEvent, *, op_index: int, log_index: int, operation: str
    ) -> EventRecord:
        return EventRecord(op_index=op_index, log_index=log_index, operation=operation, event=event)

    def get_logs(
        self,
        *,
        name: Optional[str] = None,
        address: Optional[AddressLike] = None,
        limit: Optional[int] = None,
    ) -> List[EventRecord]:
        return []

    def flush(self) -> None:
        return

    def close(self) -> None:
        return


__all__ = [
    "EventRecord",
    "EventSink",
    "InMemoryEventSink",
    "JsonlEventSink",
    "NullEventSink",
]
