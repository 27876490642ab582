"""Execution environment shared by tokens, pools and registries.

The environment plays the part of the host chain: it owns the clock used for
deadline checks, the undo journal that makes each public operation atomic,
the lock that serializes state-mutating operations, and the committed event
log. It is passed explicitly to every stateful object; there is no global
instance.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager

import structlog
from eth_abi import encode  # type: ignore[attr-defined]
from eth_utils import keccak

from tswap.journal import Journal
from tswap.models.events import Event

logger = structlog.get_logger()


def derive_address(types: list[str], values: list[object]) -> str:
    """Derive a deterministic address from ABI-encoded values.

    Uses the last 20 bytes of keccak256(abi.encode(values)), the same shape
    as a CREATE2 deployment address.
    """
    digest = keccak(encode(types, values))
    return "0x" + digest[-20:].hex()


class Environment:
    """Clock, journal, lock and event log for one exchange instance.

    Args:
        clock: Callable returning the current unix time in seconds. Defaults
            to wall-clock time. Use set_time()/advance() to pin it in tests.
    """

    def __init__(self, clock: Callable[[], int] | None = None) -> None:
        self.journal = Journal()
        self.events: list[Event] = []
        # Re-entrant so a token callback on the same thread can call back in
        self._lock = threading.RLock()
        self._clock = clock or (lambda: int(time.time()))
        self._nonce = 0

    # --- Clock ---

    def now(self) -> int:
        """Current unix timestamp in seconds."""
        return self._clock()

    def set_time(self, timestamp: int) -> None:
        """Freeze the clock at a fixed timestamp."""
        self._clock = lambda: timestamp

    def advance(self, seconds: int) -> None:
        """Shift the clock forward; a live clock keeps ticking from the new offset."""
        clock = self._clock
        self._clock = lambda: clock() + seconds

    # --- Addresses ---

    def new_address(self, label: str) -> str:
        """Derive a fresh address for a newly deployed object."""
        self._nonce += 1
        return derive_address(["string", "uint256"], [label, self._nonce])

    # --- Transactions ---

    @contextmanager
    def atomic(self) -> Iterator[None]:
        """Run one operation as a transaction.

        Serializes against other operations on this environment and opens a
        journal frame. If the body raises, every journaled write and every
        event emitted inside it is undone before the exception propagates.
        """
        with self._lock:
            first_event = len(self.events)
            outermost = self.journal.depth == 0
            with self.journal.frame():
                yield
            if outermost:
                for event in self.events[first_event:]:
                    logger.info(event.kind, **event.model_dump(exclude={"kind"}))  # type: ignore[attr-defined]

    def emit(self, event: Event) -> None:
        """Stage an event in the current transaction."""
        self.journal.append(self.events, event)

    def events_of(self, event_type: type[Event]) -> list[Event]:
        """Committed events of one type, oldest first."""
        return [e for e in self.events if isinstance(e, event_type)]
