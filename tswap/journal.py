"""Undo journal for transactional state changes.

State owned by tokens and pools lives in plain dicts and lists. Every write
made while a frame is open is recorded together with the value it replaced,
so a failed operation can be unwound to exactly the state it started from:

    with journal.frame():
        journal.write(balances, owner, balances.get(owner, 0) - amount)
        journal.write(balances, recipient, balances.get(recipient, 0) + amount)
        ...  # any exception here restores both balances

Frames nest. A committed inner frame hands its undo records to the enclosing
frame, so the outermost frame still rolls back everything on failure.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, MutableMapping
from contextlib import contextmanager
from typing import Any

import structlog

logger = structlog.get_logger()

_MISSING = object()

UndoRecord = Callable[[], None]


class Journal:
    """Stack of undo frames."""

    def __init__(self) -> None:
        self._frames: list[list[UndoRecord]] = []

    @property
    def depth(self) -> int:
        """Number of currently open frames."""
        return len(self._frames)

    def write(self, mapping: MutableMapping[Any, Any], key: Any, value: Any) -> None:
        """Set mapping[key] = value, recording the previous entry."""
        previous = mapping.get(key, _MISSING)
        mapping[key] = value
        self._record(lambda: _restore(mapping, key, previous))

    def append(self, items: list[Any], item: Any) -> None:
        """Append to a list, recording the append."""
        items.append(item)
        self._record(items.pop)

    def _record(self, undo: UndoRecord) -> None:
        # Writes outside any frame are committed immediately
        if self._frames:
            self._frames[-1].append(undo)

    @contextmanager
    def frame(self) -> Iterator[None]:
        """Open a frame; undo its writes if the body raises."""
        self._frames.append([])
        try:
            yield
        except BaseException:
            undo_log = self._frames.pop()
            logger.debug("journal_rollback", writes=len(undo_log), depth=len(self._frames))
            for undo in reversed(undo_log):
                undo()
            raise
        else:
            undo_log = self._frames.pop()
            if self._frames:
                self._frames[-1].extend(undo_log)


def _restore(mapping: MutableMapping[Any, Any], key: Any, previous: Any) -> None:
    if previous is _MISSING:
        mapping.pop(key, None)
    else:
        mapping[key] = previous
