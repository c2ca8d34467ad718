"""Focus ring over the container's widget entries."""

from __future__ import annotations

import logging

from dash_core.models import WidgetEntry


class FocusRing:
    """Cyclic pointer to the one entry that receives key input.

    The ring shares the container's entry list. ``current`` is ``-1`` while the
    list is empty; afterwards exactly one entry is focused and it is always
    ``entries[current]``.
    """

    def __init__(self, entries: list[WidgetEntry], logger: logging.Logger | None = None):
        self._entries = entries
        self._current = -1
        self._logger = logger or logging.getLogger(__name__)

    @property
    def current(self) -> int:
        return self._current

    def __len__(self) -> int:
        return len(self._entries)

    def focused_entry(self) -> WidgetEntry | None:
        if 0 <= self._current < len(self._entries):
            return self._entries[self._current]
        return None

    def attach(self) -> None:
        """Focus the first entry once the list stops being empty."""
        if self._current == -1 and self._entries:
            self.focus_index(0)

    def advance_forward(self) -> None:
        count = len(self._entries)
        if count == 0:
            return
        self.focus_index((self._current + 1) % count)

    def advance_backward(self) -> None:
        count = len(self._entries)
        if count == 0:
            return
        self.focus_index((self._current - 1 + count) % count)

    def focus_index(self, index: int) -> None:
        if not 0 <= index < len(self._entries):
            raise IndexError(f"focus index {index} out of range")
        previous = self.focused_entry()
        if previous is not None:
            previous.focused = False
            previous.widget.blur()
        entry = self._entries[index]
        entry.focused = True
        entry.widget.focus()
        self._current = index
        self._logger.debug("focus moved", extra={"fields": {"index": index}})
