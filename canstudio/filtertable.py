"""Editable accept lists that decide which frames a raw filter lets through."""

from __future__ import annotations

import logging
from typing import Callable, Iterable, NamedTuple, Optional

logger = logging.getLogger(__name__)

CATCH_ALL = ".*"
DIRECTIONS = ("RX", "TX")


class FilterRule(NamedTuple):
    """One accept-list line: id and payload patterns and the resulting policy."""

    id_pattern: str
    payload_pattern: str
    accept: bool


ListCallback = Callable[[list[FilterRule]], None]


class FilterTable:
    """An ordered list of rules followed by a default policy for one direction.

    Every change is reported to the callback as a full accept list whose last
    entry is a catch-all rule carrying the default policy.
    """

    def __init__(self, direction: str = "RX") -> None:
        if direction not in DIRECTIONS:
            raise ValueError(f"unknown direction: {direction!r}")
        self.direction = direction
        self.default_policy = True
        self._rules: list[FilterRule] = []
        self._callback: Optional[ListCallback] = None

    @property
    def rules(self) -> tuple[FilterRule, ...]:
        """The editable rules, without the default-policy entry."""
        return tuple(self._rules)

    def set_callback(self, callback: ListCallback) -> None:
        self._callback = callback
        self._notify()

    def set_rules(self, rules: Iterable[Iterable]) -> None:
        """Load an accept list; its last entry supplies the default policy."""
        loaded = [FilterRule(*rule) for rule in rules]
        self._rules.clear()
        if loaded:
            *body, last = loaded
            self._rules.extend(body)
            self.default_policy = bool(last.accept)
        else:
            logger.warning("%s list expected to have at least 1 element", self.direction)
        self._notify()

    def set_default_policy(self, accept: bool) -> None:
        self.default_policy = bool(accept)
        self._notify()

    def add_rule(self) -> None:
        """Insert an accept-everything rule at the top."""
        self._rules.insert(0, FilterRule(CATCH_ALL, CATCH_ALL, True))
        self._notify()

    def remove_rule(self, row: int) -> None:
        self._check_row(row)
        del self._rules[row]
        self._notify()

    def move_up(self, row: int) -> int:
        """Move a rule one place up; return its new row."""
        self._check_row(row)
        if row == 0:
            return row
        self._rules[row - 1], self._rules[row] = self._rules[row], self._rules[row - 1]
        self._notify()
        return row - 1

    def move_down(self, row: int) -> int:
        """Move a rule one place down; return its new row."""
        self._check_row(row)
        if row == len(self._rules) - 1:
            return row
        self._rules[row + 1], self._rules[row] = self._rules[row], self._rules[row + 1]
        self._notify()
        return row + 1

    def accept_list(self) -> list[FilterRule]:
        return [*self._rules, FilterRule(CATCH_ALL, CATCH_ALL, self.default_policy)]

    def _check_row(self, row: int) -> None:
        if not 0 <= row < len(self._rules):
            raise IndexError(f"no rule at row {row}")

    def _notify(self) -> None:
        if self._callback is None:
            logger.warning("List callback not defined")
            return
        self._callback(self.accept_list())


class FilterGui:
    """The pair of RX and TX tables edited for a raw filter."""

    def __init__(self) -> None:
        self.rx = FilterTable("RX")
        self.tx = FilterTable("TX")

    def set_rx_list_callback(self, callback: ListCallback) -> None:
        self.rx.set_callback(callback)

    def set_tx_list_callback(self, callback: ListCallback) -> None:
        self.tx.set_callback(callback)

    def set_rx_list(self, rules: Iterable[Iterable]) -> None:
        self.rx.set_rules(rules)

    def set_tx_list(self, rules: Iterable[Iterable]) -> None:
        self.tx.set_rules(rules)