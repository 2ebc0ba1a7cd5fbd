"""Component that forwards only the frames its accept lists allow."""

from __future__ import annotations

import functools
import logging
import re
from typing import Any, Iterable, Mapping, Optional, Pattern

from .common import CanFrame, ComponentBase, PropertySpec, Signal
from .filtertable import FilterGui, FilterRule

logger = logging.getLogger(__name__)

_NAME = "name"
_RX_LIST = "rxList"
_TX_LIST = "txList"

_SUPPORTED_PROPERTIES = (PropertySpec(_NAME),)


@functools.lru_cache(maxsize=256)
def _compile(pattern: str) -> Optional[Pattern[str]]:
    try:
        return re.compile(pattern.lower())
    except re.error:
        logger.error("Invalid filter pattern '%s'", pattern)
        return None


def _matches(pattern: str, text: str) -> bool:
    compiled = _compile(pattern)
    return compiled is not None and compiled.search(text) is not None


def accept_frame(rules: Iterable[FilterRule], frame: CanFrame) -> bool:
    """Return the policy of the first rule matching the frame's hex id and payload."""
    frame_id = format(frame.frame_id, "x")
    payload = frame.payload.hex()
    for id_pattern, payload_pattern, accept in rules:
        if _matches(id_pattern, frame_id) and _matches(payload_pattern, payload):
            return bool(accept)
    logger.error("No match or accept list is empty. Frame dropped")
    return False


def _rule_to_json(rule: FilterRule) -> dict[str, Any]:
    return {"id": rule.id_pattern, "payload": rule.payload_pattern, "policy": rule.accept}


def _read_accept_list(config: Mapping[str, Any], list_name: str) -> list[FilterRule]:
    if list_name not in config:
        logger.warning("%s not found", list_name)
        return []
    items = config[list_name]
    if not isinstance(items, list):
        logger.warning("%s expected to be an array", list_name)
        return []
    rules = []
    for item in items:
        if not isinstance(item, Mapping):
            logger.warning("%s: list item is not an object", list_name)
            continue
        id_pattern = item.get("id")
        payload_pattern = item.get("payload")
        policy = item.get("policy")
        rules.append(
            FilterRule(
                id_pattern if isinstance(id_pattern, str) else "",
                payload_pattern if isinstance(payload_pattern, str) else "",
                policy if isinstance(policy, bool) else False,
            )
        )
    return rules


class CanRawFilter(ComponentBase):
    """Passes TX and RX frames on according to separate accept lists.

    Emits ``tx_frame_out(frame)`` and ``rx_frame_out(frame)`` for accepted
    frames while the simulation runs.
    """

    def __init__(self, gui: Any = None) -> None:
        super().__init__(_SUPPORTED_PROPERTIES)
        self._sim_started = False
        self._docked = True
        self._rx_accept_list: list[FilterRule] = []
        self._tx_accept_list: list[FilterRule] = []
        self.tx_frame_out = Signal()
        self.rx_frame_out = Signal()
        self.gui = gui if gui is not None else FilterGui()
        self.gui.set_rx_list_callback(self._rx_list_updated)
        self.gui.set_tx_list_callback(self._tx_list_updated)

    @property
    def rx_accept_list(self) -> tuple[FilterRule, ...]:
        return tuple(self._rx_accept_list)

    @property
    def tx_accept_list(self) -> tuple[FilterRule, ...]:
        return tuple(self._tx_accept_list)

    def _rx_list_updated(self, rules: Iterable[FilterRule]) -> None:
        self._rx_accept_list = [FilterRule(*rule) for rule in rules]
        logger.debug("RX list updated: %s", self._rx_accept_list)

    def _tx_list_updated(self, rules: Iterable[FilterRule]) -> None:
        self._tx_accept_list = [FilterRule(*rule) for rule in rules]
        logger.debug("TX list updated: %s", self._tx_accept_list)

    def get_config(self) -> dict[str, Any]:
        config = super().get_config()
        config[_RX_LIST] = [_rule_to_json(rule) for rule in self._rx_accept_list]
        config[_TX_LIST] = [_rule_to_json(rule) for rule in self._tx_accept_list]
        return config

    def set_config(self, config: Mapping[str, Any]) -> None:
        super().set_config(config)
        rx_rules = _read_accept_list(config, _RX_LIST)
        tx_rules = _read_accept_list(config, _TX_LIST)
        self.gui.set_rx_list(rx_rules)
        self.gui.set_tx_list(tx_rules)

    def main_widget_docked(self) -> bool:
        return self._docked

    def start_simulation(self) -> None:
        self._sim_started = True

    def stop_simulation(self) -> None:
        self._sim_started = False

    def tx_frame_in(self, frame: CanFrame) -> None:
        if accept_frame(self._tx_accept_list, frame) and self._sim_started:
            self.tx_frame_out.emit(frame)

    def rx_frame_in(self, frame: CanFrame) -> None:
        if accept_frame(self._rx_accept_list, frame) and self._sim_started:
            self.rx_frame_out.emit(frame)