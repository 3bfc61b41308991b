"""Calculation session holding the current result and the saved history.

A session belongs to a single user. The evaluator itself is stateless, so
several sessions can share one evaluator.
"""

import logging

from .analyze import ComplianceEvaluator
from .models import (
    BranchDrop,
    CalculationInput,
    CalculationMode,
    CalculationResult,
    HistoryEntry,
    Node,
    UpstreamInput,
    apply_branch_drop,
)

log = logging.getLogger(__name__)


class HistoryError(KeyError):
    """Raised for history operations on missing entries or results."""


class ChamberForm:
    """Top level, invert level and depth fields of one chamber.

    Editing the top level or the invert level re-derives the depth when both
    levels are known. Editing the depth re-derives the invert level when the
    top level is known.
    """

    def __init__(
        self,
        node_id: str,
        top_level: float | None = None,
        invert_level: float | None = None,
    ) -> None:
        self.node_id = node_id
        self.top_level = top_level
        self.invert_level = invert_level
        self.depth: float | None = None
        self._sync_depth()

    def _sync_depth(self) -> None:
        if self.top_level is None or self.invert_level is None:
            return
        self.depth = round(self.top_level - self.invert_level, 3)

    def set_top_level(self, top_level: float | None) -> None:
        self.top_level = top_level
        self._sync_depth()

    def set_invert_level(self, invert_level: float | None) -> None:
        self.invert_level = invert_level
        self._sync_depth()

    def set_depth(self, depth: float | None) -> None:
        self.depth = depth
        if depth is None or self.top_level is None:
            return
        self.invert_level = round(self.top_level - depth, 3)

    def to_node(self) -> Node | None:
        if self.top_level is None or self.invert_level is None:
            return None
        return Node(id=self.node_id, top_level=self.top_level, invert_level=self.invert_level)


class Session:
    """Current calculation slot and in-memory history of one user."""

    def __init__(self, evaluator: ComplianceEvaluator | None = None) -> None:
        self.evaluator = evaluator or ComplianceEvaluator()
        self._mode = CalculationMode.DOWNSTREAM
        self.branch_drop = BranchDrop.NONE
        self.current_input: CalculationInput | None = None
        self.current: CalculationResult | None = None
        self._history: list[HistoryEntry] = []

    @property
    def mode(self) -> CalculationMode:
        return self._mode

    @mode.setter
    def mode(self, mode: CalculationMode) -> None:
        if mode == self._mode:
            return
        log.debug(f"Mode changed {self._mode.value} -> {mode.value}, branch drop reset")
        self._mode = mode
        self.branch_drop = BranchDrop.NONE

    @property
    def history(self) -> tuple[HistoryEntry, ...]:
        return tuple(self._history)

    def update(self, calc_input: CalculationInput) -> CalculationResult | None:
        """Evaluate the input and make it the current calculation.

        Parameters
        ----------
        calc_input : CalculationInput
            Input of the active mode

        Returns
        -------
        CalculationResult | None
            New current result, None when the input is incomplete
        """
        self.mode = calc_input.mode
        if isinstance(calc_input, UpstreamInput):
            self.branch_drop = calc_input.branch_drop
        self.current_input = calc_input
        self.current = self.evaluator.evaluate(calc_input)
        return self.current

    def display_start_node(self) -> Node | None:
        """Get the upstream chamber as displayed, including the branch drop."""
        if self.current is None:
            return None
        if self.mode != CalculationMode.UPSTREAM:
            return self.current.start_node
        return apply_branch_drop(self.current.start_node, self.branch_drop)

    def save(self) -> HistoryEntry:
        """Append the current calculation to the history.

        Raises
        ------
        HistoryError
            If there is no current result to save
        """
        if self.current is None or self.current_input is None:
            raise HistoryError("No calculation result to save")
        entry = HistoryEntry(inputs=self.current_input, result=self.current)
        self._history.append(entry)
        log.info(f"Saved run {len(self._history)}: IC {entry.result.start_node.id} -> IC {entry.result.end_node.id}")
        return entry

    def get(self, entry_id: str) -> HistoryEntry:
        for entry in self._history:
            if entry.id == entry_id:
                return entry
        raise HistoryError(f"History entry not found: {entry_id}")

    def remove(self, entry_id: str) -> HistoryEntry:
        """Remove a history entry by id, keeping the order of the others."""
        entry = self.get(entry_id)
        self._history.remove(entry)
        log.info(f"Removed history entry {entry_id}")
        return entry

    def restore(self, entry_id: str) -> CalculationInput:
        """Make a saved input the current calculation again.

        Returns
        -------
        CalculationInput
            The stored input, re-evaluated into ``current``
        """
        entry = self.get(entry_id)
        self.update(entry.inputs)
        return entry.inputs

    def clear(self) -> None:
        self._history.clear()
