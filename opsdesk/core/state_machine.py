"""Guarded transition tables for task lifecycles.

A workflow is described by a state enum, an action enum and one
TransitionRule per action. The table is checked at construction time so a new
state or action cannot be added without updating every rule.
"""

from collections.abc import Mapping
from enum import StrEnum
from types import MappingProxyType
from typing import Generic, NamedTuple, TypeVar

from opsdesk.core.errors import ErrorCode, StateConflictError


S = TypeVar("S", bound=StrEnum)
A = TypeVar("A", bound=StrEnum)


class TransitionRule(NamedTuple, Generic[S]):
    """Guard and outcome of one action.

    A target of None keeps the current status (e.g. housekeeping assignment).
    """

    sources: frozenset[S]
    target: S | None


class StateMachine(Generic[S, A]):
    """Transition table for one workflow."""

    def __init__(
        self,
        *,
        name: str,
        states: type[S],
        actions: type[A],
        rules: Mapping[A, TransitionRule[S]],
    ) -> None:
        missing = [action for action in actions if action not in rules]
        if missing:
            msg = f"{name} state machine has no rule for actions: {', '.join(missing)}"
            raise ValueError(msg)

        for action, rule in rules.items():
            if action not in set(actions):
                msg = f"{name} state machine has a rule for unknown action {action!r}"
                raise ValueError(msg)
            unknown = [state for state in rule.sources if not isinstance(state, states)]
            if rule.target is not None and not isinstance(rule.target, states):
                unknown.append(rule.target)
            if unknown:
                msg = f"{name} state machine rule {action} references unknown states: {unknown}"
                raise ValueError(msg)

        self.name = name
        self.states = states
        self.actions = actions
        self._rules: Mapping[A, TransitionRule[S]] = MappingProxyType(dict(rules))

    @property
    def rules(self) -> Mapping[A, TransitionRule[S]]:
        """Read-only view of the transition table."""
        return self._rules

    def can(self, action: A, current: S) -> bool:
        """Return True if action is allowed from the current status."""
        return self.states(current) in self._rules[action].sources

    def ensure_allowed(self, action: A, current: S) -> None:
        """Raise INVALID_STATUS_TRANSITION unless action is allowed from current."""
        if not self.can(action, current):
            msg = f"Cannot {action} {self.name} with status: {current}"
            raise StateConflictError(msg, ErrorCode.INVALID_STATUS_TRANSITION)

    def target_for(self, action: A, current: S) -> S:
        """Return the status after applying action to current (guard is checked)."""
        self.ensure_allowed(action, current)
        target = self._rules[action].target
        return self.states(current) if target is None else target

    def allowed_actions(self, current: S) -> list[A]:
        """Actions that may be applied from the current status, in declaration order."""
        return [action for action in self.actions if self.can(action, current)]
