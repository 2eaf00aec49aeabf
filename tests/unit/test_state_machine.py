"""Unit tests for the transition tables."""

from enum import StrEnum

import pytest

from opsdesk.core.errors import ErrorCode, StateConflictError
from opsdesk.core.state_machine import StateMachine, TransitionRule
from opsdesk.domain.housekeeping import RoomStatus, RoomTaskAction
from opsdesk.domain.lifecycles import ROOM_TASK_LIFECYCLE, WORK_ORDER_LIFECYCLE
from opsdesk.domain.work_order import WorkOrderAction, WorkOrderStatus


class Light(StrEnum):
    OFF = "off"
    ON = "on"


class Switch(StrEnum):
    TOGGLE_ON = "toggle_on"
    TOGGLE_OFF = "toggle_off"


@pytest.mark.unit
class TestStateMachineConstruction:
    """Tests for StateMachine table checks."""

    def test_missing_rule_is_rejected(self):
        with pytest.raises(ValueError, match="no rule for actions: toggle_off"):
            StateMachine(
                name="light",
                states=Light,
                actions=Switch,
                rules={Switch.TOGGLE_ON: TransitionRule(frozenset({Light.OFF}), Light.ON)},
            )

    def test_unknown_state_is_rejected(self):
        with pytest.raises(ValueError, match="unknown states"):
            StateMachine(
                name="light",
                states=Light,
                actions=Switch,
                rules={
                    Switch.TOGGLE_ON: TransitionRule(frozenset({Light.OFF}), Light.ON),
                    Switch.TOGGLE_OFF: TransitionRule(frozenset({RoomStatus.DIRTY}), Light.OFF),
                },
            )

    def test_rules_are_read_only(self):
        rules = WORK_ORDER_LIFECYCLE.rules

        with pytest.raises(TypeError):
            rules[WorkOrderAction.REOPEN] = TransitionRule(frozenset(), None)  # type: ignore[index]


@pytest.mark.unit
class TestWorkOrderLifecycle:
    """Tests for the maintenance transition table."""

    @pytest.mark.parametrize(
        ("action", "current", "expected"),
        [
            (WorkOrderAction.ASSIGN, WorkOrderStatus.OPEN, WorkOrderStatus.ASSIGNED),
            (WorkOrderAction.ASSIGN, WorkOrderStatus.ASSIGNED, WorkOrderStatus.ASSIGNED),
            (WorkOrderAction.UNASSIGN, WorkOrderStatus.ASSIGNED, WorkOrderStatus.OPEN),
            (WorkOrderAction.START, WorkOrderStatus.PENDING_PARTS, WorkOrderStatus.IN_PROGRESS),
            (WorkOrderAction.SET_PENDING_PARTS, WorkOrderStatus.IN_PROGRESS, WorkOrderStatus.PENDING_PARTS),
            (WorkOrderAction.COMPLETE, WorkOrderStatus.IN_PROGRESS, WorkOrderStatus.COMPLETED),
            (WorkOrderAction.CANCEL, WorkOrderStatus.PENDING_PARTS, WorkOrderStatus.CANCELLED),
            (WorkOrderAction.REOPEN, WorkOrderStatus.CANCELLED, WorkOrderStatus.OPEN),
        ],
    )
    def test_allowed_transitions(self, action, current, expected):
        assert WORK_ORDER_LIFECYCLE.target_for(action, current) == expected

    @pytest.mark.parametrize(
        ("action", "current"),
        [
            (WorkOrderAction.ASSIGN, WorkOrderStatus.IN_PROGRESS),
            (WorkOrderAction.START, WorkOrderStatus.OPEN),
            (WorkOrderAction.COMPLETE, WorkOrderStatus.ASSIGNED),
            (WorkOrderAction.CANCEL, WorkOrderStatus.COMPLETED),
            (WorkOrderAction.REOPEN, WorkOrderStatus.COMPLETED),
        ],
    )
    def test_rejected_transitions(self, action, current):
        with pytest.raises(StateConflictError) as exc_info:
            WORK_ORDER_LIFECYCLE.ensure_allowed(action, current)

        assert exc_info.value.code == ErrorCode.INVALID_STATUS_TRANSITION
        assert current.value in exc_info.value.message

    def test_completed_is_terminal(self):
        assert WORK_ORDER_LIFECYCLE.allowed_actions(WorkOrderStatus.COMPLETED) == []

    def test_accepts_raw_status_values(self):
        assert WORK_ORDER_LIFECYCLE.can(WorkOrderAction.START, "assigned")


@pytest.mark.unit
class TestRoomTaskLifecycle:
    """Tests for the housekeeping transition table."""

    def test_assign_keeps_status(self):
        assert ROOM_TASK_LIFECYCLE.target_for(RoomTaskAction.ASSIGN, RoomStatus.IN_PROGRESS) == RoomStatus.IN_PROGRESS

    def test_inspection_outcomes(self):
        assert ROOM_TASK_LIFECYCLE.target_for(RoomTaskAction.INSPECT_PASS, RoomStatus.CLEAN) == RoomStatus.INSPECTED
        assert ROOM_TASK_LIFECYCLE.target_for(RoomTaskAction.INSPECT_FAIL, RoomStatus.CLEAN) == RoomStatus.DIRTY

    def test_inspection_requires_clean_room(self):
        with pytest.raises(StateConflictError):
            ROOM_TASK_LIFECYCLE.ensure_allowed(RoomTaskAction.INSPECT_PASS, RoomStatus.DIRTY)

    @pytest.mark.parametrize("current", list(RoomStatus))
    def test_mark_dirty_and_out_of_order_from_anywhere(self, current):
        assert ROOM_TASK_LIFECYCLE.target_for(RoomTaskAction.MARK_DIRTY, current) == RoomStatus.DIRTY
        assert ROOM_TASK_LIFECYCLE.target_for(RoomTaskAction.MARK_OUT_OF_ORDER, current) == RoomStatus.OUT_OF_ORDER

    def test_unassign_blocked_while_cleaning(self):
        assert not ROOM_TASK_LIFECYCLE.can(RoomTaskAction.UNASSIGN, RoomStatus.IN_PROGRESS)
        assert ROOM_TASK_LIFECYCLE.can(RoomTaskAction.UNASSIGN, RoomStatus.CLEAN)
