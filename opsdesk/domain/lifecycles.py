"""Transition tables for the maintenance and housekeeping workflows."""

from opsdesk.core.state_machine import StateMachine, TransitionRule
from opsdesk.domain.housekeeping import RoomStatus, RoomTaskAction
from opsdesk.domain.work_order import WorkOrderAction, WorkOrderStatus


WORK_ORDER_LIFECYCLE: StateMachine[WorkOrderStatus, WorkOrderAction] = StateMachine(
    name="work order",
    states=WorkOrderStatus,
    actions=WorkOrderAction,
    rules={
        WorkOrderAction.ASSIGN: TransitionRule(
            frozenset({WorkOrderStatus.OPEN, WorkOrderStatus.ASSIGNED}),
            WorkOrderStatus.ASSIGNED,
        ),
        WorkOrderAction.UNASSIGN: TransitionRule(
            frozenset({WorkOrderStatus.ASSIGNED}),
            WorkOrderStatus.OPEN,
        ),
        WorkOrderAction.START: TransitionRule(
            frozenset({WorkOrderStatus.ASSIGNED, WorkOrderStatus.PENDING_PARTS}),
            WorkOrderStatus.IN_PROGRESS,
        ),
        WorkOrderAction.SET_PENDING_PARTS: TransitionRule(
            frozenset({WorkOrderStatus.ASSIGNED, WorkOrderStatus.IN_PROGRESS}),
            WorkOrderStatus.PENDING_PARTS,
        ),
        WorkOrderAction.COMPLETE: TransitionRule(
            frozenset({WorkOrderStatus.IN_PROGRESS}),
            WorkOrderStatus.COMPLETED,
        ),
        WorkOrderAction.CANCEL: TransitionRule(
            frozenset(
                {
                    WorkOrderStatus.OPEN,
                    WorkOrderStatus.ASSIGNED,
                    WorkOrderStatus.IN_PROGRESS,
                    WorkOrderStatus.PENDING_PARTS,
                }
            ),
            WorkOrderStatus.CANCELLED,
        ),
        WorkOrderAction.REOPEN: TransitionRule(
            frozenset({WorkOrderStatus.CANCELLED}),
            WorkOrderStatus.OPEN,
        ),
    },
)


_ALL_ROOM_STATUSES = frozenset(RoomStatus)

ROOM_TASK_LIFECYCLE: StateMachine[RoomStatus, RoomTaskAction] = StateMachine(
    name="cleaning task",
    states=RoomStatus,
    actions=RoomTaskAction,
    rules={
        # Rooms have no "assigned" status; assignment keeps the current one
        RoomTaskAction.ASSIGN: TransitionRule(
            frozenset({RoomStatus.DIRTY, RoomStatus.IN_PROGRESS}),
            None,
        ),
        RoomTaskAction.UNASSIGN: TransitionRule(
            _ALL_ROOM_STATUSES - {RoomStatus.IN_PROGRESS},
            None,
        ),
        RoomTaskAction.START: TransitionRule(
            frozenset({RoomStatus.DIRTY}),
            RoomStatus.IN_PROGRESS,
        ),
        RoomTaskAction.COMPLETE: TransitionRule(
            frozenset({RoomStatus.IN_PROGRESS}),
            RoomStatus.CLEAN,
        ),
        RoomTaskAction.INSPECT_PASS: TransitionRule(
            frozenset({RoomStatus.CLEAN}),
            RoomStatus.INSPECTED,
        ),
        RoomTaskAction.INSPECT_FAIL: TransitionRule(
            frozenset({RoomStatus.CLEAN}),
            RoomStatus.DIRTY,
        ),
        RoomTaskAction.MARK_DIRTY: TransitionRule(_ALL_ROOM_STATUSES, RoomStatus.DIRTY),
        RoomTaskAction.MARK_OUT_OF_ORDER: TransitionRule(_ALL_ROOM_STATUSES, RoomStatus.OUT_OF_ORDER),
    },
)
