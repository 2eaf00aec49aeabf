"""Shared read-check-write plumbing for lifecycle services."""

import logging
from enum import StrEnum
from typing import Any, Generic, Protocol, TypeVar

from opsdesk.core.errors import ErrorCode, NotFoundError
from opsdesk.core.state_machine import StateMachine
from opsdesk.core.validation import validate_id


class LifecycleEntity(Protocol):
    """Fields every task entity exposes to the lifecycle plumbing."""

    id: str
    status: Any
    version: int


TaskT = TypeVar("TaskT", bound=LifecycleEntity)
S = TypeVar("S", bound=StrEnum)
A = TypeVar("A", bound=StrEnum)


class TaskStore(Protocol[TaskT]):
    """Repository subset needed to load and transition a task."""

    async def get_by_id(self, task_id: str, /) -> TaskT | None: ...

    async def update(self, task_id: str, data: dict[str, Any], /, *, expected_version: int | None = None) -> TaskT: ...


def append_note(existing: str | None, entry: str, *, separator: str = "\n") -> str:
    """Append an entry to a notes log without overwriting earlier entries."""
    return f"{existing}{separator}{entry}" if existing else entry


class LifecycleService(Generic[TaskT, S, A]):
    """Base class for services whose entities move through a StateMachine.

    Subclasses set entity_label and id_field and call _load/_apply from their
    public operations.
    """

    entity_label = "Task"
    id_field = "task"

    def __init__(
        self,
        *,
        store: TaskStore[TaskT],
        machine: StateMachine[S, A],
        logger: logging.Logger,
    ) -> None:
        self._store = store
        self._machine = machine
        self._logger = logger

    async def _load(self, task_id: str) -> TaskT:
        """Validate the ID format and resolve the task, raising TASK_NOT_FOUND if missing."""
        validate_id(task_id, self.id_field)
        task = await self._store.get_by_id(task_id)
        if task is None:
            raise NotFoundError(f"{self.entity_label} not found", ErrorCode.TASK_NOT_FOUND)
        return task

    async def _apply(self, task: TaskT, action: A, changes: dict[str, Any] | None = None) -> TaskT:
        """Check the guard, write status plus side effects, and log the transition.

        The write carries the version that was read, so a concurrent change to
        the same task makes the repository reject it.
        """
        new_status = self._machine.target_for(action, task.status)
        data: dict[str, Any] = {"status": new_status, **(changes or {})}

        updated = await self._store.update(task.id, data, expected_version=task.version)

        self._logger.info(
            "%s transitioned: %s",
            self.entity_label,
            action,
            extra={"task_id": updated.id, "status": str(updated.status), "action": str(action)},
        )
        return updated
