from __future__ import annotations


class RecomputeError(Exception):
    """Base class for errors raised by the scoring and queue services."""


class TaskNotFoundError(RecomputeError):
    def __init__(self, task_id: int):
        super().__init__(f"queue task not found: id={task_id}")
        self.task_id = task_id


class InvalidTransitionError(RecomputeError):
    def __init__(self, task_id: int, current: str, target: str):
        super().__init__(f"queue task id={task_id} cannot move from {current} to {target}")
        self.task_id = task_id
        self.current = current
        self.target = target


class SnapshotNotFoundError(RecomputeError):
    def __init__(self, kind: str, entity_id: int):
        super().__init__(f"{kind} not found: id={entity_id}")
        self.kind = kind
        self.entity_id = entity_id


class InvalidPayloadError(RecomputeError):
    pass
