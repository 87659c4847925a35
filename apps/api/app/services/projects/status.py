from __future__ import annotations

from enum import Enum
from typing import Dict, FrozenSet, Optional

from loguru import logger

from app.core.errors import InvalidStatusTransition


class ProjectStatus(str, Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


# target -> statuses it may be entered from
ALLOWED_FROM: Dict[ProjectStatus, FrozenSet[ProjectStatus]] = {
    ProjectStatus.PROCESSING: frozenset({ProjectStatus.PENDING}),
    ProjectStatus.COMPLETED: frozenset({ProjectStatus.PROCESSING}),
    ProjectStatus.FAILED: frozenset({ProjectStatus.PROCESSING}),
}

TERMINAL = frozenset({ProjectStatus.COMPLETED, ProjectStatus.FAILED})


def can_transition(current: ProjectStatus, target: ProjectStatus) -> bool:
    return current in ALLOWED_FROM.get(target, frozenset())


class StatusController:
    """
    Owns the project lifecycle PENDING -> PROCESSING -> COMPLETED | FAILED.

    Writes are conditional on the stored status being a legal predecessor,
    so a late or duplicate writer can never move a project backwards.
    """

    def __init__(self, store) -> None:
        self.store = store

    async def read_status(self, project_id) -> Optional[ProjectStatus]:
        raw = await self.store.get_project_status(project_id)
        if raw is None:
            return None
        return ProjectStatus(raw)

    async def transition(self, project_id, target: ProjectStatus, error: Optional[str] = None) -> bool:
        allowed = ALLOWED_FROM.get(target)
        if not allowed:
            raise InvalidStatusTransition(None, target.value)

        applied = await self.store.set_project_status(
            project_id,
            target.value,
            expected=sorted(s.value for s in allowed),
            error=error,
        )
        if not applied:
            current = await self.store.get_project_status(project_id)
            logger.warning(
                "Status write skipped for project {}: {} -> {} not allowed",
                project_id, current, target.value,
            )
        return applied
