"""Client → project manager assignments.

Each client has zero or one current project manager. Assigning is an
upsert keyed by client id and the latest write wins; assigning ``None``
removes the manager. A removal is kept as a dated entry without a
manager, so a write older than the removal cannot bring the old
assignment back. :class:`ProjectManagerAssignments` is immutable, every
change returns a new instance.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, Iterator, Mapping, Optional

from .exceptions import InvalidAssignmentError
from .logging import mask_email
from .models import ProjectManager
from .scope import Scope

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClientAssignment:
    """The project manager of one client as of ``assigned_at``.

    ``project_manager_id`` is None when the manager was removed.
    """

    client_id: str
    project_manager_id: Optional[str]
    assigned_at: datetime

    @property
    def is_removed(self) -> bool:
        return self.project_manager_id is None


class ProjectManagerAssignments:
    """Immutable client id → :class:`ClientAssignment` mapping.

    Example::

        board = ProjectManagerAssignments()
        board = board.assign("C1", pm_alice, at=t1)
        board = board.assign("C1", pm_bob, at=t2)   # replaces alice
        board.current("C1")                          # "pm-bob"
    """

    __slots__ = ("_by_client",)

    def __init__(self, assignments: Iterable[ClientAssignment] = ()) -> None:
        by_client: dict[str, ClientAssignment] = {}
        for assignment in assignments:
            existing = by_client.get(assignment.client_id)
            if existing is None or assignment.assigned_at >= existing.assigned_at:
                by_client[assignment.client_id] = assignment
        self._by_client: Mapping[str, ClientAssignment] = by_client

    def assign(
        self,
        client_id: str,
        manager: Optional[ProjectManager],
        *,
        at: Optional[datetime] = None,
    ) -> "ProjectManagerAssignments":
        """Upsert the project manager of ``client_id``.

        A write older than the stored one (assignment or removal) is
        ignored. ``manager=None`` removes the assignment.

        Raises:
            InvalidAssignmentError: ``manager`` is not active.
        """
        at = at or datetime.now(timezone.utc)
        existing = self._by_client.get(client_id)
        if existing is not None and at < existing.assigned_at:
            logger.info("Ignoring stale project manager write for client %s", client_id)
            return self

        if manager is None:
            entry = ClientAssignment(client_id, None, at)
            logger.info("Removed project manager from client %s", client_id)
        else:
            if not manager.is_active:
                raise InvalidAssignmentError(
                    f"Project manager {manager.id} is {manager.status}",
                    client_id=client_id,
                    project_manager_id=manager.id,
                )
            entry = ClientAssignment(client_id, manager.id, at)
            logger.info("Assigned project manager %s to client %s", mask_email(manager.email), client_id)

        updated = dict(self._by_client)
        updated[client_id] = entry
        result = ProjectManagerAssignments.__new__(ProjectManagerAssignments)
        result._by_client = updated
        return result

    def current(self, client_id: str) -> Optional[str]:
        assignment = self._by_client.get(client_id)
        return assignment.project_manager_id if assignment else None

    def clients_of(self, project_manager_id: str) -> frozenset[str]:
        return frozenset(a.client_id for a in self if a.project_manager_id == project_manager_id)

    def within(self, scope: Scope) -> "ProjectManagerAssignments":
        """Keep only the entries of clients inside ``scope``."""
        return ProjectManagerAssignments(a for a in self._by_client.values() if a.client_id in scope.client_ids)

    def __iter__(self) -> Iterator[ClientAssignment]:
        # Removals are history, not assignments
        return (a for a in self._by_client.values() if not a.is_removed)

    def __len__(self) -> int:
        return sum(1 for _ in self)

    def __contains__(self, client_id: object) -> bool:
        assignment = self._by_client.get(client_id)  # type: ignore[arg-type]
        return assignment is not None and not assignment.is_removed


__all__ = [
    "ClientAssignment",
    "ProjectManagerAssignments",
]
