"""Shared-resource visibility filter for SOPs and SOP tags.

A user sees a resource when any of these holds:

1. ``access_level == "system"``;
2. ``access_level == "agency"`` and the owning agency is in scope;
3. ``access_level == "client"`` and the owning client is in scope.

The one :class:`VisibilityPredicate` is used both for filtering
materialized rows and, through :meth:`VisibilityPredicate.as_or_filter`,
for building the store's query filter, so both paths apply the same rule.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional

from .models import AccessLevel, SharedResource, User
from .scope import Scope

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Condition:
    """A scalar comparison on one resource column.

    ``op`` is ``"eq"`` (single value) or ``"in"`` (tuple of values).
    Rendered values are double-quoted, so ids holding PostgREST
    delimiters (``,`` ``.`` ``(`` ``)``) stay a single value.
    """

    field: str
    op: str
    value: Any

    def render(self) -> str:
        if self.op == "in":
            return f"{self.field}.in.({','.join(_quote(v) for v in self.value)})"
        return f"{self.field}.{self.op}.{_quote(self.value)}"


def _quote(value: Any) -> str:
    escaped = str(value).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


# Store column names, as in the sops / sop_tags tables
ACCESS_LEVEL_FIELD = "access_level"
AGENCY_FIELD = "agency_id"
CLIENT_FIELD = "client_id"


@dataclass(frozen=True)
class VisibilityPredicate:
    """Disjunction of the three visibility clauses for one user.

    Call it with a :class:`SharedResource` to test a single row.

    Attributes:
        agency_ids: Agencies whose agency-level resources are visible.
        client_ids: Clients whose client-level resources are visible.
        enabled: False for a suspended user; the predicate then matches
            nothing, system-level resources included.
    """

    agency_ids: frozenset[str] = frozenset()
    client_ids: frozenset[str] = frozenset()
    enabled: bool = True

    def __call__(self, resource: SharedResource) -> bool:
        if not self.enabled:
            return False
        level = resource.access_level
        if level == AccessLevel.SYSTEM:
            return True
        if level == AccessLevel.AGENCY:
            return resource.owner_agency_id is not None and resource.owner_agency_id in self.agency_ids
        if level == AccessLevel.CLIENT:
            return resource.owner_client_id is not None and resource.owner_client_id in self.client_ids
        # Unknown access level
        return False

    @property
    def matches_nothing(self) -> bool:
        return not self.enabled

    def conditions(self) -> tuple[tuple[Condition, ...], ...]:
        """Return the predicate as OR-ed groups of AND-ed conditions.

        Clauses whose id set is empty are dropped; they could never match.
        """
        if not self.enabled:
            return ()
        groups: list[tuple[Condition, ...]] = [(Condition(ACCESS_LEVEL_FIELD, "eq", AccessLevel.SYSTEM),)]
        if self.agency_ids:
            groups.append(
                (
                    Condition(ACCESS_LEVEL_FIELD, "eq", AccessLevel.AGENCY),
                    Condition(AGENCY_FIELD, "in", tuple(sorted(self.agency_ids))),
                )
            )
        if self.client_ids:
            groups.append(
                (
                    Condition(ACCESS_LEVEL_FIELD, "eq", AccessLevel.CLIENT),
                    Condition(CLIENT_FIELD, "in", tuple(sorted(self.client_ids))),
                )
            )
        return tuple(groups)

    def as_or_filter(self) -> Optional[str]:
        """Render the predicate as a PostgREST ``or`` filter expression.

        Returns None when the predicate matches nothing; callers must then
        skip the query instead of sending an unfiltered one.

        Example::

            VisibilityPredicate(agency_ids=frozenset({"A1"})).as_or_filter()
            # 'access_level.eq."system",and(access_level.eq."agency",agency_id.in.("A1"))'
        """
        groups = self.conditions()
        if not groups:
            return None
        rendered = []
        for group in groups:
            if len(group) == 1:
                rendered.append(group[0].render())
            else:
                rendered.append(f"and({','.join(c.render() for c in group)})")
        return ",".join(rendered)


def visible_predicate(user: User, scope: Scope) -> VisibilityPredicate:
    """Build the visibility predicate for ``user`` from its resolved scope."""
    if user.suspended:
        logger.info("User %s is suspended; no shared resources are visible", user.id)
        return VisibilityPredicate(enabled=False)
    return VisibilityPredicate(agency_ids=scope.agency_ids, client_ids=scope.client_ids)


def listing_key(
    order_key: Optional[Callable[[SharedResource], Any]] = None,
) -> Callable[[SharedResource], tuple]:
    """Sort key: access level (system, agency, client), then ``order_key``, then id.

    ``order_key`` defaults to a case-insensitive title.
    """
    secondary = order_key or (lambda r: r.title.casefold())

    def key(resource: SharedResource) -> tuple:
        return (resource.priority, secondary(resource), resource.id)

    return key


def sort_visible(
    resources: Iterable[SharedResource],
    order_key: Optional[Callable[[SharedResource], Any]] = None,
) -> list[SharedResource]:
    return sorted(resources, key=listing_key(order_key))


def filter_visible(
    resources: Iterable[SharedResource],
    predicate: VisibilityPredicate,
    order_key: Optional[Callable[[SharedResource], Any]] = None,
) -> list[SharedResource]:
    """Keep the resources ``predicate`` accepts, in listing order."""
    return sort_visible((r for r in resources if predicate(r)), order_key)


__all__ = [
    "Condition",
    "VisibilityPredicate",
    "filter_visible",
    "listing_key",
    "sort_visible",
    "visible_predicate",
]
