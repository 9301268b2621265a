"""Input data models for the scheduling engine."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Literal

UNBOUNDED = "unbounded"
DEFAULT_GROUP_NAME = "Unnamed Group"

Bandwidth = int | Literal["unbounded"]


def bandwidth_capacity(bandwidth: Bandwidth) -> float:
    """Return the number of concurrent slots a bandwidth allows (inf when unbounded)."""
    if bandwidth == UNBOUNDED:
        return math.inf
    return float(bandwidth)


def format_bandwidth(bandwidth: Bandwidth) -> str:
    """Human-readable bandwidth for logs and CLI output."""
    return UNBOUNDED if bandwidth == UNBOUNDED else str(bandwidth)


@dataclass(frozen=True)
class Task:
    """A task to be scheduled.

    ``dependencies`` lists inline predecessors: each name ``d`` adds the edge
    ``d -> name`` on top of the explicit dependency list.
    """

    name: str
    resolved_duration: float
    dependencies: tuple[str, ...] = ()
    start_date: date | None = None  # Calendar mode only


@dataclass(frozen=True)
class Dependency:
    """Finish-to-start edge: ``source`` must finish before ``target`` starts."""

    source: str
    target: str

    @classmethod
    def parse(cls, dep_str: str) -> Dependency:
        """Parse ``"A -> B"`` into a Dependency."""
        source, sep, target = dep_str.partition("->")
        if not sep or not source.strip() or not target.strip():
            raise ValueError(f"Invalid dependency '{dep_str}', expected 'source -> target'")
        return cls(source=source.strip(), target=target.strip())

    def __str__(self) -> str:
        return f"{self.source} -> {self.target}"


class GroupType(str, Enum):
    """How a task group selects its members."""

    LIST = "list"  # Exact task names
    REGEX = "regex"  # Single pattern searched in each task name


@dataclass(frozen=True, eq=False)
class TaskGroup:
    """A concurrency-limiting rule shared by every task it governs.

    Compared and hashed by identity: two groups with the same members are
    still two separate capacity pools.
    """

    type: GroupType
    identifiers: tuple[str, ...]
    bandwidth: Bandwidth
    name: str = DEFAULT_GROUP_NAME
    start_date: date | None = None  # Calendar mode only
    members: frozenset[str] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "type", GroupType(self.type))
        identifiers = self.identifiers
        if isinstance(identifiers, str):
            identifiers = (identifiers,)
        object.__setattr__(self, "identifiers", tuple(identifiers))
        object.__setattr__(self, "members", frozenset(self.identifiers))

    @property
    def pattern(self) -> str | None:
        """The regex pattern of a ``regex`` group (None if missing)."""
        return self.identifiers[0] if self.identifiers else None

    @property
    def capacity(self) -> float:
        return bandwidth_capacity(self.bandwidth)

    @property
    def label(self) -> str:
        """Display label: the group name, or its pattern/identifiers when unnamed."""
        if self.name != DEFAULT_GROUP_NAME:
            return self.name
        if self.type == GroupType.REGEX:
            return f"/{self.pattern or ''}/"
        return f"[{', '.join(self.identifiers)}]"
