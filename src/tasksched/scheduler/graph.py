"""Dependency graph construction."""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from tasksched.logger import get_logger
from tasksched.models import Dependency, Task

from .core import Diagnostic, DiagnosticKind

logger = get_logger()


def _default_str_list() -> list[str]:
    return []


def _default_adjacency() -> dict[str, list[str]]:
    return {}


def _default_counts() -> dict[str, int]:
    return {}


@dataclass
class TaskGraph:
    """Adjacency representation of the task dependency graph.

    ``order`` keeps the caller's task order; successor lists keep edge
    insertion order. Both make traversals reproducible.
    """

    order: list[str] = field(default_factory=_default_str_list)
    successors: dict[str, list[str]] = field(default_factory=_default_adjacency)
    predecessors: dict[str, list[str]] = field(default_factory=_default_adjacency)
    in_degree: dict[str, int] = field(default_factory=_default_counts)

    def add_node(self, name: str) -> None:
        self.order.append(name)
        self.successors[name] = []
        self.predecessors[name] = []
        self.in_degree[name] = 0

    def has_edge(self, source: str, target: str) -> bool:
        return target in self.successors.get(source, ())

    def add_edge(self, source: str, target: str) -> None:
        self.successors[source].append(target)
        self.predecessors[target].append(source)
        self.in_degree[target] += 1

    @property
    def edge_count(self) -> int:
        return sum(self.in_degree.values())


def collect_edges(tasks: Iterable[Task], dependencies: Iterable[Dependency]) -> list[Dependency]:
    """Merge explicit dependencies with inline task dependencies, explicit first."""
    edges = list(dependencies)
    for task in tasks:
        edges.extend(Dependency(source=dep, target=task.name) for dep in task.dependencies)
    return edges


def build_graph(
    tasks: Sequence[Task], dependencies: Iterable[Dependency]
) -> tuple[TaskGraph, list[Diagnostic]]:
    """Build the dependency graph, reporting edges that cannot be added.

    Edges referring to an unknown task, and self-referential edges, are
    reported as UnknownTaskReference and left out of the graph. A repeated
    edge is added once.

    Args:
        tasks: Tasks in input order (not mutated)
        dependencies: Explicit finish-to-start edges

    Returns:
        Tuple of (graph, diagnostics)
    """
    graph = TaskGraph()
    for task in tasks:
        graph.add_node(task.name)

    diagnostics: list[Diagnostic] = []
    for dep in collect_edges(tasks, dependencies):
        source_known = dep.source in graph.successors
        target_known = dep.target in graph.successors

        if not source_known:
            diagnostics.append(
                Diagnostic(
                    message=f'Scheduling error: Dependency source task "{dep.source}" not found.',
                    kind=DiagnosticKind.UNKNOWN_TASK_REFERENCE,
                )
            )
        if not target_known:
            diagnostics.append(
                Diagnostic(
                    message=f'Scheduling error: Dependency target task "{dep.target}" not found.',
                    kind=DiagnosticKind.UNKNOWN_TASK_REFERENCE,
                )
            )
        if not (source_known and target_known):
            continue

        if dep.source == dep.target:
            diagnostics.append(
                Diagnostic(
                    message=f'Scheduling error: Task "{dep.source}" depends on itself.',
                    kind=DiagnosticKind.UNKNOWN_TASK_REFERENCE,
                )
            )
            continue

        if graph.has_edge(dep.source, dep.target):
            logger.debug(f"  Ignoring duplicate dependency {dep}")
            continue

        graph.add_edge(dep.source, dep.target)

    logger.debug(f"  Built graph: {len(graph.order)} tasks, {graph.edge_count} edges")
    return graph, diagnostics
