"""Cycle detection over the dependency graph."""

from .core import Diagnostic, DiagnosticKind
from .graph import TaskGraph


def find_cycle(graph: TaskGraph) -> list[str] | None:
    """Find the first cycle reachable in a depth-first traversal.

    Roots are visited in the graph's task order and successors in edge order,
    so the same input always reports the same cycle. The traversal uses an
    explicit stack rather than recursion.

    Returns:
        The cycle as ``[a, b, ..., a]``, or None if the graph is acyclic
    """
    visited: set[str] = set()

    for root in graph.order:
        if root in visited:
            continue

        path: list[str] = [root]
        on_stack: set[str] = {root}
        # Each frame holds the node and the index of its next successor to explore
        frames: list[tuple[str, int]] = [(root, 0)]
        visited.add(root)

        while frames:
            node, index = frames[-1]
            successors = graph.successors[node]
            if index >= len(successors):
                frames.pop()
                path.pop()
                on_stack.discard(node)
                continue

            frames[-1] = (node, index + 1)
            neighbor = successors[index]
            if neighbor in on_stack:
                start = path.index(neighbor)
                return [*path[start:], neighbor]
            if neighbor not in visited:
                visited.add(neighbor)
                on_stack.add(neighbor)
                path.append(neighbor)
                frames.append((neighbor, 0))

    return None


def format_cycle(cycle: list[str]) -> str:
    """Render a cycle as an arrow-joined path."""
    return " -> ".join(cycle)


def detect_cycle(graph: TaskGraph) -> Diagnostic | None:
    """Return a CircularDependency diagnostic for the first cycle, if any."""
    cycle = find_cycle(graph)
    if cycle is None:
        return None
    return Diagnostic(
        message=f"Circular dependency detected: {format_cycle(cycle)}",
        kind=DiagnosticKind.CIRCULAR_DEPENDENCY,
    )
