"""Dependency ordering of resource blocks by address."""

from collections import defaultdict, deque
from typing import Dict, Iterable, List, Optional, Set

from tfaws.utils.errors import DependencyError, ErrorContext


class DependencyGraph:
    """Directed acyclic graph of resource addresses.

    An edge runs from a dependency to its dependent, so a topological sort
    yields dependencies first.
    """

    def __init__(self):
        self.dependencies: Dict[str, Set[str]] = {}
        self._dependents: Dict[str, Set[str]] = defaultdict(set)

    def add(self, address: str, dependencies: Iterable[str] = ()) -> None:
        deps = set(dependencies)
        self.dependencies[address] = deps
        for dep in deps:
            self._dependents[dep].add(address)

    def detect_circular_dependencies(self) -> Optional[List[str]]:
        """Addresses forming a cycle, or None."""
        # 0 unvisited, 1 visiting, 2 done
        color = {address: 0 for address in self.dependencies}
        path: List[str] = []

        def dfs(address: str) -> Optional[List[str]]:
            color[address] = 1
            path.append(address)
            for dep in sorted(self.dependencies[address]):
                if dep not in color:
                    continue
                if color[dep] == 1:
                    return path[path.index(dep):] + [dep]
                if color[dep] == 0:
                    cycle = dfs(dep)
                    if cycle:
                        return cycle
            path.pop()
            color[address] = 2
            return None

        for address in sorted(self.dependencies):
            if color[address] == 0:
                cycle = dfs(address)
                if cycle:
                    return cycle
        return None

    def validate(self) -> None:
        """Raise DependencyError for cycles or references to unknown addresses."""
        cycle = self.detect_circular_dependencies()
        if cycle:
            raise DependencyError(
                f"Circular dependency detected: {' -> '.join(cycle)}",
                context=ErrorContext(resource_id=cycle[0])
            )

        for address, deps in self.dependencies.items():
            for dep in deps:
                if dep not in self.dependencies:
                    raise DependencyError(
                        f"Resource '{address}' depends on '{dep}' which does not exist",
                        context=ErrorContext(resource_id=address)
                    )

    def topological_sort(self) -> List[str]:
        """Addresses with dependencies before dependents; ties in address order."""
        self.validate()

        in_degree = {address: len(deps) for address, deps in self.dependencies.items()}
        queue = deque(sorted(a for a, degree in in_degree.items() if degree == 0))
        result = []

        while queue:
            address = queue.popleft()
            result.append(address)
            for dependent in sorted(self._dependents.get(address, ())):
                in_degree[dependent] -= 1
                if in_degree[dependent] == 0:
                    queue.append(dependent)

        return result

    def destruction_order(self) -> List[str]:
        return list(reversed(self.topological_sort()))
