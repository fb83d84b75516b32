"""Named sweepers, their dependencies, and running them across regions."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional

from tfaws.utils.aws_client import ClientRegistry
from tfaws.utils.errors import DependencyError, SweepError
from tfaws.utils.logging import LogContext, get_logger

logger = get_logger(__name__)

SweepFunc = Callable[[str, ClientRegistry], None]
ClientFactory = Callable[[str], ClientRegistry]


@dataclass
class Sweeper:
    """A named cleanup function for one resource type."""

    name: str
    func: SweepFunc
    dependencies: List[str] = field(default_factory=list)


class SweepStatus(Enum):
    SUCCESS = "success"
    FAILED = "failed"


@dataclass
class SweepResult:
    """Outcome of one sweeper in one region."""

    sweeper: str
    region: str
    status: SweepStatus
    error: Optional[BaseException] = None
    duration: float = 0.0

    def is_success(self) -> bool:
        return self.status == SweepStatus.SUCCESS


class SweeperRegistry:
    """Holds the sweepers a provider instance knows about.

    Sweepers that depend on others (e.g. a parent that can't be deleted while
    children exist) run after their dependencies within each region.
    """

    def __init__(self, client_factory: ClientFactory):
        """Initialize registry.

        Args:
            client_factory: Builds the client registry for a region
        """
        self.client_factory = client_factory
        self._sweepers: Dict[str, Sweeper] = {}

    def add(self, name: str, func: SweepFunc, dependencies: Optional[Iterable[str]] = None) -> None:
        if name in self._sweepers:
            raise DependencyError(f"sweeper {name} registered twice")
        self._sweepers[name] = Sweeper(name=name, func=func, dependencies=list(dependencies or []))

    def get(self, name: str) -> Optional[Sweeper]:
        return self._sweepers.get(name)

    def names(self) -> List[str]:
        return sorted(self._sweepers)

    def list_sweepers(self) -> List[Sweeper]:
        return [self._sweepers[name] for name in self.names()]

    def execution_order(self, names: Optional[Iterable[str]] = None) -> List[str]:
        """Selected sweepers plus their transitive dependencies, dependencies first.

        Raises:
            DependencyError: Unknown sweeper name or a dependency cycle
        """
        selected = list(names) if names else self.names()
        order: List[str] = []
        visiting: List[str] = []

        def visit(name: str) -> None:
            if name in order:
                return
            if name in visiting:
                cycle = " -> ".join(visiting[visiting.index(name):] + [name])
                raise DependencyError(f"Circular sweeper dependency detected: {cycle}")
            sweeper = self._sweepers.get(name)
            if sweeper is None:
                raise DependencyError(f"sweeper {name} is not registered")
            visiting.append(name)
            for dependency in sweeper.dependencies:
                visit(dependency)
            visiting.pop()
            order.append(name)

        for name in selected:
            visit(name)
        return order

    def run(
        self,
        regions: Iterable[str],
        names: Optional[Iterable[str]] = None,
        allow_failures: bool = False
    ) -> List[SweepResult]:
        """Run sweepers in every region.

        Args:
            regions: Regions to sweep
            names: Sweepers to run (with dependencies); all when empty
            allow_failures: Keep going after a failed sweeper

        Returns:
            One result per sweeper per region

        Raises:
            SweepError: A sweeper failed and allow_failures is False
        """
        order = self.execution_order(names)
        results: List[SweepResult] = []

        for region in regions:
            clients = self.client_factory(region)
            for name in order:
                result = self._run_one(self._sweepers[name], region, clients)
                results.append(result)
                if not result.is_success() and not allow_failures:
                    raise SweepError(
                        f"sweeper ({name}) for region ({region}) failed: {result.error}",
                        errors=[result.error]
                    ) from result.error

        return results

    def _run_one(self, sweeper: Sweeper, region: str, clients: ClientRegistry) -> SweepResult:
        start = datetime.now(timezone.utc)
        with LogContext(logger, region=region):
            logger.info(f"Running sweeper {sweeper.name}")
            try:
                sweeper.func(region, clients)
            except Exception as e:
                duration = (datetime.now(timezone.utc) - start).total_seconds()
                logger.error(f"Sweeper {sweeper.name} failed: {e}")
                return SweepResult(sweeper.name, region, SweepStatus.FAILED, error=e, duration=duration)

        duration = (datetime.now(timezone.utc) - start).total_seconds()
        logger.info(f"Sweeper {sweeper.name} completed in {duration:.1f}s")
        return SweepResult(sweeper.name, region, SweepStatus.SUCCESS, duration=duration)
