"""Runs acceptance scenarios: apply, check, import-verify and destroy."""

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from tfaws.acctest.checks import CheckFunc, ScenarioError
from tfaws.acctest.config import Configuration, ResourceBlock
from tfaws.acctest.graph import DependencyGraph
from tfaws.resource.base import ChangeType, ResourceHandler, ResourceState
from tfaws.state.models import ResourceInstance, State, flatten_attributes
from tfaws.utils.errors import ErrorContext, NotFoundError, StateError
from tfaws.utils.logging import LogContext, get_logger

logger = get_logger(__name__)


@dataclass
class TestStep:
    """One step of a scenario.

    A config step applies ``config`` and runs ``check``. An import step
    (``import_state``) imports ``resource_name`` by its current identifier
    (or ``import_state_id``) and, with ``import_state_verify``, compares the
    imported attributes with the applied ones, minus
    ``import_state_verify_ignore`` keys and key prefixes.
    """

    __test__ = False

    config: Optional[Configuration] = None
    check: Optional[CheckFunc] = None
    import_state: bool = False
    import_state_verify: bool = False
    import_state_verify_ignore: List[str] = field(default_factory=list)
    import_state_id: Optional[str] = None
    resource_name: Optional[str] = None
    expect_non_empty_plan: bool = False


@dataclass
class TestCase:
    """A scenario: steps run in order, then everything is destroyed."""

    __test__ = False

    steps: List[TestStep]
    pre_check: Optional[Callable[[], None]] = None
    check_destroy: Optional[CheckFunc] = None


@dataclass
class PlannedChange:
    address: str
    change_type: ChangeType
    changed: List[str] = field(default_factory=list)


class ScenarioRunner:
    """Applies configurations through a provider's resource handlers."""

    def __init__(self, provider):
        self.provider = provider
        self.state = State()

    def _handler(self, type_name: str) -> ResourceHandler:
        return self.provider.resource(type_name)

    def _refresh(self, handler: ResourceHandler, address: str) -> Optional[ResourceState]:
        instance = self.state.get_resource(address)
        if instance is None:
            return None
        try:
            return handler.read(instance.id)
        except NotFoundError:
            logger.info(f"{address} ({instance.id}) no longer exists, will be recreated")
            return None

    def _record(self, block: ResourceBlock, remote: ResourceState, dependencies: List[str]) -> None:
        self.state.add_resource(ResourceInstance(
            type=block.type,
            name=block.name,
            id=remote.id,
            attributes=remote.model_dump(mode='json', exclude={'id'}),
            dependencies=sorted(dependencies),
        ))

    def _graph(self, config: Configuration) -> DependencyGraph:
        graph = DependencyGraph()
        for block in config:
            graph.add(block.address, block.references())
        return graph

    def _state_graph(self) -> DependencyGraph:
        graph = DependencyGraph()
        present = set(self.state.resources)
        for instance in self.state.list_resources():
            graph.add(instance.address, [d for d in instance.dependencies if d in present])
        return graph

    def apply(self, config: Configuration) -> List[PlannedChange]:
        """Bring remote objects in line with config; return what was done."""
        changes: List[PlannedChange] = []

        stale = [a for a in self._state_graph().destruction_order() if a not in config]
        for address in stale:
            self._destroy_one(address)
            changes.append(PlannedChange(address, ChangeType.DELETE))

        for address in self._graph(config).topological_sort():
            block = config.get(address)
            handler = self._handler(block.type)
            desired = handler.validate(block.resolve(self.state))
            current = self._refresh(handler, address)
            change_type, changed = handler.plan(current, desired)

            with LogContext(logger, resource_id=address, resource_type=block.type, operation=change_type.value):
                logger.info(f"{address}: {change_type.value} {', '.join(changed)}".rstrip())
                if change_type == ChangeType.CREATE:
                    remote = handler.create(desired)
                elif change_type == ChangeType.UPDATE:
                    remote = handler.update(current, desired)
                elif change_type == ChangeType.REPLACE:
                    handler.delete(current.id)
                    remote = handler.create(desired)
                else:
                    remote = current

            self._record(block, remote, list(block.references()))
            changes.append(PlannedChange(address, change_type, changed))

        return changes

    def plan(self, config: Configuration) -> List[PlannedChange]:
        """Pending changes for config against current remote state, without applying."""
        pending: List[PlannedChange] = []

        for address in self.state.resources:
            if address not in config:
                pending.append(PlannedChange(address, ChangeType.DELETE))

        for address in self._graph(config).topological_sort():
            block = config.get(address)
            handler = self._handler(block.type)
            current = self._refresh(handler, address)
            if current is None:
                pending.append(PlannedChange(address, ChangeType.CREATE))
                continue
            desired = handler.validate(block.resolve(self.state))
            change_type, changed = handler.plan(current, desired)
            if change_type != ChangeType.NO_CHANGE:
                pending.append(PlannedChange(address, change_type, changed))

        return pending

    def import_verify(self, step: TestStep) -> None:
        address = step.resource_name
        if not address:
            raise ScenarioError("import step requires resource_name")
        instance = self.state.get_resource(address)
        if instance is None:
            raise StateError(f"import step: {address} is not in state", context=ErrorContext(resource_id=address))

        identifier = step.import_state_id or instance.id
        imported = self._handler(instance.type).import_state(identifier)
        if not step.import_state_verify:
            return

        actual = flatten_attributes(imported.model_dump(mode='json', exclude={'id'}))
        actual['id'] = imported.id
        expected = instance.flat_attributes()

        diffs = _attribute_diff(expected, actual, step.import_state_verify_ignore)
        if diffs:
            lines = [f"  {key}: applied {a!r}, imported {b!r}" for key, (a, b) in sorted(diffs.items())]
            raise ScenarioError(
                f"ImportStateVerify attributes not equivalent for {address}:\n" + "\n".join(lines),
                context=ErrorContext(resource_id=identifier, resource_type=instance.type, operation='import')
            )

    def _destroy_one(self, address: str) -> None:
        instance = self.state.get_resource(address)
        if instance is None:
            return
        with LogContext(logger, resource_id=address, resource_type=instance.type, operation='delete'):
            logger.info(f"{address}: destroying {instance.id}")
            self._handler(instance.type).delete(instance.id)
        self.state.remove_resource(address)

    def destroy(self) -> State:
        """Destroy everything in reverse dependency order; return what was there."""
        destroyed = self.state.copy_state()
        for address in self._state_graph().destruction_order():
            self._destroy_one(address)
        return destroyed


def _attribute_diff(
    expected: Dict[str, str],
    actual: Dict[str, str],
    ignore: List[str]
) -> Dict[str, Tuple[Optional[str], Optional[str]]]:
    def ignored(key: str) -> bool:
        return any(key == prefix or key.startswith(f"{prefix}.") for prefix in ignore)

    diffs = {}
    for key in set(expected) | set(actual):
        if ignored(key):
            continue
        a, b = expected.get(key), actual.get(key)
        if a != b and not (_empty_count(key, a) and _empty_count(key, b)):
            diffs[key] = (a, b)
    return diffs


def _empty_count(key: str, value: Optional[str]) -> bool:
    return (key.endswith(".#") or key.endswith(".%")) and value in (None, "0")


def run_test(provider, case: TestCase) -> None:
    """Run every step of case against provider, then destroy and verify.

    Whatever was created is destroyed even when a step fails.

    Raises:
        ScenarioError: A step, a check, the post-apply plan or the
            destroy check failed
    """
    if case.pre_check:
        case.pre_check()

    runner = ScenarioRunner(provider)
    step_error: Optional[BaseException] = None
    destroyed = State()

    try:
        for i, step in enumerate(case.steps, 1):
            _run_step(runner, i, step)
    except BaseException as e:
        step_error = e
        raise
    finally:
        try:
            destroyed = runner.destroy()
        except Exception as destroy_error:
            if step_error is None:
                raise ScenarioError(f"destroy failed: {destroy_error}", cause=destroy_error) from destroy_error
            logger.error(f"Destroy after failed step also failed: {destroy_error}")

    if case.check_destroy:
        case.check_destroy(destroyed)


def _run_step(runner: ScenarioRunner, number: int, step: TestStep) -> None:
    logger.info(f"Step {number}: {'import' if step.import_state else 'apply'}")

    if step.import_state:
        runner.import_verify(step)
        return

    if step.config is None:
        raise ScenarioError(f"step {number}: config is required")

    try:
        runner.apply(step.config)
    except ScenarioError:
        raise
    except Exception as e:
        raise ScenarioError(f"step {number}: apply failed: {e}", cause=e) from e

    if step.check:
        step.check(runner.state)

    pending = runner.plan(step.config)
    if pending and not step.expect_non_empty_plan:
        summary = ", ".join(f"{c.address} ({c.change_type.value}: {', '.join(c.changed)})" for c in pending)
        raise ScenarioError(
            f"step {number}: after applying this step, the plan was not empty: {summary}\n"
            f"{step.config.describe()}"
        )
