"""
Stage abstraction for pipeline processing.

Each stage has:
- A unique name for identification
- Dependencies on other stages (defined in depends_on)
- An execute method returning a StageOutcome (value + report)

Example:
    class LyricsStage(BaseStage):
        name = "lyrics"
        depends_on = ["content"]

        async def execute(self, context: StageContext) -> StageOutcome:
            content = context.get_result("content")
            ...

    registry = StageRegistry()
    registry.register(ContentStage(...))
    registry.register(LyricsStage(...))
    stages = registry.get_all()
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from stitchup.models.schemas import StageOutcome


class StageError(Exception):
    """Error during stage execution.

    Attributes:
        stage_name: Name of the stage that failed
        message: Error description
        cause: Original exception (if any)
    """

    def __init__(
        self,
        stage_name: str,
        message: str,
        cause: Exception | None = None,
    ):
        self.stage_name = stage_name
        self.message = message
        self.cause = cause
        super().__init__(f"[{stage_name}] {message}")


class NoArtifactsProducedError(StageError):
    """Every item in the stage's batch failed (or the batch was empty).

    Attributes:
        attempted: Number of items tried
        failures: One "item: error" line per failed item
    """

    def __init__(
        self,
        stage_name: str,
        attempted: int,
        failures: list[str] | None = None,
    ):
        self.attempted = attempted
        self.failures = failures or []
        super().__init__(stage_name, f"No artifacts produced ({attempted} attempted)")


class StageDeadlineError(StageError):
    """The stage deadline fired before any item completed."""


@dataclass
class StageContext:
    """Context passed between pipeline stages.

    Immutable once created - stages add results by returning new context.

    Attributes:
        results: Dictionary of stage_name -> result value
        metadata: Shared metadata (stage reports are kept under "reports")

    Example:
        context = StageContext().with_result("content", content)
        content = context.get_result("content")
    """

    results: dict[str, Any] = field(default_factory=dict)
    metadata: dict[str, Any] = field(default_factory=dict)

    def get_result(self, stage_name: str) -> Any:
        """Get result from a completed stage.

        Raises:
            KeyError: If stage result not found
        """
        if stage_name not in self.results:
            raise KeyError(
                f"Stage '{stage_name}' result not found. "
                f"Available: {list(self.results.keys())}"
            )
        return self.results[stage_name]

    def has_result(self, stage_name: str) -> bool:
        return stage_name in self.results

    def with_result(self, stage_name: str, result: Any) -> "StageContext":
        """Create new context with added result."""
        return StageContext(results={**self.results, stage_name: result}, metadata=self.metadata)

    def with_metadata(self, key: str, value: Any) -> "StageContext":
        """Create new context with added metadata."""
        return StageContext(results=self.results, metadata={**self.metadata, key: value})

    def get_metadata(self, key: str, default: Any = None) -> Any:
        return self.metadata.get(key, default)


class BaseStage(ABC):
    """Abstract base class for pipeline stages.

    Subclasses must implement:
    - name: Unique stage identifier
    - execute(): Async method that performs the work

    Optional overrides:
    - depends_on: List of stage names this stage depends on
    """

    name: str
    depends_on: list[str] = []

    @abstractmethod
    async def execute(self, context: StageContext) -> StageOutcome:
        """Execute the stage.

        Args:
            context: Context with results from previous stages

        Returns:
            StageOutcome with the stage's artifact(s) and report

        Raises:
            StageError: If execution fails
        """
        pass

    def validate_context(self, context: StageContext) -> None:
        """Validate that all dependencies are satisfied.

        Raises:
            StageError: If dependencies are missing
        """
        missing = [dep for dep in self.depends_on if not context.has_result(dep)]
        if missing:
            raise StageError(
                self.name,
                f"Missing dependencies: {missing}",
            )


class StageRegistry:
    """Central registry for pipeline stages.

    Builds execution order from the dependency graph; among stages that are
    ready at the same time, the one registered first runs first.

    Example:
        registry = StageRegistry()
        registry.register(ContentStage(...))
        registry.register(SceneStage(...))
        stages = registry.build_pipeline(["scenes"])
    """

    def __init__(self) -> None:
        self._stages: dict[str, BaseStage] = {}

    def register(self, stage: BaseStage) -> None:
        """Register a stage.

        Raises:
            ValueError: If stage with same name already registered
        """
        if stage.name in self._stages:
            raise ValueError(f"Stage '{stage.name}' already registered")
        self._stages[stage.name] = stage

    def get(self, name: str) -> BaseStage:
        """Get stage by name.

        Raises:
            KeyError: If stage not found
        """
        if name not in self._stages:
            raise KeyError(
                f"Stage '{name}' not found. "
                f"Available: {list(self._stages.keys())}"
            )
        return self._stages[name]

    def get_all(self) -> list[BaseStage]:
        """Get all registered stages in dependency order."""
        return self._topological_sort(list(self._stages.keys()))

    def build_pipeline(self, stage_names: list[str], satisfied: Iterable[str] = ()) -> list[BaseStage]:
        """Build ordered pipeline from stage names, pulling in dependencies.

        Args:
            stage_names: Stages to run
            satisfied: Stages whose results are already available; they are
                neither run nor expanded

        Raises:
            KeyError: If any stage not found
            ValueError: If circular dependency detected
        """
        for name in stage_names:
            if name not in self._stages:
                raise KeyError(f"Stage '{name}' not found")

        needed = self._expand_dependencies(stage_names, set(satisfied) - set(stage_names))
        return self._topological_sort([name for name in self._stages if name in needed])

    def _expand_dependencies(self, stage_names: list[str], satisfied: set[str]) -> set[str]:
        needed: set[str] = set()
        stack = list(stage_names)

        while stack:
            name = stack.pop()
            if name in needed or name in satisfied:
                continue
            if name not in self._stages:
                raise KeyError(f"Stage '{name}' not found (required dependency)")
            needed.add(name)
            stack.extend(self._stages[name].depends_on)

        return needed

    def _topological_sort(self, stage_names: list[str]) -> list[BaseStage]:
        """Sort stages by dependencies using Kahn's algorithm.

        Raises:
            ValueError: If circular dependency detected
        """
        registration_order = {name: index for index, name in enumerate(self._stages)}
        in_degree: dict[str, int] = {name: 0 for name in stage_names}
        graph: dict[str, list[str]] = {name: [] for name in stage_names}

        for name in stage_names:
            for dep in self._stages[name].depends_on:
                if dep in in_degree:
                    graph[dep].append(name)
                    in_degree[name] += 1

        queue = [name for name in stage_names if in_degree[name] == 0]
        result: list[BaseStage] = []

        while queue:
            queue.sort(key=registration_order.__getitem__)
            name = queue.pop(0)
            result.append(self._stages[name])

            for neighbor in graph[name]:
                in_degree[neighbor] -= 1
                if in_degree[neighbor] == 0:
                    queue.append(neighbor)

        if len(result) != len(stage_names):
            remaining = set(stage_names) - {s.name for s in result}
            raise ValueError(
                f"Circular dependency detected among stages: {remaining}"
            )

        return result
