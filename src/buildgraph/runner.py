# runner.py
from __future__ import annotations

from typing import Callable, Iterable, List, Optional, Sequence, Union

from .dag import TargetGraph
from .model import BuildParameters, RunResult, Target
from .ui.console import get_console

Goal = Union[str, Sequence[str]]
FailureHook = Callable[[str, BaseException], None]
InitHook = Callable[[], BuildParameters]


def _goals(goal: Goal) -> List[str]:
    return [goal] if isinstance(goal, str) else list(goal)


class ExecutionEngine:
    """
    Sequential, fail-fast target executor.

    One engine is one invocation: the init hook runs at most once and every
    target runs at most once, no matter how many times run() is called.
    A new engine starts from a clean graph.
    """

    def __init__(self, graph: TargetGraph, initialize: Optional[InitHook] = None):
        self.graph = graph
        self.graph.reset()
        self._initialize = initialize
        self._params: Optional[BuildParameters] = None
        self._initialized = False

    @property
    def params(self) -> Optional[BuildParameters]:
        return self._params

    def initialize(self) -> Optional[BuildParameters]:
        if not self._initialized:
            if self._initialize is not None:
                self._params = self._initialize()
            self._initialized = True
        return self._params

    def plan(self, goal: Goal, skip: Iterable[str] = ()) -> List[Target]:
        """Resolved order for `goal`; runs nothing."""
        skip = set(skip)
        for name in skip:
            self.graph.get(name)
        return self.graph.resolve(_goals(goal))

    def run(
        self,
        goal: Goal,
        on_failure: Optional[FailureHook] = None,
        skip: Iterable[str] = (),
    ) -> RunResult:
        console = get_console()
        skip = set(skip)

        params = self.initialize()
        order = self.plan(goal, skip)
        console.print_debug(f"Resolved order: {[t.name for t in order]}")

        result = RunResult(succeeded=True)

        for t in order:
            if t.executed:
                console.print_debug(f"{t.name} already executed, skipping")
                continue

            if t.name in skip:
                console.print_target_skipped(t.name, "--skip")
                result.skipped_targets.append(t.name)
                continue

            console.print_target_start(t.name)
            try:
                if t.action is not None:
                    t.action(params)
            except Exception as e:
                console.print_failure(t.name, str(e))
                result.succeeded = False
                result.failed_target = t.name
                result.error = e
                if on_failure is not None:
                    on_failure(t.name, e)
                return result

            t.executed = True
            result.executed_targets.append(t.name)
            console.print_success(t.name)

        return result


def run_graph(
    graph: TargetGraph,
    goal: Goal,
    *,
    initialize: Optional[InitHook] = None,
    on_failure: Optional[FailureHook] = None,
    skip: Iterable[str] = (),
) -> RunResult:
    return ExecutionEngine(graph, initialize=initialize).run(goal, on_failure=on_failure, skip=skip)
