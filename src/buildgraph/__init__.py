from .dsl import target, build, graph, TargetBuilder
from .dag import TargetGraph
from .runner import ExecutionEngine, run_graph
from .model import Target, BuildParameters, Configuration, CIContext, ReleaseNote, SemVer, RunResult

__all__ = [
    "target", "build", "graph", "TargetBuilder", "TargetGraph", "ExecutionEngine", "run_graph",
    "Target", "BuildParameters", "Configuration", "CIContext", "ReleaseNote", "SemVer", "RunResult",
]
