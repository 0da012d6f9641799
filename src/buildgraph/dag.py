# dag.py
from __future__ import annotations

import heapq
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Set, Union

from .errors import CyclicDependencyError, DuplicateTargetError, MissingTargetError
from .model import Action, Target


class TargetGraph:
    """
    Named targets plus their dependency / ordering edges.

    Declaration order matters: it is the tie-breaker whenever the edges
    leave more than one target ready to run.
    """

    def __init__(self, targets: Iterable[Target] = ()):
        self._targets: Dict[str, Target] = {}
        for t in targets:
            self.add(t)

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def add(self, target: Target) -> Target:
        if target.name in self._targets:
            raise DuplicateTargetError(target.name)
        self._targets[target.name] = target
        return target

    def add_target(
        self,
        name: str,
        depends_on: Iterable[str] = (),
        before: Iterable[str] = (),
        after: Iterable[str] = (),
        action: Optional[Action] = None,
        description: Optional[str] = None,
    ) -> Target:
        return self.add(
            Target(
                name=name,
                depends_on=list(depends_on),
                before=list(before),
                after=list(after),
                action=action,
                description=description,
            )
        )

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get(self, name: str) -> Target:
        try:
            return self._targets[name]
        except KeyError:
            raise MissingTargetError(name, known=self.names())

    def names(self) -> List[str]:
        return list(self._targets)

    def targets(self) -> List[Target]:
        return list(self._targets.values())

    def __contains__(self, name: object) -> bool:
        return name in self._targets

    def __len__(self) -> int:
        return len(self._targets)

    def __iter__(self) -> Iterator[Target]:
        return iter(self._targets.values())

    def reset(self) -> None:
        """Forget which targets already ran."""
        for t in self._targets.values():
            t.executed = False

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def _check_references(self) -> None:
        for t in self._targets.values():
            for ref in (*t.depends_on, *t.before, *t.after):
                if ref not in self._targets:
                    raise MissingTargetError(ref, referenced_by=t.name, known=self.names())

    def _check_acyclic(self) -> None:
        """DFS over depends_on edges; raises with the first cycle found."""
        WHITE, GREY, BLACK = 0, 1, 2
        color = {name: WHITE for name in self._targets}
        stack: List[str] = []

        def visit(name: str) -> None:
            color[name] = GREY
            stack.append(name)
            for dep in self._targets[name].depends_on:
                if color[dep] == GREY:
                    start = stack.index(dep)
                    raise CyclicDependencyError(stack[start:] + [dep])
                if color[dep] == WHITE:
                    visit(dep)
            stack.pop()
            color[name] = BLACK

        for name in self._targets:
            if color[name] == WHITE:
                visit(name)

    def closure(self, goals: Sequence[str]) -> Set[str]:
        """Goals plus all of their transitive depends_on targets."""
        seen: Set[str] = set()
        pending = list(goals)
        while pending:
            name = pending.pop()
            if name in seen:
                continue
            seen.add(name)
            pending.extend(self.get(name).depends_on)
        return seen

    def resolve(self, *goals: Union[str, Sequence[str]]) -> List[Target]:
        """
        Linear execution order for the given goal(s).

        Every depends_on target precedes its dependent. before/after hints
        between targets of the closure are added one at a time in declaration
        order and dropped if they would close a cycle. Remaining ties go to
        declaration order.
        """
        names: List[str] = []
        for g in goals:
            names.extend([g] if isinstance(g, str) else g)
        if not names:
            raise MissingTargetError("<no goal>", known=self.names())

        for g in names:
            self.get(g)
        self._check_references()
        self._check_acyclic()

        included = self.closure(names)
        index = {name: i for i, name in enumerate(self._targets)}

        # adj: node -> nodes that must come after it
        adj: Dict[str, Set[str]] = {n: set() for n in included}
        for n in included:
            for dep in self._targets[n].depends_on:
                adj[dep].add(n)

        for n in sorted(included, key=index.__getitem__):
            t = self._targets[n]
            hints = [(n, other) for other in t.before] + [(other, n) for other in t.after]
            for first, then in hints:
                if first not in included or then not in included:
                    continue
                if then in adj[first]:
                    continue
                if _reaches(adj, then, first):
                    # would contradict the hard order; depends_on wins
                    continue
                adj[first].add(then)

        indeg: Dict[str, int] = {n: 0 for n in included}
        for n in included:
            for child in adj[n]:
                indeg[child] += 1

        ready = [(index[n], n) for n, d in indeg.items() if d == 0]
        heapq.heapify(ready)
        order: List[Target] = []

        while ready:
            _, node = heapq.heappop(ready)
            order.append(self._targets[node])
            for child in adj[node]:
                indeg[child] -= 1
                if indeg[child] == 0:
                    heapq.heappush(ready, (index[child], child))

        return order


def _reaches(adj: Dict[str, Set[str]], start: str, goal: str) -> bool:
    seen: Set[str] = set()
    pending = [start]
    while pending:
        node = pending.pop()
        if node == goal:
            return True
        if node in seen:
            continue
        seen.add(node)
        pending.extend(adj[node])
    return False
