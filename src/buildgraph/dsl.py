# dsl.py
from __future__ import annotations

from typing import List, Optional

from .dag import TargetGraph
from .model import Action, Target


# ---------------------------------------------------------------------
# Functional Target helper
# ---------------------------------------------------------------------

def target(
    name: str,
    action: Optional[Action] = None,
    *,
    depends_on: Optional[List[str]] = None,
    before: Optional[List[str]] = None,
    after: Optional[List[str]] = None,
    description: Optional[str] = None,
) -> Target:
    return Target(
        name=name,
        depends_on=list(depends_on or []),
        before=list(before or []),
        after=list(after or []),
        action=action,
        description=description,
    )


# ---------------------------------------------------------------------
# Builder API
# ---------------------------------------------------------------------

class TargetBuilder:
    """
    Fluent target declaration:

        build("Compile").depends_on("Restore").executes(compile_fn).build()
    """

    def __init__(self, name: str):
        self.name = name
        self._depends_on: list[str] = []
        self._before: list[str] = []
        self._after: list[str] = []
        self._action: Optional[Action] = None
        self._description: Optional[str] = None

    def depends_on(self, *names: str):
        self._depends_on.extend(names)
        return self

    def before(self, *names: str):
        self._before.extend(names)
        return self

    def after(self, *names: str):
        self._after.extend(names)
        return self

    def describe(self, text: str):
        self._description = text
        return self

    def executes(self, action: Action):
        if self._action is not None:
            raise ValueError(f"Target '{self.name}' already has an action")
        self._action = action
        return self

    def build(self) -> Target:
        return target(
            self.name,
            self._action,
            depends_on=self._depends_on,
            before=self._before,
            after=self._after,
            description=self._description,
        )


def build(name: str) -> TargetBuilder:
    """Convenience: build('Compile').depends_on('Restore').executes(fn).build()"""
    return TargetBuilder(name)


# ---------------------------------------------------------------------
# Graph helper
# ---------------------------------------------------------------------

def graph(*items: Target | TargetBuilder) -> TargetGraph:
    """
    Collect targets (or unfinished builders) into a TargetGraph, keeping
    declaration order.
    """
    g = TargetGraph()
    for item in items:
        g.add(item.build() if isinstance(item, TargetBuilder) else item)
    return g
