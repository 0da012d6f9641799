# model.py
from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Mapping, Optional, Tuple

from .errors import ConfigurationError


class Configuration(str, Enum):
    DEBUG = "Debug"
    RELEASE = "Release"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: str) -> "Configuration":
        for c in cls:
            if c.value.lower() == value.strip().lower():
                return c
        raise ConfigurationError(
            f"Unknown configuration {value!r}; expected one of {[c.value for c in cls]}"
        )


@dataclass(frozen=True)
class SemVer:
    major: int
    minor: int
    patch: int
    prerelease: Optional[str] = None

    def __str__(self) -> str:
        base = f"{self.major}.{self.minor}.{self.patch}"
        return f"{base}-{self.prerelease}" if self.prerelease else base


@dataclass(frozen=True)
class ReleaseNote:
    """One changelog entry: a version plus its description lines."""
    version: SemVer
    notes: Tuple[str, ...] = ()


@dataclass(frozen=True)
class CIContext:
    """
    What the invoking CI provider tells us about this run.

    Only GitHub Actions is recognised: GITHUB_ACTIONS=true marks a CI run,
    GITHUB_RUN_NUMBER is the build counter and GITHUB_TOKEN the job token.
    """
    is_ci: bool = False
    run_number: Optional[int] = None
    token: Optional[str] = None

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "CIContext":
        env = os.environ if env is None else env
        if env.get("GITHUB_ACTIONS", "").lower() != "true":
            return cls()

        raw = env.get("GITHUB_RUN_NUMBER", "").strip()
        try:
            run_number: Optional[int] = int(raw) if raw else None
        except ValueError:
            raise ConfigurationError(f"GITHUB_RUN_NUMBER is not an integer: {raw!r}")

        return cls(is_ci=True, run_number=run_number, token=env.get("GITHUB_TOKEN") or None)


@dataclass(frozen=True)
class BuildParameters:
    """Read-only inputs shared by every target action."""
    configuration: Configuration
    version: str
    target_frameworks: Tuple[str, ...] = ()
    release_notes: Optional[ReleaseNote] = None
    ci: CIContext = field(default_factory=CIContext)


Action = Callable[[Optional[BuildParameters]], None]


@dataclass
class Target:
    """
    A named build step.

    `depends_on` are hard dependencies (must run first and must succeed).
    `before` / `after` only order this target relative to others that are
    already part of the run.
    """
    name: str
    depends_on: List[str] = field(default_factory=list)
    before: List[str] = field(default_factory=list)
    after: List[str] = field(default_factory=list)
    action: Optional[Action] = None
    description: Optional[str] = None

    # lifecycle, owned by the engine
    executed: bool = False


@dataclass
class RunResult:
    succeeded: bool
    executed_targets: List[str] = field(default_factory=list)
    failed_target: Optional[str] = None
    error: Optional[BaseException] = None
    skipped_targets: List[str] = field(default_factory=list)
