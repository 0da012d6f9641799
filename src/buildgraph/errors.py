# errors.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


class BuildError(Exception):
    """Base class for every fatal build error."""


# ----------------------------------------------------------------------
# Configuration errors (detected before any target runs)
# ----------------------------------------------------------------------

class ConfigurationError(BuildError):
    """Bad graph definition, missing project metadata, unreadable inputs."""


@dataclass
class DuplicateTargetError(ConfigurationError):
    name: str

    def __str__(self) -> str:
        return f"Duplicate target name: {self.name}"


@dataclass
class MissingTargetError(ConfigurationError):
    name: str
    referenced_by: Optional[str] = None
    known: List[str] = field(default_factory=list)

    def __str__(self) -> str:
        if self.referenced_by:
            msg = f"Target '{self.referenced_by}' references missing target '{self.name}'"
        else:
            msg = f"Unknown target '{self.name}'"
        if self.known:
            msg += f". Known targets: {self.known}"
        return msg


@dataclass
class CyclicDependencyError(ConfigurationError):
    cycle: List[str]

    def __str__(self) -> str:
        return "Cyclic dependency: " + " -> ".join(self.cycle)


# ----------------------------------------------------------------------
# Changelog errors (detected during initialization)
# ----------------------------------------------------------------------

@dataclass
class ParseError(BuildError):
    message: str
    line_no: Optional[int] = None

    def __str__(self) -> str:
        if self.line_no is not None:
            return f"line {self.line_no}: {self.message}"
        return self.message


class EmptyChangelogError(BuildError):
    def __str__(self) -> str:
        return super().__str__() or "Changelog contains no release entries"


# ----------------------------------------------------------------------
# Runtime errors (raised inside target actions)
# ----------------------------------------------------------------------

@dataclass
class MissingCredentialError(BuildError):
    credential: str
    hint: Optional[str] = None

    def __str__(self) -> str:
        msg = f"Could not resolve {self.credential}"
        if self.hint:
            msg += f" ({self.hint})"
        return msg


@dataclass
class ActionFailure(BuildError):
    """An external tool invocation failed."""
    command: str
    exit_code: int
    stdout: str = ""
    stderr: str = ""

    def __str__(self) -> str:
        lines = [f"'{self.command}' failed (exit={self.exit_code})"]
        tail = (self.stderr or self.stdout).strip()
        if tail:
            lines.append(tail.splitlines()[-1])
        return "\n".join(lines)
