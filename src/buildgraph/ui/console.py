"""Console output formatting utilities for buildgraph."""

from __future__ import annotations

import sys
from typing import Iterable, Optional, Sequence


class Console:
    """Centralized console output formatting."""

    def __init__(self, debug: bool = False):
        """
        Initialize console formatter.

        Args:
            debug: If True, show detailed output including stack traces
        """
        self.debug = debug

    def print_header(self, title: str) -> None:
        """Print a section header."""
        print(f"\n{title}")
        print("-" * len(title))

    def print_run_started(
        self,
        goals: Sequence[str],
        configuration: str,
        version: str,
        frameworks: Sequence[str],
    ) -> None:
        """Print run start information."""
        print("\nBUILD STARTED")
        print(f"Goal: {', '.join(goals)}")
        print(f"Configuration: {configuration}")
        print(f"Version: {version}")
        if frameworks:
            print(f"Target framework(s): {', '.join(frameworks)}")
        print()

    def print_plan(self, names: Iterable[str], skipped: Iterable[str] = ()) -> None:
        """Print the resolved execution order."""
        skipped = set(skipped)
        for i, name in enumerate(names, start=1):
            suffix = " (skipped)" if name in skipped else ""
            print(f"  {i}. {name}{suffix}")

    def print_target_start(self, name: str) -> None:
        print(f"\nTARGET: {name}")

    def print_target_skipped(self, name: str, reason: str) -> None:
        print(f"\nTARGET: {name}")
        print(f"STATUS: skipped ({reason})")

    def print_success(self, name: str) -> None:
        print("STATUS: success")

    def print_failure(self, name: str, reason: str, hint: Optional[str] = None) -> None:
        """
        Print target failure message.

        Args:
            name: Target name
            reason: Failure reason/error message
            hint: Optional hint for user
        """
        print(f"TARGET FAILED: {name}", file=sys.stderr)
        if hint:
            print(f"Hint: {hint}", file=sys.stderr)
        if self.debug:
            print(f"Error details: {reason}", file=sys.stderr)
        else:
            error_line = reason.split("\n")[0] if reason else "Unknown error"
            print(f"Error: {error_line}", file=sys.stderr)

    def print_results(
        self,
        executed: Sequence[str],
        failed: Optional[str] = None,
        skipped: Sequence[str] = (),
    ) -> None:
        """Print final results summary."""
        print("\n" + "=" * 40)
        print("RESULTS")
        print("=" * 40)
        for name in executed:
            print(f"  {name}: SUCCESS")
        for name in skipped:
            print(f"  {name}: SKIPPED")
        if failed:
            print(f"  {failed}: FAILED")

    def print_error(
        self,
        title: str,
        message: str,
        details: Optional[list[str]] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        """
        Print structured error message.

        Args:
            title: Error title
            message: Main error message
            details: Optional list of detail lines
            suggestion: Optional suggestion for user
        """
        print(f"\nERROR: {title}", file=sys.stderr)
        print(f"{message}", file=sys.stderr)
        if details:
            for detail in details:
                print(f"  {detail}", file=sys.stderr)
        if suggestion:
            print(f"\n{suggestion}", file=sys.stderr)

    def print_exception(self, exc: BaseException) -> None:
        """Print exception, with full traceback only in debug mode."""
        if self.debug:
            import traceback
            traceback.print_exception(type(exc), exc, exc.__traceback__)
        else:
            print(f"Error: {exc}", file=sys.stderr)

    def print_info(self, message: str) -> None:
        """Print informational message."""
        print(message)

    def print_debug(self, message: str) -> None:
        """Print debug message (only if debug mode enabled)."""
        if self.debug:
            print(f"[DEBUG] {message}", file=sys.stderr)


# Global console instance (will be initialized by CLI)
_console: Optional[Console] = None


def get_console() -> Console:
    """Get the global console instance."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def set_console(console: Console) -> None:
    """Set the global console instance."""
    global _console
    _console = console
