# changelog.py
"""
Changelog-driven version resolution.

A changelog is plain Markdown with one heading per release, newest first:

    # 1.2.0

    Released on Sunday, January 28 2024.

    - Added foo
    - Fixed bar

    # 1.1.3
    ...

Document order is trusted as recency order; the first release is the current one.
"""
from __future__ import annotations

import re
from pathlib import Path
from typing import List, Optional, Tuple, Union

from .errors import ConfigurationError, EmptyChangelogError, ParseError
from .model import CIContext, Configuration, ReleaseNote, SemVer


_HEADING_RE = re.compile(r"^\s*#{1,6}\s+(?P<title>.*?)\s*$")

# "1.2.3", "v1.2.3", "New in 1.2.3 (Released 2024/01/01)", "[1.2.3] - 2024-01-01"
_RELEASE_TITLE_RE = re.compile(
    r"^(?:(?:new\s+in|version|release)\s+)?\[?v?(?P<token>\d\S*)",
    re.IGNORECASE,
)

# a title token only claims to be a version once it has MAJOR.MINOR
_VERSION_SHAPE_RE = re.compile(r"^\d+\.\d+")

_VERSION_RE = re.compile(
    r"^(0|[1-9]\d*)\.(0|[1-9]\d*)(?:\.(0|[1-9]\d*))?"
    r"(?:-(?P<pre>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
    r"(?:\+[0-9A-Za-z.-]+)?$"
)


def parse_version(token: str) -> Optional[SemVer]:
    """
    Parse MAJOR.MINOR[.PATCH][-PRERELEASE][+BUILD]; a missing patch counts as 0.

    Build metadata is accepted but not kept. Four-part versions are rejected.
    """
    m = _VERSION_RE.match(token.strip())
    if m is None:
        return None
    patch = int(m.group(3)) if m.group(3) is not None else 0
    return SemVer(int(m.group(1)), int(m.group(2)), patch, m.group("pre"))


def _release_header(line: str, line_no: int) -> Optional[SemVer]:
    """Return the version if `line` is a release header, None for any other line."""
    heading = _HEADING_RE.match(line)
    if heading is None:
        return None

    title = _RELEASE_TITLE_RE.match(heading.group("title"))
    if title is None:
        return None

    token = title.group("token").rstrip("]):,;")
    if not _VERSION_SHAPE_RE.match(token):
        return None

    version = parse_version(token)
    if version is None:
        raise ParseError(f"Malformed version {token!r} in release header: {line.strip()!r}", line_no)
    return version


def parse_release_notes(text: str) -> Tuple[ReleaseNote, ...]:
    releases: List[ReleaseNote] = []
    current: Optional[SemVer] = None
    notes: List[str] = []

    for line_no, line in enumerate(text.splitlines(), start=1):
        version = _release_header(line, line_no)
        if version is not None:
            if current is not None:
                releases.append(ReleaseNote(current, tuple(notes)))
            current, notes = version, []
            continue

        # anything before the first release is document preamble
        if current is None:
            continue

        stripped = line.strip()
        if stripped:
            notes.append(stripped)

    if current is not None:
        releases.append(ReleaseNote(current, tuple(notes)))

    return tuple(releases)


def resolve(text: str) -> Tuple[Tuple[ReleaseNote, ...], ReleaseNote]:
    """
    Parse a changelog and pick the current release.

    Returns (releases, current) where releases is newest-first and
    current is releases[0].
    """
    releases = parse_release_notes(text)
    if not releases:
        raise EmptyChangelogError("Changelog contains no release entries")
    return releases, releases[0]


def load_changelog(path: Union[str, Path]) -> Tuple[Tuple[ReleaseNote, ...], ReleaseNote]:
    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigurationError(f"Could not read changelog {p}: {e}")
    return resolve(text)


def derive_version(
    version: Union[str, SemVer],
    configuration: Configuration,
    ci: Optional[CIContext] = None,
) -> str:
    """
    Version string for this run.

    Local builds use the changelog version as-is. CI builds get the run number
    appended with a channel tag: `ci` for Release, `alpha` otherwise.
    """
    base = str(version)
    if ci is None or not ci.is_ci:
        return base
    if ci.run_number is None:
        raise ConfigurationError("CI run detected but no run number is available")

    channel = "ci" if configuration == Configuration.RELEASE else "alpha"
    return f"{base}-{channel}-{ci.run_number}"


def release_body(note: ReleaseNote, sep: str = "\n") -> str:
    return sep.join(note.notes)
