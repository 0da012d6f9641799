# project.py
# Reads what the build needs from MSBuild project/solution files.
from __future__ import annotations

import xml.etree.ElementTree as ET
from pathlib import Path
from typing import List, Optional, Tuple

from .errors import ConfigurationError


def find_project_file(project_dir: Path, project_name: str) -> Path:
    """
    Locate the library's project file.

    `<name>.Core.csproj` is preferred (the packaged assembly), then `<name>.csproj`.
    """
    for candidate in (f"{project_name}.Core.csproj", f"{project_name}.csproj"):
        p = project_dir / candidate
        if p.is_file():
            return p
    raise ConfigurationError(
        f"Target project could not be loaded: no {project_name}.Core.csproj or "
        f"{project_name}.csproj in {project_dir}"
    )


def find_solution(root: Path) -> Optional[Path]:
    solutions = sorted(root.glob("*.sln"))
    return solutions[0] if solutions else None


def _local(tag: str) -> str:
    # old-style csproj files carry the msbuild xml namespace
    return tag.rsplit("}", 1)[-1]


def read_target_frameworks(project_file: Path) -> Tuple[str, ...]:
    """Target frameworks declared by a project, in declaration order."""
    try:
        tree = ET.parse(project_file)
    except OSError as e:
        raise ConfigurationError(f"Could not read project file {project_file}: {e}")
    except ET.ParseError as e:
        raise ConfigurationError(f"Invalid project file {project_file}: {e}")

    plural: List[str] = []
    single: List[str] = []
    for elem in tree.iter():
        text = (elem.text or "").strip()
        if not text:
            continue
        tag = _local(elem.tag)
        if tag == "TargetFrameworks":
            plural.extend(text.split(";"))
        elif tag == "TargetFramework":
            single.append(text)

    frameworks: List[str] = []
    for tfm in plural or single:
        tfm = tfm.strip()
        if tfm and tfm not in frameworks:
            frameworks.append(tfm)

    if not frameworks:
        raise ConfigurationError(f"No TargetFramework(s) found to build for in {project_file}")
    return tuple(frameworks)
