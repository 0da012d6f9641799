from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from .model import Configuration

DEFAULT_GOAL = "RunUnitTests"
DEFAULT_CHANGELOG = "CHANGELOG.md"
DEFAULT_RELEASE_BRANCH = "main"
NUGET_SOURCE = "https://api.nuget.org/v3/index.json"
GITHUB_API_URL = "https://api.github.com"

NUGET_API_KEY_ENV = "NUGET_API_KEY"
GITHUB_TOKEN_ENV = "GITHUB_TOKEN"


@dataclass(frozen=True)
class BuildSettings:
    """
    Static knobs of a build, plus the directory layout derived from them.

    Everything here is known before the changelog is read; per-run values
    (configuration, version) come in as arguments.
    """
    root: Path
    project_name: str
    changelog: Path
    repo_owner: str
    repo_name: str
    solution: Optional[Path] = None
    configuration: Optional[Configuration] = None
    nuget_source: str = NUGET_SOURCE
    release_branch: str = DEFAULT_RELEASE_BRANCH

    @classmethod
    def from_env(
        cls,
        root: str | Path,
        env: Optional[Mapping[str, str]] = None,
        *,
        project_name: Optional[str] = None,
        changelog: Optional[str | Path] = None,
        configuration: Optional[Configuration] = None,
    ) -> "BuildSettings":
        env = os.environ if env is None else env
        root_p = Path(root).resolve()

        name = project_name or env.get("BUILDGRAPH_PROJECT_NAME") or root_p.name
        changelog_p = Path(changelog or env.get("BUILDGRAPH_CHANGELOG") or DEFAULT_CHANGELOG)
        if not changelog_p.is_absolute():
            changelog_p = root_p / changelog_p

        solution = env.get("BUILDGRAPH_SOLUTION")

        return cls(
            root=root_p,
            project_name=name,
            changelog=changelog_p,
            repo_owner=env.get("BUILDGRAPH_REPO_OWNER") or name,
            repo_name=env.get("BUILDGRAPH_REPO_NAME") or name,
            solution=(root_p / solution) if solution else None,
            configuration=configuration,
            nuget_source=env.get("BUILDGRAPH_NUGET_SOURCE") or NUGET_SOURCE,
            release_branch=env.get("BUILDGRAPH_RELEASE_BRANCH") or DEFAULT_RELEASE_BRANCH,
        )

    # ---- layout ----

    @property
    def source_dir(self) -> Path:
        return self.root / "src"

    @property
    def project_dir(self) -> Path:
        return self.source_dir / self.project_name

    @property
    def nuspec(self) -> Path:
        return self.source_dir / f"{self.project_name}.nuspec"

    @property
    def logo(self) -> Path:
        return self.root / "logo.png"

    def build_dir(self, configuration: Configuration) -> Path:
        return self.project_dir / "bin" / str(configuration)

    def result_dir(self, version: str) -> Path:
        return self.root / "bin" / version

    def nuget_dir(self, version: str) -> Path:
        return self.result_dir(version) / "nuget"
