from __future__ import annotations

from pathlib import Path
from typing import List

import pytest

from buildgraph.ui.console import Console, set_console

CHANGELOG = """\
# 1.2.3

Released on Sunday, January 28 2024.

- Added foo
- Fixed bar

# 1.2.2

- Older fix
"""

CSPROJ = """\
<Project Sdk="Microsoft.NET.Sdk">
  <PropertyGroup>
    <TargetFrameworks>netstandard2.0;net6.0</TargetFrameworks>
  </PropertyGroup>
</Project>
"""


@pytest.fixture(autouse=True)
def quiet_console():
    set_console(Console(debug=False))
    yield


@pytest.fixture
def calls() -> List[str]:
    return []


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """Minimal library checkout: changelog, solution, project, nuspec, logo."""
    root = tmp_path / "Demo"
    (root / "src" / "Demo").mkdir(parents=True)
    (root / "CHANGELOG.md").write_text(CHANGELOG, encoding="utf-8")
    (root / "Demo.sln").write_text("", encoding="utf-8")
    (root / "src" / "Demo" / "Demo.Core.csproj").write_text(CSPROJ, encoding="utf-8")
    (root / "src" / "Demo.nuspec").write_text("<package />", encoding="utf-8")
    (root / "logo.png").write_bytes(b"png")
    return root


class FakeInvoker:
    """Records toolchain calls instead of running them."""

    def __init__(self, fail_on: str | None = None):
        self.calls: list[tuple] = []
        self.fail_on = fail_on

    def _record(self, name: str, *args) -> None:
        from buildgraph.errors import ActionFailure

        self.calls.append((name, *args))
        if name == self.fail_on:
            raise ActionFailure(command=name, exit_code=1, stderr=f"{name} broke")

    def restore(self, project_file):
        self._record("restore", project_file)

    def build(self, project_file, configuration):
        self._record("build", project_file, configuration)

    def test(self, project_file, configuration):
        self._record("test", project_file, configuration)

    def pack(self, spec_file, version, output_dir, configuration=None):
        self._record("pack", spec_file, version, output_dir, configuration)

    def push(self, package_file, source_url, api_key):
        self._record("push", package_file, source_url, api_key)

    def create_release(self, repo_owner, repo_name, version, notes, is_prerelease, token, target_commitish="main"):
        self._record("create_release", repo_owner, repo_name, version, notes, is_prerelease, token, target_commitish)
        return {}

    def names(self) -> list[str]:
        return [c[0] for c in self.calls]


@pytest.fixture
def invoker() -> FakeInvoker:
    return FakeInvoker()


@pytest.fixture
def make_invoker():
    return FakeInvoker
