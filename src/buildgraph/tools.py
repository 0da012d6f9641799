# tools.py
from __future__ import annotations

import json
import os
import shutil
import subprocess
import urllib.error
import urllib.request
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .errors import ActionFailure
from .model import Configuration
from .settings import GITHUB_API_URL
from .ui.console import get_console

# keep only the end of long tool output in error messages
_OUTPUT_TAIL = 4000

TOOL_HINTS = {
    "dotnet": "Install the .NET SDK or fix PATH.",
    "nuget": "Install the NuGet CLI or fix PATH.",
}


def _redact(args: List[str], secrets: Iterable[str]) -> str:
    hidden = {s for s in secrets if s}
    return " ".join("***" if a in hidden else a for a in args)


class ToolInvoker:
    """
    Runs the external toolchain on behalf of target actions.

    Every call is synchronous and raises ActionFailure when the tool exits
    non-zero, cannot be started, or the remote API rejects the request.
    """

    def __init__(
        self,
        cwd: str | Path = ".",
        env: Optional[Mapping[str, str]] = None,
        *,
        dotnet: str = "dotnet",
        nuget: str = "nuget",
        api_url: str = GITHUB_API_URL,
    ):
        self.cwd = Path(cwd).resolve()
        self.env = dict(os.environ if env is None else env)
        self.dotnet = dotnet
        self.nuget = nuget
        self.api_url = api_url.rstrip("/")

    # ------------------------------------------------------------------
    # Process execution
    # ------------------------------------------------------------------

    def _run(self, args: List[str], secrets: Iterable[str] = ()) -> str:
        display = _redact(args, secrets)
        get_console().print_info(f"$ {display}")

        try:
            proc = subprocess.run(
                args,
                cwd=str(self.cwd),
                env=self.env,
                text=True,
                capture_output=True,
            )
        except FileNotFoundError:
            hint = TOOL_HINTS.get(args[0], f"Install {args[0]} or fix PATH.")
            raise ActionFailure(command=display, exit_code=-1, stderr=f"{args[0]} not found. {hint}")

        if proc.returncode != 0:
            raise ActionFailure(
                command=display,
                exit_code=proc.returncode,
                stdout=(proc.stdout or "")[-_OUTPUT_TAIL:],
                stderr=(proc.stderr or "")[-_OUTPUT_TAIL:],
            )

        get_console().print_debug((proc.stdout or "")[-_OUTPUT_TAIL:])
        return proc.stdout or ""

    # ------------------------------------------------------------------
    # dotnet
    # ------------------------------------------------------------------

    def restore(self, project_file: Path) -> None:
        self._run([self.dotnet, "restore", str(project_file)])

    def build(self, project_file: Path, configuration: Configuration) -> None:
        self._run([
            self.dotnet, "build", str(project_file),
            "--configuration", str(configuration),
            "--no-restore",
        ])

    def test(self, project_file: Path, configuration: Configuration) -> None:
        self._run([
            self.dotnet, "test", str(project_file),
            "--configuration", str(configuration),
            "--no-restore",
            "--no-build",
        ])

    # ------------------------------------------------------------------
    # nuget
    # ------------------------------------------------------------------

    def pack(
        self,
        spec_file: Path,
        version: str,
        output_dir: Path,
        configuration: Optional[Configuration] = None,
    ) -> None:
        args = [
            self.nuget, "pack", str(spec_file),
            "-Version", version,
            "-OutputDirectory", str(output_dir),
            "-Symbols",
            "-SymbolPackageFormat", "snupkg",
        ]
        if configuration is not None:
            args += ["-Properties", f"Configuration={configuration}"]
        self._run(args)

    def push(self, package_file: Path, source_url: str, api_key: str) -> None:
        self._run(
            [self.nuget, "push", str(package_file), "-Source", source_url, "-ApiKey", api_key],
            secrets=[api_key],
        )

    # ------------------------------------------------------------------
    # GitHub
    # ------------------------------------------------------------------

    def create_release(
        self,
        repo_owner: str,
        repo_name: str,
        version: str,
        notes: str,
        is_prerelease: bool,
        token: str,
        target_commitish: str = "main",
    ) -> Dict[str, Any]:
        """Create a GitHub release named and tagged by `version`."""
        url = f"{self.api_url}/repos/{repo_owner}/{repo_name}/releases"
        payload = {
            "tag_name": version,
            "name": version,
            "body": notes,
            "prerelease": is_prerelease,
            "target_commitish": target_commitish,
        }
        req = urllib.request.Request(
            url,
            data=json.dumps(payload).encode("utf-8"),
            headers={
                "Accept": "application/vnd.github+json",
                "Authorization": f"Bearer {token}",
                "Content-Type": "application/json",
                "User-Agent": "buildgraph",
            },
            method="POST",
        )

        get_console().print_info(f"POST {url} ({version})")
        try:
            with urllib.request.urlopen(req) as response:
                body = response.read().decode("utf-8")
        except urllib.error.HTTPError as e:
            error_body = e.read().decode("utf-8") if e.fp else ""
            raise ActionFailure(command=f"POST {url}", exit_code=e.code, stderr=error_body or str(e.reason))
        except urllib.error.URLError as e:
            raise ActionFailure(command=f"POST {url}", exit_code=-1, stderr=str(e.reason))

        return json.loads(body) if body else {}


# ----------------------------------------------------------------------
# File system helpers
# ----------------------------------------------------------------------

def delete_directories(root: Path, patterns: Iterable[str]) -> List[Path]:
    """Delete every directory under `root` matching one of the glob patterns."""
    deleted: List[Path] = []
    for pattern in patterns:
        for d in sorted(root.glob(pattern)):
            if d.is_dir() and d.exists():
                shutil.rmtree(d)
                deleted.append(d)
    return deleted


def copy_file(src: Path, dst: Path, overwrite_if_newer: bool = True) -> bool:
    """
    Copy `src` to `dst`, creating parent directories.

    With overwrite_if_newer an existing `dst` is only replaced when `src` has
    a later modification time. Returns True if a copy happened.
    """
    if not src.is_file():
        raise FileNotFoundError(f"Source file not found: {src}")

    if dst.exists():
        if not overwrite_if_newer:
            raise FileExistsError(f"Destination already exists: {dst}")
        if src.stat().st_mtime <= dst.stat().st_mtime:
            return False

    dst.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy2(src, dst)
    return True


def glob_files(directory: Path, pattern: str) -> List[Path]:
    return sorted(p for p in directory.glob(pattern) if p.is_file())
