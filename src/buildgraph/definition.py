# definition.py
# The library's build: initialization hook + target graph.
from __future__ import annotations

import os
from typing import Mapping, Optional

from .changelog import derive_version, load_changelog, release_body
from .dag import TargetGraph
from .dsl import build, graph
from .errors import MissingCredentialError
from .model import BuildParameters, CIContext, Configuration
from .project import find_project_file, find_solution, read_target_frameworks
from .settings import GITHUB_TOKEN_ENV, NUGET_API_KEY_ENV, BuildSettings
from .tools import ToolInvoker, copy_file, delete_directories, glob_files
from .ui.console import get_console


def default_configuration(ci: CIContext) -> Configuration:
    return Configuration.RELEASE if ci.is_ci else Configuration.DEBUG


def initialize(settings: BuildSettings, ci: Optional[CIContext] = None) -> BuildParameters:
    """
    Compute the run's BuildParameters.

    Reads the changelog, picks the configuration, derives the version and
    loads the target frameworks. Any failure here aborts the build before a
    single target runs.
    """
    console = get_console()
    ci = CIContext.from_env() if ci is None else ci

    console.print_debug(f"Reading changelog {settings.changelog}...")
    _releases, current = load_changelog(settings.changelog)
    console.print_debug(f"Using latest version from changelog: {current.version}")

    configuration = settings.configuration or default_configuration(ci)
    if ci.is_ci:
        console.print_debug("Adding CI version suffix...")
    version = derive_version(current.version, configuration, ci)
    console.print_info(f"Building version: {version}")

    project_file = find_project_file(settings.project_dir, settings.project_name)
    frameworks = read_target_frameworks(project_file)
    console.print_info(f"Target framework(s): {', '.join(frameworks)}")

    return BuildParameters(
        configuration=configuration,
        version=version,
        target_frameworks=frameworks,
        release_notes=current,
        ci=ci,
    )


def define_build(
    settings: BuildSettings,
    invoker: Optional[ToolInvoker] = None,
    env: Optional[Mapping[str, str]] = None,
) -> TargetGraph:
    invoker = invoker or ToolInvoker(settings.root)
    env = os.environ if env is None else env
    name = settings.project_name

    def solution():
        return (
            settings.solution
            or find_solution(settings.root)
            or find_project_file(settings.project_dir, name)
        )

    def clean(p: BuildParameters) -> None:
        for d in delete_directories(settings.source_dir, ["**/bin", "**/obj"]):
            get_console().print_debug(f"Deleted {d}")

    def restore(p: BuildParameters) -> None:
        invoker.restore(solution())

    def compile_(p: BuildParameters) -> None:
        invoker.build(solution(), p.configuration)

    def run_unit_tests(p: BuildParameters) -> None:
        invoker.test(solution(), p.configuration)

    def copy_files(p: BuildParameters) -> None:
        nuget_dir = settings.nuget_dir(p.version)
        build_dir = settings.build_dir(p.configuration)

        for tfm in p.target_frameworks:
            target_dir = nuget_dir / "lib" / tfm
            src_dir = build_dir / tfm
            for ext in ("dll", "pdb", "xml"):
                copy_file(src_dir / f"{name}.{ext}", target_dir / f"{name}.{ext}")

        copy_file(settings.nuspec, nuget_dir / settings.nuspec.name)
        copy_file(settings.logo, nuget_dir / settings.logo.name)

    def create_package(p: BuildParameters) -> None:
        nuget_dir = settings.nuget_dir(p.version)
        invoker.pack(nuget_dir / settings.nuspec.name, p.version, nuget_dir, p.configuration)

    def publish_package(p: BuildParameters) -> None:
        api_key = env.get(NUGET_API_KEY_ENV)
        if not api_key:
            raise MissingCredentialError("the NuGet API key", hint=f"set {NUGET_API_KEY_ENV}")

        for nupkg in glob_files(settings.nuget_dir(p.version), "*.nupkg"):
            invoker.push(nupkg, settings.nuget_source, api_key)

    def publish_release(p: BuildParameters) -> None:
        token = p.ci.token if p.ci.is_ci else None
        token = token or env.get(GITHUB_TOKEN_ENV)
        if not token:
            raise MissingCredentialError("the GitHub token", hint=f"set {GITHUB_TOKEN_ENV}")

        invoker.create_release(
            settings.repo_owner,
            settings.repo_name,
            p.version,
            release_body(p.release_notes, os.linesep) if p.release_notes else "",
            is_prerelease=False,
            token=token,
            target_commitish=settings.release_branch,
        )

    return graph(
        build("Clean").before("Restore").describe("Delete bin/ and obj/ under src/").executes(clean),
        build("Restore").describe("Restore NuGet dependencies").executes(restore),
        build("Compile").depends_on("Restore").describe("Build the solution").executes(compile_),
        build("RunUnitTests").depends_on("Compile").describe("Run the test suites").executes(run_unit_tests),
        build("CopyFiles").depends_on("Compile").describe("Stage binaries for packaging").executes(copy_files),
        build("CreatePackage").depends_on("CopyFiles").describe("Create the .nupkg").executes(create_package),
        build("PublishPackage")
            .depends_on("CreatePackage", "RunUnitTests")
            .describe("Push packages to NuGet")
            .executes(publish_package),
        build("PublishRelease")
            .depends_on("PublishPackage", "RunUnitTests")
            .describe("Create the GitHub release")
            .executes(publish_release),
        build("Package").depends_on("RunUnitTests", "CreatePackage"),
        build("Default").depends_on("Package"),
        build("Publish").depends_on("PublishRelease"),
        build("PrePublish").depends_on("PublishPackage"),
    )
