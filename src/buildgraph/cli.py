# cli.py
from __future__ import annotations

import sys
from pathlib import Path

import click

from buildgraph.definition import default_configuration, define_build, initialize
from buildgraph.changelog import derive_version, load_changelog
from buildgraph.errors import BuildError, ConfigurationError
from buildgraph.git import default_root
from buildgraph.model import CIContext, Configuration
from buildgraph.runner import ExecutionEngine
from buildgraph.settings import DEFAULT_GOAL, BuildSettings
from buildgraph.ui.console import Console, get_console, set_console

CONFIGURATIONS = click.Choice([c.value for c in Configuration], case_sensitive=False)


def _settings(root, changelog, project_name, configuration) -> BuildSettings:
    return BuildSettings.from_env(
        root or default_root(),
        project_name=project_name,
        changelog=changelog,
        configuration=Configuration.parse(configuration) if configuration else None,
    )


def _fail(ctx: click.Context, title: str, exc: BaseException, suggestion: str | None = None) -> None:
    console = get_console()
    console.print_error(title, str(exc), suggestion=suggestion)
    if ctx.obj.get("debug", False):
        console.print_exception(exc)
    sys.exit(1)


def project_options(f):
    f = click.option("--root", type=click.Path(file_okay=False, path_type=Path), default=None,
                     help="Build root (defaults to the git repository root or cwd)")(f)
    f = click.option("--changelog", default=None,
                     help="Changelog file used to determine the version (default CHANGELOG.md)")(f)
    f = click.option("--project-name", default=None,
                     help="Name of the library project under src/ (defaults to the root directory name)")(f)
    f = click.option("--configuration", "-c", type=CONFIGURATIONS, default=None,
                     help="Configuration to build - default is 'Debug' (local) or 'Release' (CI)")(f)
    return f


@click.group()
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug mode (show stack traces and detailed output)",
)
@click.pass_context
def cli(ctx, debug):
    """buildgraph: changelog-versioned build, test, pack and publish."""
    console = Console(debug=debug)
    set_console(console)
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug


@cli.command()
@click.argument("goals", nargs=-1)
@project_options
@click.option("--skip", multiple=True, help="Target to leave out of the run (repeatable)")
@click.pass_context
def run(ctx, goals, root, changelog, project_name, configuration, skip):
    """Run GOALS (default: RunUnitTests) and everything they depend on."""
    console = get_console()
    goals = list(goals) or [DEFAULT_GOAL]

    try:
        settings = _settings(root, changelog, project_name, configuration)
        engine = ExecutionEngine(define_build(settings), initialize=lambda: initialize(settings))

        params = engine.initialize()
        console.print_run_started(
            goals=goals,
            configuration=str(params.configuration),
            version=params.version,
            frameworks=params.target_frameworks,
        )
        console.print_plan([t.name for t in engine.plan(goals, skip)], skipped=skip)

        result = engine.run(goals, skip=skip)
    except KeyboardInterrupt:
        console.print_info("\nInterrupted by user")
        sys.exit(130)
    except ConfigurationError as e:
        _fail(ctx, "Configuration error", e)
    except BuildError as e:
        _fail(ctx, "Initialization failed", e)
    except Exception as e:
        _fail(ctx, "Unexpected error", e)

    console.print_results(result.executed_targets, result.failed_target, result.skipped_targets)

    if not result.succeeded:
        console.print_error(f"Target '{result.failed_target}' failed", str(result.error))
        if ctx.obj.get("debug", False):
            console.print_exception(result.error)
        sys.exit(1)


@cli.command()
@click.argument("goals", nargs=-1)
@project_options
@click.option("--skip", multiple=True, help="Target to mark as skipped")
@click.pass_context
def plan(ctx, goals, root, changelog, project_name, configuration, skip):
    """Print the execution order for GOALS without running anything."""
    console = get_console()
    goals = list(goals) or [DEFAULT_GOAL]

    try:
        settings = _settings(root, changelog, project_name, configuration)
        order = ExecutionEngine(define_build(settings)).plan(goals, skip)
    except BuildError as e:
        _fail(ctx, "Configuration error", e)

    console.print_header(f"Plan for {', '.join(goals)}")
    console.print_plan([t.name for t in order], skipped=skip)


@cli.command()
@project_options
@click.pass_context
def targets(ctx, root, changelog, project_name, configuration):
    """List the available targets."""
    console = get_console()
    settings = _settings(root, changelog, project_name, configuration)

    for t in define_build(settings):
        line = t.name
        if t.name == DEFAULT_GOAL:
            line += " (default)"
        if t.depends_on:
            line += f" -> {', '.join(t.depends_on)}"
        console.print_info(line)
        if t.description:
            console.print_info(f"    {t.description}")


@cli.command()
@project_options
@click.pass_context
def version(ctx, root, changelog, project_name, configuration):
    """Print the version this run would build."""
    try:
        settings = _settings(root, changelog, project_name, configuration)
        ci = CIContext.from_env()
        _releases, current = load_changelog(settings.changelog)
        config = settings.configuration or default_configuration(ci)
        click.echo(derive_version(current.version, config, ci))
    except BuildError as e:
        _fail(ctx, "Could not determine version", e)
    except Exception as e:
        _fail(ctx, "Unexpected error", e)


if __name__ == "__main__":
    cli()
