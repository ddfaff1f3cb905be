"""pertgraph CLI entrypoint."""

import sys
from pathlib import Path

import click

from .config.loader import ConfigError, create_default_config, load_config
from .config.models import PertConfig
from .editor.dependencies import validate_integrity
from .graph.ordering import GraphNotAcyclicError
from .scheduler.session import PlanningSession
from .tasks.models import ProjectData
from .tasks.store import ProjectFileError, load_project, save_project
from .utils.logging import configure_logging, get_logger, setup_logging

logger = get_logger(__name__)

CONTEXT_SETTINGS = {
    "help_option_names": ["-h", "--help"],
}

SCOPE_OPTION = click.option(
    "--scope",
    "-s",
    type=click.Choice(["all", "milestones"]),
    default=None,
    help="Analyze all tasks or milestones only (default from config)",
)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.option(
    "--config",
    "-c",
    default=".pertgraph/config.yml",
    help="Path to configuration file",
    type=click.Path(exists=False, path_type=Path),
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output",
)
@click.pass_context
def cli(ctx: click.Context, config: Path, verbose: bool) -> None:
    """pertgraph - critical path analysis for task dependency graphs."""
    setup_logging(level="DEBUG" if verbose else "WARNING")

    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config
    ctx.obj["verbose"] = verbose


def _load(ctx: click.Context) -> tuple[PertConfig, ProjectData]:
    """Load config and project, repairing dangling references if configured."""
    config_path: Path = ctx.obj["config_path"]
    verbose: bool = ctx.obj["verbose"]

    try:
        config = load_config(config_path)
    except ConfigError as e:
        click.echo(f"✗ Configuration error: {e}", err=True)
        sys.exit(1)

    log_file = configure_logging(config.logging, verbose=verbose)
    logger.debug(f"Loaded configuration from {config_path}, logging to {log_file}")

    try:
        project = load_project(config.project.tasks_file)
    except ProjectFileError as e:
        click.echo(f"✗ Project error: {e}", err=True)
        sys.exit(1)

    if config.analysis.validate_on_load:
        removed = validate_integrity(project.tasks)
        if removed:
            click.echo(f"Removed {removed} invalid dependencies")
            save_project(project, config.project.tasks_file)

    return config, project


def _session(ctx: click.Context, scope: str | None) -> tuple[PertConfig, PlanningSession]:
    config, project = _load(ctx)
    session = PlanningSession(project, scope=scope or config.analysis.scope)
    return config, session


@cli.command()
@click.option(
    "--force",
    "-f",
    is_flag=True,
    help="Overwrite existing configuration",
)
@click.pass_context
def init(ctx: click.Context, force: bool) -> None:
    """Create a configuration file and an empty project file."""
    config_path: Path = ctx.obj["config_path"]

    if config_path.exists() and not force:
        click.echo(f"Configuration already exists: {config_path}")
        click.echo("Use --force to overwrite")
        sys.exit(1)

    try:
        create_default_config(config_path)
        config = load_config(config_path)
        if not config.project.tasks_file.exists():
            save_project(ProjectData(), config.project.tasks_file)
        click.echo(f"✓ Created configuration: {config_path}")
        click.echo(f"✓ Project file: {config.project.tasks_file}")
    except (ConfigError, OSError) as e:
        click.echo(f"✗ Failed to create configuration: {e}", err=True)
        sys.exit(1)


@cli.command()
@SCOPE_OPTION
@click.option("--table", "-t", is_flag=True, help="Print the per-task schedule table")
@click.pass_context
def analyze(ctx: click.Context, scope: str | None, table: bool) -> None:
    """Run CPM and show project duration and critical path."""
    config, session = _session(ctx, scope)
    result = session.analyze()

    if not session.valid:
        click.echo(f"✗ Dependency graph invalid: {session.error}", err=True)
        sys.exit(1)

    if result is None:
        click.echo("No tasks to analyze")
        return

    names = {node_id: node.name for node_id, node in session.graph.nodes.items()}
    click.echo(str(session.summary()))
    click.echo("Critical path: " + " -> ".join(names[node_id] or node_id for node_id in result.critical_path))

    near = result.near_critical(config.analysis.near_critical_weeks)
    if near:
        click.echo("Near-critical: " + ", ".join(names[node_id] or node_id for node_id in near))

    if table:
        click.echo("")
        click.echo(f"{'ID':<12} {'Name':<24} {'Dur':>4} {'ES':>4} {'EF':>4} {'LS':>4} {'LF':>4} {'Slack':>5}")
        for row in result.as_rows():
            marker = " *" if row["critical"] else ""
            click.echo(
                f"{row['id']:<12} {row['name'][:24]:<24} {row['duration']:>4} {row['es']:>4} "
                f"{row['ef']:>4} {row['ls']:>4} {row['lf']:>4} {row['slack']:>5}{marker}"
            )


@cli.command()
@SCOPE_OPTION
@click.pass_context
def levels(ctx: click.Context, scope: str | None) -> None:
    """Show tasks grouped into dependency-depth columns."""
    _, session = _session(ctx, scope)
    session.analyze()

    try:
        columns = session.ordered_levels()
    except GraphNotAcyclicError as e:
        click.echo(f"✗ Dependency graph invalid: {e}", err=True)
        sys.exit(1)

    for level, node_ids in enumerate(columns):
        click.echo(f"Level {level}: " + ", ".join(node_ids))


PAST_TENSE = {"add": "Added", "remove": "Removed", "reverse": "Reversed"}


def _mutate(ctx: click.Context, action: str, first: str, second: str) -> None:
    config, session = _session(ctx, None)
    session.analyze()

    applied = getattr(session, f"{action}_dependency")(first, second)
    if not applied:
        click.echo(f"✗ Not applied: {action} {first} -> {second}", err=True)
        sys.exit(1)

    save_project(session.project, config.project.tasks_file)
    click.echo(f"✓ {PAST_TENSE[action]} dependency {first} -> {second}")
    click.echo(str(session.summary()))


@cli.command("add-dep")
@click.argument("pred_id")
@click.argument("succ_id")
@click.pass_context
def add_dep(ctx: click.Context, pred_id: str, succ_id: str) -> None:
    """Make PRED_ID a predecessor of SUCC_ID (rejected if it creates a cycle)."""
    _mutate(ctx, "add", pred_id, succ_id)


@cli.command("remove-dep")
@click.argument("pred_id")
@click.argument("succ_id")
@click.pass_context
def remove_dep(ctx: click.Context, pred_id: str, succ_id: str) -> None:
    """Remove the PRED_ID -> SUCC_ID dependency."""
    _mutate(ctx, "remove", pred_id, succ_id)


@cli.command("reverse-dep")
@click.argument("from_id")
@click.argument("to_id")
@click.pass_context
def reverse_dep(ctx: click.Context, from_id: str, to_id: str) -> None:
    """Turn FROM_ID -> TO_ID into TO_ID -> FROM_ID."""
    _mutate(ctx, "reverse", from_id, to_id)


@cli.command()
@click.pass_context
def validate(ctx: click.Context) -> None:
    """Prune dependencies on missing tasks and check the graph is acyclic."""
    config, project = _load(ctx)

    removed = validate_integrity(project.tasks)
    if removed:
        save_project(project, config.project.tasks_file)
        click.echo(f"Removed {removed} invalid dependencies")

    session = PlanningSession(project, scope="all")
    session.analyze()
    if not session.valid:
        click.echo(f"✗ Dependency graph invalid: {session.error}", err=True)
        sys.exit(1)

    click.echo("✓ Dependency graph valid")


if __name__ == "__main__":
    cli()
