"""task-master CLI entrypoint."""

import sys
from pathlib import Path
from typing import Optional

import click

from .config.loader import (
    DEFAULT_CONFIG_PATH,
    ConfigError,
    create_default_config,
    load_config_or_default,
)
from .config.models import TaskMasterConfig
from .dependencies.manager import DependencyError, add_dependency, remove_dependency
from .dependencies.repair import repair_dependencies
from .dependencies.validator import (
    DependencyIssue,
    IssueType,
    count_all_dependencies,
    validate_task_dependencies,
)
from .state.persistence import (
    TasksFileError,
    load_complexity_report,
    load_tasks_document,
    save_tasks_document,
)
from .tasks.finder import find_task_by_id
from .tasks.ids import MalformedIdentifier, SubtaskRef
from .tasks.models import TasksDocument
from .tasks.next_task import find_next_task
from .utils.logging import setup_logging

CONTEXT_SETTINGS = {
    "help_option_names": ["-h", "--help"],
}

_ISSUE_TEXT = {
    IssueType.MISSING: "depends on non-existent task {dep}",
    IssueType.SELF: "depends on itself",
    IssueType.CIRCULAR: "is part of a circular dependency chain (via {dep})",
    IssueType.DUPLICATE: "lists dependency {dep} more than once",
}


def describe_issue(issue: DependencyIssue) -> str:
    """Render a validation issue for display."""
    kind = "Subtask" if isinstance(issue.task_id, SubtaskRef) else "Task"
    detail = _ISSUE_TEXT[issue.type].format(dep=issue.dependency_id)
    return f"[{issue.type.value.upper()}] {kind} {issue.task_id} {detail}"


def _fail(message: str) -> None:
    click.echo(f"✗ {message}", err=True)
    sys.exit(1)


def _load(ctx: click.Context) -> tuple[TaskMasterConfig, Path, TasksDocument]:
    """Load config and the tasks document for a command."""
    try:
        config = load_config_or_default(ctx.obj["config_path"])
    except ConfigError as e:
        _fail(f"Configuration error: {e}")

    # Only initialized projects get a log file
    if ctx.obj["config_path"].exists():
        setup_logging(
            level="DEBUG" if ctx.obj["verbose"] else config.logging.level,
            log_dir=config.logging.log_dir,
            rotation_mb=config.logging.rotation_mb,
            retention_days=config.logging.retention_days,
        )

    tasks_path: Path = ctx.obj["tasks_file"] or config.paths.tasks_file
    try:
        document = load_tasks_document(tasks_path)
    except TasksFileError as e:
        _fail(str(e))

    return config, tasks_path, document


@click.group(context_settings=CONTEXT_SETTINGS)
@click.option(
    "--config",
    "-c",
    default=str(DEFAULT_CONFIG_PATH),
    help="Path to configuration file",
    type=click.Path(exists=False, path_type=Path),
)
@click.option(
    "--file",
    "-f",
    "tasks_file",
    default=None,
    help="Path to tasks.json (overrides the configured path)",
    type=click.Path(exists=False, path_type=Path),
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output",
)
@click.pass_context
def cli(ctx: click.Context, config: Path, tasks_file: Optional[Path], verbose: bool) -> None:
    """Task Master - manage task dependencies in tasks.json."""
    setup_logging(level="DEBUG" if verbose else "INFO")

    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config
    ctx.obj["tasks_file"] = tasks_file
    ctx.obj["verbose"] = verbose


@cli.command()
@click.option(
    "--force",
    is_flag=True,
    help="Overwrite existing configuration",
)
@click.pass_context
def init(ctx: click.Context, force: bool) -> None:
    """Initialize Task Master configuration."""
    config_path: Path = ctx.obj["config_path"]

    if config_path.exists() and not force:
        click.echo(f"Configuration already exists: {config_path}")
        click.echo("Use --force to overwrite")
        sys.exit(1)

    try:
        create_default_config(config_path)
    except OSError as e:
        _fail(f"Failed to create configuration: {e}")

    click.echo(f"✓ Created configuration: {config_path}")
    click.echo("\nNext steps:")
    click.echo(f"  1. Review and customize {config_path}")
    click.echo("  2. Add tasks to the configured tasks file")
    click.echo("  3. Run: task-master validate-dependencies")


@cli.command("validate-dependencies")
@click.pass_context
def validate_dependencies(ctx: click.Context) -> None:
    """Check task dependencies without changing anything."""
    _, tasks_path, document = _load(ctx)
    tasks = document.tasks
    subtask_count = sum(len(task.subtasks) for task in tasks)

    result = validate_task_dependencies(tasks)

    click.echo(f"Tasks checked: {len(tasks)}")
    click.echo(f"Subtasks checked: {subtask_count}")

    if result.valid:
        click.echo(f"Total dependencies verified: {count_all_dependencies(tasks)}")
        click.echo("✓ All dependencies are valid")
        return

    click.echo(f"Issues found: {len(result.issues)}")
    for issue in result.issues:
        click.echo(f"  {describe_issue(issue)}")
    click.echo(f"\nRun 'task-master fix-dependencies' to repair {tasks_path}")
    sys.exit(1)


@cli.command("fix-dependencies")
@click.pass_context
def fix_dependencies(ctx: click.Context) -> None:
    """Remove invalid dependencies and break cycles in place."""
    _, tasks_path, document = _load(ctx)

    report = repair_dependencies(document.tasks)
    if not report.changed:
        click.echo("✓ No dependency issues found - all dependencies are valid")
        return

    save_tasks_document(document, tasks_path)

    click.echo(f"✓ Fixed {report.total_fixes} dependency issue(s) in {tasks_path}")
    click.echo(f"  Invalid dependencies removed: {report.missing_removed}")
    click.echo(f"  Self-dependencies removed: {report.self_removed}")
    click.echo(f"  Duplicate dependencies removed: {report.duplicates_removed}")
    click.echo(f"  Circular dependencies fixed: {report.circular_removed}")
    click.echo(f"  Subtasks made independent: {report.subtasks_made_independent}")
    click.echo(f"  Tasks fixed: {report.tasks_fixed}")
    click.echo(f"  Subtasks fixed: {report.subtasks_fixed}")


@cli.command("next")
@click.pass_context
def next_task(ctx: click.Context) -> None:
    """Show the next task to work on."""
    _, _, document = _load(ctx)

    task = find_next_task(document.tasks)
    if task is None:
        click.echo("No eligible tasks: everything is done or blocked by dependencies")
        return

    click.echo(f"Next task: {task.id} - {task.title}")
    click.echo(f"Priority: {task.priority}")
    click.echo(f"Status: {task.status.value}")
    if task.dependencies:
        click.echo(f"Dependencies: {', '.join(str(dep) for dep in task.dependencies)}")


@cli.command()
@click.argument("task_id")
@click.option(
    "--status",
    "-s",
    default=None,
    help="Only show subtasks with this status",
)
@click.pass_context
def show(ctx: click.Context, task_id: str, status: Optional[str]) -> None:
    """Show a task or subtask.

    TASK_ID: Task id (e.g. 3) or subtask id (e.g. 3.1)
    """
    config, _, document = _load(ctx)
    complexity = load_complexity_report(config.paths.complexity_report)

    try:
        result = find_task_by_id(document.tasks, task_id, complexity, status_filter=status)
    except MalformedIdentifier as e:
        _fail(str(e))

    task = result.task
    if task is None:
        _fail(f"Task {task_id} not found")

    if getattr(task, "is_subtask", False):
        click.echo(f"Subtask {task.parent_task.id}.{task.id}: {task.title}")
        click.echo(f"Parent: {task.parent_task.id} - {task.parent_task.title}")
    else:
        click.echo(f"Task {task.id}: {task.title}")
        click.echo(f"Priority: {task.priority}")
    click.echo(f"Status: {task.status.value}")
    deps = ", ".join(str(dep) for dep in task.dependencies) or "none"
    click.echo(f"Dependencies: {deps}")
    if getattr(task, "complexity_score", None) is not None:
        click.echo(f"Complexity: {task.complexity_score}")
    if task.description:
        click.echo(f"\n{task.description}")

    subtasks = getattr(task, "subtasks", [])
    if subtasks or result.original_subtask_count is not None:
        header = "Subtasks"
        if result.original_subtask_count is not None:
            header += f" ({len(subtasks)} of {result.original_subtask_count} shown)"
        click.echo(f"\n{header}:")
        for subtask in subtasks:
            click.echo(f"  {task.id}.{subtask.id} [{subtask.status.value}] {subtask.title}")


def _edit_dependency(ctx: click.Context, task_id: str, depends_on: str, add: bool) -> None:
    _, tasks_path, document = _load(ctx)
    operation = add_dependency if add else remove_dependency

    try:
        changed = operation(document.tasks, task_id, depends_on)
    except (MalformedIdentifier, DependencyError) as e:
        _fail(str(e))

    if not changed:
        if add:
            click.echo(f"Task {task_id} already depends on {depends_on}")
        else:
            click.echo(f"Task {task_id} does not depend on {depends_on}, no changes made")
        return

    save_tasks_document(document, tasks_path)
    if add:
        click.echo(f"✓ Task {task_id} now depends on {depends_on}")
    else:
        click.echo(f"✓ Task {task_id} no longer depends on {depends_on}")


@cli.command("add-dependency")
@click.option("--id", "task_id", required=True, help="Task that gets the dependency")
@click.option("--depends-on", required=True, help="Task or subtask it depends on")
@click.pass_context
def add_dependency_cmd(ctx: click.Context, task_id: str, depends_on: str) -> None:
    """Add a dependency between two tasks or subtasks."""
    _edit_dependency(ctx, task_id, depends_on, add=True)


@cli.command("remove-dependency")
@click.option("--id", "task_id", required=True, help="Task to remove the dependency from")
@click.option("--depends-on", required=True, help="Dependency to remove")
@click.pass_context
def remove_dependency_cmd(ctx: click.Context, task_id: str, depends_on: str) -> None:
    """Remove a dependency from a task or subtask."""
    _edit_dependency(ctx, task_id, depends_on, add=False)


if __name__ == "__main__":
    cli()
