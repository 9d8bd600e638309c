#!/usr/bin/env python3
"""
Command-line interface for todokeep.
"""
import asyncio
import json
import logging
import os
from typing import Any, Awaitable, Callable, Optional

import click
from pydantic import ValidationError

from todokeep.config import Settings, StorageConfig, get_settings, load_storage_config
from todokeep.exceptions import ServiceError
from todokeep.logging_setup import setup_logging
from todokeep.models import NewTask, Task, TASK_ID_MAX, TASK_ID_MIN
from todokeep.storage import Repository, SqlRepository, get_repository

logger = logging.getLogger(__name__)

TASK_ID = click.IntRange(TASK_ID_MIN, TASK_ID_MAX)


def resolve_storage_config(settings: Settings, location: Optional[str]) -> StorageConfig:
    """Storage from --location if given, otherwise from DATABASE_URL or the config file."""
    if location:
        logger.debug("Using storage URL from --location")
        return StorageConfig.new(location)
    return load_storage_config(settings)


def run_with_repository(ctx: click.Context, action: Callable[[Repository], Awaitable[Any]]) -> Any:
    """Build the configured repository, run one action against it and close it.

    Any ServiceError is printed and turned into exit status 1.
    """
    settings = ctx.obj['settings']
    location = ctx.obj['location']

    async def _main():
        config = resolve_storage_config(settings, location)
        async with get_repository(config) as repository:
            return await action(repository)

    try:
        return asyncio.run(_main())
    except ServiceError as e:
        logger.debug(f"Command failed: {e.to_dict()}")
        click.echo(f"Error: {e.message}", err=True)
        ctx.exit(1)


def format_task(task: Task) -> str:
    """Format task for display."""
    return f"{task.id}. {task}"


def format_json(data: Any) -> str:
    """Format data as JSON."""
    return json.dumps(data, indent=2, default=str)


@click.group()
@click.option('-l', '--location', default=None,
              help='The location to sync tasks with (storage URL, overrides the config file)')
@click.option('--config', 'config_path', type=click.Path(dir_okay=False), default=None,
              help='Path of the storage configuration file')
@click.option('-v', '--verbose', count=True,
              help='Prints more updates about the working of the program (repeat for more)')
@click.pass_context
def cli(ctx, location, config_path, verbose):
    """Keep track of tasks in a file or a database."""
    settings = get_settings()
    if config_path:
        settings = settings.model_copy(update={'config_path': os.path.abspath(config_path)})
    setup_logging(verbose, settings)

    ctx.ensure_object(dict)
    ctx.obj['settings'] = settings
    ctx.obj['location'] = location


@cli.command(name='list')
@click.option('--format', 'output_format', type=click.Choice(['table', 'json']),
              default='table', help='Output format')
@click.pass_context
def list_tasks(ctx, output_format):
    """Lists all the tasks."""
    logger.info("Getting tasks")
    tasks = run_with_repository(ctx, lambda repository: repository.get_all())

    logger.debug(f"Listing {len(tasks)} task(s)")
    if output_format == 'json':
        click.echo(format_json([task.model_dump() for task in tasks]))
    elif not tasks:
        click.echo("No tasks found")
    else:
        for task in tasks:
            click.echo(format_task(task))


@cli.command()
@click.argument('name')
@click.argument('description', required=False)
@click.pass_context
def add(ctx, name, description):
    """Adds a new task."""
    try:
        task = NewTask(name=name, description=description)
    except ValidationError as e:
        raise click.BadParameter(e.errors()[0]['msg'], param_hint='NAME')

    if description is None:
        logger.info("Adding new task with no description")
    else:
        logger.info("Adding new task with description")
    run_with_repository(ctx, lambda repository: repository.add(task))
    click.echo(f"Added task: {task.name}")


@cli.command()
@click.argument('number', type=TASK_ID)
@click.pass_context
def remove(ctx, number):
    """Removes a task."""
    logger.info(f"Removing task {number}")
    run_with_repository(ctx, lambda repository: repository.remove(number))
    click.echo(f"Removed task {number}")


@cli.command()
@click.argument('number', type=TASK_ID)
@click.pass_context
def complete(ctx, number):
    """Completes a task."""
    logger.info(f"Marking task {number} as complete")
    task = run_with_repository(ctx, lambda repository: repository.complete(number))
    click.echo(format_task(task))


@cli.command(name='init-db')
@click.pass_context
def init_db(ctx):
    """Creates the tasks table on database storage."""
    async def _initialize(repository: Repository) -> bool:
        if not isinstance(repository, SqlRepository):
            return False
        await repository.initialize_schema()
        return True

    if run_with_repository(ctx, _initialize):
        click.echo("Tasks table is ready")
    else:
        click.echo("File storage needs no initialization")


@cli.command(name='set-storage')
@click.argument('url')
@click.pass_context
def set_storage(ctx, url):
    """Writes URL as the storage location to the config file."""
    settings = ctx.obj['settings']
    try:
        config = StorageConfig.new(url)
        config.storage_format()
        config.write_to_file(settings.config_path)
    except ServiceError as e:
        click.echo(f"Error: {e.message}", err=True)
        ctx.exit(1)
    click.echo(f"Storage set to {config.storage} in {settings.config_path}")


if __name__ == '__main__':
    cli()
