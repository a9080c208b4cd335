"""Main entry point for quicktask."""
import logging
from dataclasses import replace
from pathlib import Path
from typing import Optional

import click

from cli import CLI
from config import load_settings
from logging_setup import setup_logging
from models import PRIORITIES
from storage import Storage
from task_list import TaskList

logger = logging.getLogger(__name__)


@click.command()
@click.option('--data-file', type=click.Path(dir_okay=False, path_type=Path),
              help='JSON file holding the task list.')
@click.option('--default-priority', type=click.Choice(PRIORITIES, case_sensitive=False),
              help='Priority for tasks typed without a !marker.')
@click.option('--no-alt-screen', is_flag=True, help='Draw in the normal terminal buffer.')
def main(data_file: Optional[Path], default_priority: Optional[str], no_alt_screen: bool) -> None:
    settings = load_settings()
    if data_file:
        settings = replace(settings, data_file=data_file)
    if default_priority:
        settings = replace(settings, default_priority=default_priority.lower())
    if no_alt_screen:
        settings = replace(settings, alt_screen=False)

    setup_logging(log_dir=settings.log_dir, console_level=settings.log_level_value)
    storage = Storage(settings.data_file)
    task_list = TaskList(storage.load(), default_priority=settings.default_priority)
    if task_list.daily_reset():
        logger.info("daily counters reset")
    logger.info("loaded %d tasks from %s", len(task_list.tasks), settings.data_file)
    CLI(task_list, storage, settings).run()


if __name__ == "__main__":
    main()
