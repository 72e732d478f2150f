"""
paths.py

Responsibility: Decide where the new project goes and settle collisions with
an existing directory.
"""

from __future__ import annotations

import shutil

from bootstrapper.context import BootstrapContext
from bootstrapper.errors import ValidationError
from bootstrapper.logging_config import get_logger, log_success
from bootstrapper.prompts import Resolution, choose, prompt_for_new_name

logger = get_logger(__name__)

DIRECTORY_MENU = (
    ("Remove existing directory and create new project", Resolution.DELETE_AND_RECREATE),
    ("Choose a different project name", Resolution.RENAME),
    ("Exit", Resolution.ABORT),
)


def _rename_until_free(ctx: BootstrapContext) -> BootstrapContext:
    while True:
        try:
            name = prompt_for_new_name(ctx.prompter)
        except ValidationError as e:
            logger.error(str(e))
            continue
        candidate = ctx.renamed(name)
        if candidate.project_dir.exists():
            logger.warning("Project directory already exists", path=str(candidate.project_dir))
            continue
        return candidate


def resolve_target_path(ctx: BootstrapContext) -> BootstrapContext:
    """
    Return the context whose `project_dir` is free to be created.

    The only mutation is the "remove" branch, which deletes the existing
    directory outright.
    """
    logger.info("Template directory", path=str(ctx.template_dir))
    logger.info("Project directory", path=str(ctx.project_dir))

    if not ctx.project_dir.exists():
        log_success(logger, "Paths configured successfully")
        return ctx

    logger.warning("Project directory already exists", path=str(ctx.project_dir))
    resolution = choose(ctx.prompter, DIRECTORY_MENU)

    if resolution is Resolution.DELETE_AND_RECREATE:
        logger.info("Removing existing directory...")
        if ctx.project_dir.is_dir() and not ctx.project_dir.is_symlink():
            shutil.rmtree(ctx.project_dir)
        else:
            ctx.project_dir.unlink()
        log_success(logger, "Existing directory removed")
    else:
        ctx = _rename_until_free(ctx)
        logger.info("Updated project directory", path=str(ctx.project_dir))

    log_success(logger, "Paths configured successfully")
    return ctx
