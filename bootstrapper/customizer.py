"""
customizer.py

Responsibility: Rewrite the template's identifying strings in a copied project.

Substitution is literal and case-sensitive. No file is parsed, so an
identifier embedded inside an unrelated token is replaced as well.
Files are handled as bytes decoded with `surrogateescape` so line endings
and non-UTF-8 content survive untouched.
"""

from __future__ import annotations

import os
import re
import shutil
from dataclasses import dataclass, field
from pathlib import Path

from bootstrapper.logging_config import get_logger, log_success
from bootstrapper.settings import Settings
from bootstrapper.validation import database_name

logger = get_logger(__name__)

COMPOSE_FILE = "docker-compose.yml"
ENV_EXAMPLE = ".env.example"
ENV_FILE = ".env"


@dataclass
class CustomizeReport:
    updated: list[str] = field(default_factory=list)
    catch_all_updated: list[str] = field(default_factory=list)
    env_created: bool = False


def substitutions(settings: Settings, project_name: str, description: str) -> list[tuple[str, str]]:
    """(old, new) pairs applied to every file in the fixed list."""
    ids = settings.identifiers
    pairs = [(ids.project_id, project_name)]
    pairs.extend((legacy, database_name(project_name)) for legacy in ids.legacy_db_names)
    pairs.append((ids.display_name, project_name))
    pairs.append((ids.description, description))
    return pairs


def _read(path: Path) -> str:
    return path.read_bytes().decode("utf-8", "surrogateescape")


def _write(path: Path, text: str) -> None:
    path.write_bytes(text.encode("utf-8", "surrogateescape"))


def replace_all(text: str, pairs: list[tuple[str, str]]) -> str:
    """
    Replace every `old` with its `new` in a single left-to-right pass.

    Replacement text is never rescanned, so a project name that contains a
    template identifier is not rewritten again. Longer identifiers win when
    two start at the same position.
    """
    mapping: dict[str, str] = {}
    for old, new in pairs:
        if old and old not in mapping:
            mapping[old] = new
    if not mapping:
        return text
    pattern = re.compile("|".join(re.escape(old) for old in sorted(mapping, key=len, reverse=True)))
    return pattern.sub(lambda m: mapping[m.group(0)], text)


def replace_in_file(path: Path, pairs: list[tuple[str, str]]) -> bool:
    """Returns True if the file content changed."""
    original = _read(path)
    text = replace_all(original, pairs)
    if text != original:
        _write(path, text)
        return True
    return False


def _fix_compose_networks(project_dir: Path, settings: Settings, project_name: str) -> None:
    compose = project_dir / COMPOSE_FILE
    if not compose.is_file():
        return
    logger.info("Fixing network names in docker-compose.yml...")
    replace_in_file(
        compose,
        [
            (f"{settings.identifiers.project_id}-network", f"{project_name}-network"),
            (f"- {project_name}-new-network", f"- {project_name}-network"),
        ],
    )


def _create_env_file(project_dir: Path, settings: Settings, project_name: str, pairs: list[tuple[str, str]]) -> bool:
    example = project_dir / ENV_EXAMPLE
    if not example.is_file():
        return False
    env_file = project_dir / ENV_FILE
    shutil.copyfile(example, env_file)
    replace_in_file(env_file, [(settings.identifiers.env_placeholder, project_name), *pairs])
    log_success(logger, "Environment file created")
    return True


def _iter_catch_all(project_dir: Path, suffixes: tuple[str, ...]) -> list[Path]:
    out: list[Path] = []
    for root, dirs, filenames in os.walk(project_dir):
        dirs[:] = [d for d in dirs if d != ".git"]
        for name in filenames:
            path = Path(root) / name
            if path.suffix in suffixes and path.is_file() and not path.is_symlink():
                out.append(path)
    out.sort()
    return out


def customize_project(project_dir: Path, settings: Settings, project_name: str, description: str) -> CustomizeReport:
    """
    Rewrite the fixed file list, derive `.env`, then sweep remaining text files
    for the template identifier.

    Files already rewritten from the fixed list are not swept again, so a
    project name that itself contains the identifier is not replaced twice.
    """
    logger.info("Customizing project files with project name and details...")
    report = CustomizeReport()
    pairs = substitutions(settings, project_name, description)

    handled: set[Path] = set()
    for rel in settings.customize_files:
        path = project_dir / rel
        if path.is_file():
            logger.info("Updating file", file=rel)
            handled.add(path.resolve())
            if replace_in_file(path, pairs):
                report.updated.append(rel)

    _fix_compose_networks(project_dir, settings, project_name)
    report.env_created = _create_env_file(project_dir, settings, project_name, pairs)

    ids = settings.identifiers
    for path in _iter_catch_all(project_dir, settings.catch_all_suffixes):
        if path.resolve() in handled:
            continue
        if replace_in_file(path, [(ids.project_id, project_name)]):
            report.catch_all_updated.append(path.relative_to(project_dir).as_posix())

    log_success(
        logger,
        "Project files customized successfully",
        listed=len(report.updated),
        swept=len(report.catch_all_updated),
    )
    return report
