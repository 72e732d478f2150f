"""
materializer.py

Responsibility: Copy a template directory into a fresh project directory.

Rules:
- Walk template files in sorted order so repeated runs produce the same tree.
- Skip anything whose path component matches an exclude pattern
  (VCS metadata, dependency caches, bytecode, local `.env`).
- Copy files byte-for-byte with permissions; symlinks stay symlinks.

This module intentionally does NOT rewrite any content; see `customizer.py`.
"""

from __future__ import annotations

import os
import shutil
from dataclasses import dataclass
from fnmatch import fnmatch
from pathlib import Path
from typing import Iterable

from bootstrapper.errors import BootstrapError


class MaterializeError(BootstrapError):
    pass


@dataclass(frozen=True)
class CopyResult:
    copied_files: int
    excluded: int


def _is_excluded(name: str, patterns: Iterable[str]) -> bool:
    return any(fnmatch(name, pat) for pat in patterns)


def _iter_template_files(template_dir: Path, exclude: tuple[str, ...], skip: Path | None) -> tuple[list[Path], int]:
    """
    Return (files, excluded_count) under template_dir in lexicographic order of
    their relative paths. Excluded directories are pruned, not descended into.
    """
    files: list[Path] = []
    excluded = 0
    for root, dirs, filenames in os.walk(template_dir):
        root_path = Path(root)
        kept_dirs = []
        for d in dirs:
            path = root_path / d
            if _is_excluded(d, exclude) or (skip is not None and path.resolve() == skip):
                excluded += 1
            elif path.is_symlink():
                files.append(path)
            else:
                kept_dirs.append(d)
        dirs[:] = kept_dirs
        for name in filenames:
            if _is_excluded(name, exclude):
                excluded += 1
            else:
                files.append(root_path / name)
    files.sort(key=lambda p: str(p.relative_to(template_dir)).replace(os.sep, "/"))
    return files, excluded


def copy_template(
    *,
    template_dir: str | Path,
    destination_dir: str | Path,
    exclude: tuple[str, ...] = (),
) -> CopyResult:
    """
    Copy template_dir into destination_dir (created if needed).

    Any I/O failure is raised as MaterializeError; a partially copied
    destination is left as-is.
    """
    tpl_dir = Path(template_dir).resolve()
    dst_dir = Path(destination_dir).resolve()

    if not tpl_dir.is_dir():
        raise MaterializeError(f"Template directory not found: {tpl_dir}")

    try:
        dst_dir.mkdir(parents=True, exist_ok=True)
        files, excluded = _iter_template_files(tpl_dir, exclude, dst_dir)
        for src_path in files:
            rel = src_path.relative_to(tpl_dir)
            dst_path = dst_dir / rel
            dst_path.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(src_path, dst_path, follow_symlinks=False)
    except OSError as e:
        raise MaterializeError(f"Failed copying template into {dst_dir}: {e}") from e

    return CopyResult(copied_files=len(files), excluded=excluded)
