"""
tools.py

Responsibility: Subprocess plumbing and host prerequisite checks.

Every CLI-backed capability (git, docker, kubectl, gh) goes through `run` so
that failures surface uniformly as `CommandError`. No timeout is applied: a
hung subprocess blocks the bootstrap until the operator interrupts it.
"""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path
from typing import Iterable, Sequence

from bootstrapper.errors import CommandError, PrerequisiteError
from bootstrapper.logging_config import get_logger, log_success

logger = get_logger(__name__)

REDACTED = "***"


def run(
    cmd: list[str],
    *,
    cwd: Path | None = None,
    env: dict[str, str] | None = None,
    capture: bool = True,
    input_text: str | None = None,
    redact: Sequence[str] = (),
) -> str:
    """
    Run a subprocess command and return its stdout, raising CommandError on failure.

    With `capture=False` output streams straight to the terminal (container
    builds, test runs) and the return value is empty. Every string in `redact`
    is masked in the debug log and in the raised CommandError.
    """
    logger.debug("Running command", cmd=mask(" ".join(cmd), redact), cwd=str(cwd) if cwd else None)
    try:
        if capture:
            proc = subprocess.run(
                cmd,
                cwd=str(cwd) if cwd else None,
                env=env,
                input=input_text,
                check=True,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
            )
            return proc.stdout
        subprocess.run(cmd, cwd=str(cwd) if cwd else None, env=env, input=input_text, check=True, text=True)
        return ""
    except subprocess.CalledProcessError as e:
        err = CommandError([mask(c, redact) for c in cmd], e.returncode, mask(e.stdout or "", redact))
        raise err from (None if redact else e)
    except FileNotFoundError as e:
        raise CommandError([mask(c, redact) for c in cmd], 127, mask(str(e), redact)) from (None if redact else e)


def mask(text: str, redact: Sequence[str]) -> str:
    for secret in redact:
        if secret:
            text = text.replace(secret, REDACTED)
    return text


def run_ok(cmd: list[str], *, cwd: Path | None = None) -> bool:
    """True if the command exits 0; output is discarded."""
    try:
        run(cmd, cwd=cwd)
    except CommandError:
        return False
    return True


def has_tool(name: str) -> bool:
    return shutil.which(name) is not None


def missing_tools(names: Iterable[str]) -> list[str]:
    return [n for n in names if not has_tool(n)]


def check_prerequisites(names: Iterable[str]) -> None:
    """Report every missing executable at once; never tries to install them."""
    logger.info("Checking host dependencies...")
    missing = missing_tools(names)
    if missing:
        logger.info("Please install the missing dependencies and try again.")
        logger.info("Note: Node.js and Python run in Docker containers, not on the host.")
        raise PrerequisiteError(missing)
    log_success(logger, "All required host dependencies are installed")
