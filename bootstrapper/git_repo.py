"""
git_repo.py

Responsibility: Local git operations for the new project (init, commit, remote, push).
"""

from __future__ import annotations

import os
from pathlib import Path

from bootstrapper.errors import BootstrapError, CommandError
from bootstrapper.logging_config import get_logger, log_success
from bootstrapper.tools import run, run_ok
from bootstrapper.validation import InvocationParams

logger = get_logger(__name__)


class GitError(BootstrapError):
    pass


def git_env(*, deterministic: bool) -> dict[str, str]:
    """
    Deterministic commit metadata makes generated repos reproducible and lets
    commits succeed on hosts without a configured git identity.
    """
    env = os.environ.copy()
    if deterministic:
        env.setdefault("GIT_AUTHOR_NAME", "bootstrapper")
        env.setdefault("GIT_AUTHOR_EMAIL", "bootstrapper@example.invalid")
        env.setdefault("GIT_COMMITTER_NAME", "bootstrapper")
        env.setdefault("GIT_COMMITTER_EMAIL", "bootstrapper@example.invalid")
        env.setdefault("GIT_AUTHOR_DATE", "1970-01-01T00:00:00Z")
        env.setdefault("GIT_COMMITTER_DATE", "1970-01-01T00:00:00Z")
    return env


def _git(args: list[str], *, cwd: Path, env: dict[str, str] | None = None, redact: tuple[str, ...] = ()) -> str:
    try:
        return run(["git", *args], cwd=cwd, env=env, redact=redact)
    except CommandError as e:
        raise GitError(str(e)) from e


def commit_message(params: InvocationParams) -> str:
    return (
        f"Initial commit: Bootstrap {params.name} project\n"
        "\n"
        "- Set up project structure\n"
        "- Configure Docker and Kubernetes\n"
        "- Set up CI/CD pipeline\n"
        "- Add documentation\n"
        "- Configure code quality tools\n"
        "\n"
        f"Stack: {params.stack.value}\n"
        f"Description: {params.description}"
    )


def init_and_commit(project_dir: Path, params: InvocationParams, *, branch: str = "main", deterministic: bool = False) -> str:
    """
    Initialize the repository if needed and record one commit of everything.

    Re-running always adds a commit, even when the tree is unchanged.
    Returns the new commit hash.
    """
    logger.info("Setting up Git repository...")
    env = git_env(deterministic=deterministic)

    if not (project_dir / ".git").exists():
        _git(["init"], cwd=project_dir, env=env)
        _git(["checkout", "-B", branch], cwd=project_dir, env=env)
        log_success(logger, "Git repository initialized", branch=branch)

    _git(["add", "-A"], cwd=project_dir, env=env)
    _git(["commit", "--allow-empty", "-m", commit_message(params)], cwd=project_dir, env=env)
    sha = _git(["rev-parse", "HEAD"], cwd=project_dir, env=env).strip()
    log_success(logger, "Initial commit created", commit=sha[:12])
    return sha


def has_remote(project_dir: Path, name: str = "origin") -> bool:
    return run_ok(["git", "remote", "get-url", name], cwd=project_dir)


def set_remote(project_dir: Path, url: str, name: str = "origin") -> None:
    if has_remote(project_dir, name):
        _git(["remote", "set-url", name, url], cwd=project_dir)
    else:
        _git(["remote", "add", name, url], cwd=project_dir)


def push(project_dir: Path, *, branch: str = "main", force: bool = False, auth_url: str | None = None, name: str = "origin") -> None:
    """
    Push `branch` to the named remote and set upstream.

    `auth_url` is a token-bearing URL used only for the push; the remote is
    switched back to its plain URL afterwards so the token does not stay in
    `.git/config`. It is masked in debug logs and error text.
    """
    secrets = (auth_url,) if auth_url else ()
    plain_url = _git(["remote", "get-url", name], cwd=project_dir).strip()
    if auth_url:
        _git(["remote", "set-url", name, auth_url], cwd=project_dir, redact=secrets)
    try:
        args = ["push", "-u", name, branch]
        if force:
            args.append("--force")
        _git(args, cwd=project_dir, redact=secrets)
    finally:
        if auth_url:
            _git(["remote", "set-url", name, plain_url], cwd=project_dir)
