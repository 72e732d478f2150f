"""
remote.py

Responsibility: The optional GitHub steps of the pipeline (name collision
check, repository creation/update, Actions secrets).

All three degrade to a warning when no GitHub client is available, and log
what the operator has to do by hand instead.
"""

from __future__ import annotations

from bootstrapper.context import BootstrapContext, StepResult
from bootstrapper.errors import BootstrapError, ValidationError
from bootstrapper.git_repo import has_remote, push, set_remote
from bootstrapper.github_client import RemoteRepositoryClient
from bootstrapper.logging_config import get_logger, log_success
from bootstrapper.prompts import Resolution, choose, prompt_for_new_name

logger = get_logger(__name__)

REPOSITORY_MENU = (
    ("Delete existing repository and create new one", Resolution.DELETE_AND_RECREATE),
    ("Choose a different project name", Resolution.RENAME),
    ("Continue with existing repository (update it)", Resolution.CONTINUE),
    ("Exit", Resolution.ABORT),
)

SECRET_SET = "set"
SECRET_FAILED = "failed"
SECRET_SKIPPED = "skipped"


def _no_client_reason() -> str:
    return "GitHub CLI not found or not logged in (run: gh auth login, or set GITHUB_TOKEN)"


def check_existing_repository(ctx: BootstrapContext) -> StepResult:
    step = "check_remote"
    logger.info("Checking for existing GitHub repository...")
    if ctx.remote is None:
        return StepResult.warning(step, f"{_no_client_reason()}. Skipping repository check.")

    org = ctx.settings.github_org
    if ctx.remote.get_repo(org, ctx.project_name) is None:
        log_success(logger, "No existing repository found. Ready to create new one.")
        return StepResult.success(step)

    logger.warning("GitHub repository already exists", repo=ctx.repo_slug)
    resolution = choose(ctx.prompter, REPOSITORY_MENU)

    if resolution is Resolution.DELETE_AND_RECREATE:
        logger.info("Deleting existing repository...")
        ctx.remote.delete_repo(org, ctx.project_name)
        log_success(logger, "Existing repository deleted")
        return StepResult.success(step, resolution=resolution.value)

    if resolution is Resolution.RENAME:
        renamed = ctx.renamed(prompt_for_new_name(ctx.prompter))
        logger.info("Updated project directory", path=str(renamed.project_dir))
        if renamed.project_dir.exists():
            raise ValidationError(f"Project directory already exists: {renamed.project_dir}")
        if ctx.remote.get_repo(org, renamed.project_name) is not None:
            raise ValidationError("Repository with new name also exists. Please choose a different name.")
        return StepResult.success(step, context=renamed, resolution=resolution.value)

    logger.info("Continuing with existing repository...")
    logger.warning("This will update the existing repository with new content")
    return StepResult.success(step, resolution=resolution.value)


def _log_manual_repository_steps(ctx: BootstrapContext) -> None:
    logger.info("Please create the repository manually", url=ctx.repo_url)
    logger.info("Description: " + ctx.params.description)
    logger.info("Visibility: Public")
    logger.info(f"Then run: git remote add origin {ctx.repo_url}.git")
    logger.info(f"And push: git push -u origin {ctx.settings.default_branch}")


def publish_repository(ctx: BootstrapContext) -> StepResult:
    """
    Create the remote and push, or force-push to an existing one.

    Failures are warnings: the local project is complete without a remote.
    """
    step = "publish_remote"
    logger.info("Creating GitHub repository...")
    if ctx.remote is None:
        _log_manual_repository_steps(ctx)
        return StepResult.warning(step, _no_client_reason())

    org = ctx.settings.github_org
    branch = ctx.settings.default_branch
    try:
        repo = ctx.remote.get_repo(org, ctx.project_name)
        if repo is not None:
            logger.info("Repository exists, updating it...")
            if not has_remote(ctx.project_dir):
                set_remote(ctx.project_dir, repo.clone_url)
            push(ctx.project_dir, branch=branch, force=True, auth_url=ctx.remote.auth_url(repo.clone_url))
            log_success(logger, "Repository updated with new content", url=repo.html_url)
            return StepResult.success(step, url=repo.html_url, created=False)

        repo = ctx.remote.create_repo(owner=org, name=ctx.project_name, private=False, description=ctx.params.description)
        set_remote(ctx.project_dir, repo.clone_url)
        push(ctx.project_dir, branch=branch, auth_url=ctx.remote.auth_url(repo.clone_url))
        log_success(logger, "GitHub repository created and code pushed", url=repo.html_url)
        return StepResult.success(step, url=repo.html_url, created=True)
    except BootstrapError as e:
        _log_manual_repository_steps(ctx)
        return StepResult.warning(step, f"Could not publish repository: {e}")


def set_repository_secrets(
    remote: RemoteRepositoryClient,
    owner: str,
    repo: str,
    secrets: dict[str, str],
) -> dict[str, str]:
    """Returns secret name -> SECRET_SET / SECRET_FAILED."""
    outcome: dict[str, str] = {}
    for name, value in secrets.items():
        logger.info(f"Setting {name} secret...")
        try:
            remote.set_secret(owner, repo, name, value)
        except BootstrapError as e:
            logger.error(f"Failed to set {name} secret", error=str(e))
            outcome[name] = SECRET_FAILED
        else:
            log_success(logger, f"{name} secret set")
            outcome[name] = SECRET_SET
    return outcome


def provision_secrets(ctx: BootstrapContext) -> StepResult:
    """
    Set each CI secret with its own call. One failure never stops the others;
    the per-secret outcome is returned in `details["secrets"]`.
    """
    step = "provision_secrets"
    logger.info("Setting up GitHub secrets...")
    secrets = ctx.credentials.as_secrets() if ctx.credentials else {}
    names = list(secrets) or ["DOCKERHUB_USERNAME", "DOCKERHUB_TOKEN", "ARGOCD_PASSWORD"]

    if ctx.remote is None or not secrets:
        logger.info(f"Set secrets manually at: {ctx.repo_url}/settings/secrets/actions")
        for name in names:
            logger.info(f"- {name}")
        reason = _no_client_reason() if ctx.remote is None else "No credentials collected"
        return StepResult.warning(step, reason, secrets={n: SECRET_SKIPPED for n in names})

    outcome = set_repository_secrets(ctx.remote, ctx.settings.github_org, ctx.project_name, secrets)
    failed = [n for n, s in outcome.items() if s == SECRET_FAILED]
    if failed:
        return StepResult.warning(step, f"Failed to set secrets: {', '.join(failed)}", secrets=outcome)
    log_success(logger, "GitHub secrets setup completed!")
    return StepResult.success(step, secrets=outcome)
