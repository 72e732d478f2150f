import subprocess
from dataclasses import replace
from pathlib import Path

import pytest

from bootstrapper.context import StepStatus
from bootstrapper.credentials import CredentialBundle
from bootstrapper.errors import UserAbort, ValidationError
from bootstrapper.git_repo import init_and_commit
from bootstrapper.remote import (
    SECRET_FAILED,
    SECRET_SET,
    SECRET_SKIPPED,
    check_existing_repository,
    provision_secrets,
    publish_repository,
)

from conftest import FakeRemote, requires_git

ORG = "Bionic-AI-Solutions"
CREDS = CredentialBundle("docker4zerocool", "hub-token", "argo-pass")


def test_check_without_client_is_warning(make_ctx) -> None:
    result = check_existing_repository(make_ctx(remote=None))
    assert result.status is StepStatus.WARNING
    assert "Skipping repository check" in result.reason


def test_check_absent_repo(make_ctx, tmp_path: Path) -> None:
    result = check_existing_repository(make_ctx(remote=FakeRemote(tmp_path)))
    assert result.status is StepStatus.SUCCESS
    assert result.context is None


def test_check_existing_delete(make_ctx, tmp_path: Path) -> None:
    remote = FakeRemote(tmp_path, existing={f"{ORG}/demo-api"})
    result = check_existing_repository(make_ctx(remote=remote, answers=("1",)))
    assert result.status is StepStatus.SUCCESS
    assert remote.deleted == [f"{ORG}/demo-api"]
    assert remote.get_repo(ORG, "demo-api") is None


def test_check_existing_rename(make_ctx, tmp_path: Path, template_dir: Path) -> None:
    remote = FakeRemote(tmp_path, existing={f"{ORG}/demo-api"})
    result = check_existing_repository(make_ctx(remote=remote, answers=("2", "demo-api-v2")))
    assert result.context is not None
    assert result.context.project_name == "demo-api-v2"
    assert result.context.project_dir == template_dir.parent / "demo-api-v2"


def test_check_rename_to_existing_repo_aborts(make_ctx, tmp_path: Path) -> None:
    remote = FakeRemote(tmp_path, existing={f"{ORG}/demo-api", f"{ORG}/other"})
    with pytest.raises(ValidationError, match="also exists"):
        check_existing_repository(make_ctx(remote=remote, answers=("2", "other")))


def test_check_rename_with_invalid_name_aborts(make_ctx, tmp_path: Path) -> None:
    remote = FakeRemote(tmp_path, existing={f"{ORG}/demo-api"})
    with pytest.raises(ValidationError, match="kebab-case"):
        check_existing_repository(make_ctx(remote=remote, answers=("2", "Bad Name")))


def test_check_continue_and_exit(make_ctx, tmp_path: Path) -> None:
    remote = FakeRemote(tmp_path, existing={f"{ORG}/demo-api"})
    result = check_existing_repository(make_ctx(remote=remote, answers=("3",)))
    assert result.details["resolution"] == "continue"
    assert remote.deleted == []

    with pytest.raises(UserAbort):
        check_existing_repository(make_ctx(remote=remote, answers=("4",)))
    with pytest.raises(ValidationError, match="Invalid choice"):
        check_existing_repository(make_ctx(remote=remote, answers=("5",)))


def _committed_ctx(make_ctx, **kw):
    ctx = make_ctx(**kw)
    ctx.project_dir.mkdir(parents=True)
    (ctx.project_dir / "README.md").write_text("# demo-api\n")
    init_and_commit(ctx.project_dir, ctx.params, deterministic=True)
    return ctx


def _head(repo: Path, ref: str = "HEAD") -> str:
    return subprocess.run(["git", "rev-parse", ref], cwd=repo, check=True, stdout=subprocess.PIPE, text=True).stdout.strip()


@requires_git
def test_publish_creates_public_repo_and_pushes(make_ctx, tmp_path: Path) -> None:
    remote = FakeRemote(tmp_path)
    ctx = _committed_ctx(make_ctx, remote=remote)

    result = publish_repository(ctx)

    assert result.status is StepStatus.SUCCESS
    assert result.details["created"] is True
    assert remote.created == [(ORG, "demo-api", False, "Demo service")]
    bare = Path(remote.get_repo(ORG, "demo-api").clone_url)
    assert _head(bare, "main") == _head(ctx.project_dir)


@requires_git
def test_publish_force_pushes_to_existing(make_ctx, tmp_path: Path) -> None:
    remote = FakeRemote(tmp_path, existing={f"{ORG}/demo-api"})
    bare = Path(remote.get_repo(ORG, "demo-api").clone_url)
    other = tmp_path / "other"
    other.mkdir()
    (other / "x").write_text("unrelated history")
    init_and_commit(other, replace(make_ctx().params, name="other"), deterministic=True)
    subprocess.run(["git", "push", "-q", str(bare), "main"], cwd=other, check=True)

    ctx = _committed_ctx(make_ctx, remote=remote)
    result = publish_repository(ctx)

    assert result.status is StepStatus.SUCCESS
    assert result.details["created"] is False
    assert remote.created == []
    assert _head(bare, "main") == _head(ctx.project_dir)


def test_publish_without_client_is_warning(make_ctx) -> None:
    result = publish_repository(make_ctx(remote=None))
    assert result.status is StepStatus.WARNING


@requires_git
def test_publish_push_failure_is_warning(make_ctx, tmp_path: Path) -> None:
    ctx = _committed_ctx(make_ctx, remote=FakeRemote(tmp_path))
    ctx.remote.auth_url = lambda url: str(tmp_path / "nowhere.git")
    result = publish_repository(ctx)
    assert result.status is StepStatus.WARNING
    assert "Could not publish repository" in result.reason


def test_provision_all_secrets(make_ctx, tmp_path: Path) -> None:
    remote = FakeRemote(tmp_path)
    result = provision_secrets(make_ctx(remote=remote, credentials=CREDS))
    assert result.status is StepStatus.SUCCESS
    assert remote.secrets == {
        "DOCKERHUB_USERNAME": "docker4zerocool",
        "DOCKERHUB_TOKEN": "hub-token",
        "ARGOCD_PASSWORD": "argo-pass",
    }
    assert set(result.details["secrets"].values()) == {SECRET_SET}


def test_provision_partial_failure_keeps_going(make_ctx, tmp_path: Path) -> None:
    remote = FakeRemote(tmp_path, fail_secrets={"DOCKERHUB_USERNAME"})
    result = provision_secrets(make_ctx(remote=remote, credentials=CREDS))
    assert result.status is StepStatus.WARNING
    assert "DOCKERHUB_USERNAME" in result.reason
    assert result.details["secrets"] == {
        "DOCKERHUB_USERNAME": SECRET_FAILED,
        "DOCKERHUB_TOKEN": SECRET_SET,
        "ARGOCD_PASSWORD": SECRET_SET,
    }
    assert set(remote.secrets) == {"DOCKERHUB_TOKEN", "ARGOCD_PASSWORD"}


def test_provision_without_client_is_skipped(make_ctx) -> None:
    result = provision_secrets(make_ctx(remote=None, credentials=CREDS))
    assert result.status is StepStatus.WARNING
    assert set(result.details["secrets"].values()) == {SECRET_SKIPPED}
