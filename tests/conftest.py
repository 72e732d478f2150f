"""Shared fixtures and capability fakes for bootstrapper tests."""

from __future__ import annotations

import shutil
import subprocess
from dataclasses import replace
from pathlib import Path

import pytest
import structlog

from bootstrapper.context import BootstrapContext, target_dir_for
from bootstrapper.errors import CommandError
from bootstrapper.github_client import GitHubError, RepoInfo
from bootstrapper.prompts import ScriptedPrompter
from bootstrapper.settings import Settings
from bootstrapper.validation import InvocationParams, Stack

REPO_ROOT = Path(__file__).resolve().parent.parent
SAMPLE_TEMPLATE = REPO_ROOT / "templates" / "dev-template"

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")


class FakeSecretStore:
    def __init__(self, value: str = "argo-pass") -> None:
        self.value = value
        self.calls: list[tuple[str, str, str]] = []

    def read_secret(self, namespace: str, name: str, key: str) -> str:
        self.calls.append((namespace, name, key))
        return self.value


class FakeContainers:
    def __init__(self, fail: set[str] | None = None) -> None:
        self.fail = fail or set()
        self.calls: list[tuple] = []

    def _record(self, kind: str, *args) -> None:
        self.calls.append((kind, *args))
        if kind in self.fail:
            raise CommandError([kind], 1)

    def compose_build(self, project_dir: Path, *, no_cache: bool = True) -> None:
        self._record("compose_build", project_dir, no_cache)

    def build_image(self, context_dir: Path, tag: str) -> None:
        self._record("build_image", context_dir, tag)

    def compose_run(self, project_dir: Path, service: str, command: list[str]) -> None:
        self._record("compose_run", project_dir, service, command)

    def run_in_image(self, image: str, mount_dir: Path, command: list[str]) -> None:
        self._record("run_in_image", image, mount_dir, command)

    def kinds(self) -> list[str]:
        return [c[0] for c in self.calls]


class FakeRemote:
    """In-memory GitHub; created repos are local bare git repositories so pushes are real."""

    def __init__(self, root: Path, existing: set[str] | None = None, fail_secrets: set[str] | None = None) -> None:
        self.root = root
        self.repos: dict[tuple[str, str], RepoInfo] = {}
        self.deleted: list[str] = []
        self.created: list[tuple[str, str, bool, str]] = []
        self.secrets: dict[str, str] = {}
        self.fail_secrets = fail_secrets or set()
        for slug in existing or set():
            owner, name = slug.split("/")
            self._add(owner, name)

    def _add(self, owner: str, name: str) -> RepoInfo:
        bare = self.root / "remotes" / owner / f"{name}.git"
        bare.mkdir(parents=True, exist_ok=True)
        if shutil.which("git"):
            subprocess.run(["git", "init", "--bare", "-q", str(bare)], check=True)
        info = RepoInfo(owner, name, f"https://github.com/{owner}/{name}", str(bare), "main")
        self.repos[(owner, name)] = info
        return info

    def get_repo(self, owner: str, name: str) -> RepoInfo | None:
        return self.repos.get((owner, name))

    def create_repo(self, *, owner: str, name: str, private: bool, description: str = "") -> RepoInfo:
        self.created.append((owner, name, private, description))
        return self._add(owner, name)

    def delete_repo(self, owner: str, name: str) -> None:
        self.deleted.append(f"{owner}/{name}")
        info = self.repos.pop((owner, name))
        shutil.rmtree(info.clone_url, ignore_errors=True)

    def set_secret(self, owner: str, name: str, secret_name: str, value: str) -> None:
        if secret_name in self.fail_secrets:
            raise GitHubError(f"GitHub API error 403 PUT {secret_name}", status_code=403)
        self.secrets[secret_name] = value

    def auth_url(self, clone_url: str) -> str:
        return clone_url


@pytest.fixture(autouse=True)
def reset_structlog():
    yield
    structlog.reset_defaults()


@pytest.fixture
def template_dir(tmp_path: Path) -> Path:
    """Copy of the sample template plus files that must never be copied."""
    tpl = tmp_path / "work" / "dev-template"
    shutil.copytree(SAMPLE_TEMPLATE, tpl)
    (tpl / ".git").mkdir()
    (tpl / ".git" / "HEAD").write_text("ref: refs/heads/main\n")
    (tpl / "node_modules" / "left-pad").mkdir(parents=True)
    (tpl / "node_modules" / "left-pad" / "index.js").write_text("module.exports = 'dev-template';\n")
    (tpl / "__pycache__").mkdir()
    (tpl / "__pycache__" / "mod.cpython-311.pyc").write_bytes(b"\x00\x01")
    (tpl / "stale.pyc").write_bytes(b"\x00")
    (tpl / ".env").write_text("SECRET=local-only\n")
    return tpl


@pytest.fixture
def settings() -> Settings:
    return replace(Settings(), required_tools=())


@pytest.fixture
def make_ctx(template_dir: Path, settings: Settings, tmp_path: Path):
    def _make(
        name: str = "demo-api",
        stack: Stack = Stack.FASTAPI,
        description: str = "Demo service",
        answers: tuple[str, ...] = (),
        secrets: tuple[str, ...] = ("hub-token",),
        remote: FakeRemote | None = None,
        containers: FakeContainers | None = None,
        **kw,
    ) -> BootstrapContext:
        return BootstrapContext(
            settings=kw.pop("settings", settings),
            params=InvocationParams(name=name, stack=stack, description=description),
            template_dir=template_dir,
            project_dir=target_dir_for(template_dir, name),
            prompter=ScriptedPrompter(answers, secrets),
            secret_store=kw.pop("secret_store", FakeSecretStore()),
            containers=containers or FakeContainers(),
            remote=remote,
            deterministic_git=True,
            **kw,
        )

    return _make


def git_log(repo: Path) -> list[str]:
    out = subprocess.run(
        ["git", "log", "--format=%B%x00"], cwd=repo, check=True, stdout=subprocess.PIPE, text=True
    ).stdout
    return [m.strip() for m in out.split("\x00") if m.strip()]
