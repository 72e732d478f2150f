"""
context.py

Responsibility: The explicit state threaded through every pipeline step.

A context is immutable; a step that changes the project name hands back a new
one via `StepResult.context`.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import TYPE_CHECKING, Any

from bootstrapper.settings import Settings
from bootstrapper.validation import InvocationParams

if TYPE_CHECKING:
    from bootstrapper.containers import ContainerBuilder
    from bootstrapper.credentials import CredentialBundle, SecretStore
    from bootstrapper.github_client import RemoteRepositoryClient
    from bootstrapper.prompts import Prompter


def target_dir_for(template_dir: Path, project_name: str) -> Path:
    """Projects are created next to the template directory."""
    return template_dir.resolve().parent / project_name


@dataclass(frozen=True)
class BootstrapContext:
    settings: Settings
    params: InvocationParams
    template_dir: Path
    project_dir: Path
    prompter: "Prompter"
    secret_store: "SecretStore"
    containers: "ContainerBuilder"
    remote: "RemoteRepositoryClient | None" = None
    credentials: "CredentialBundle | None" = None
    deterministic_git: bool = False
    skip_build: bool = False
    skip_tests: bool = False

    @property
    def project_name(self) -> str:
        return self.params.name

    @property
    def repo_slug(self) -> str:
        return f"{self.settings.github_org}/{self.project_name}"

    @property
    def repo_url(self) -> str:
        return f"https://github.com/{self.repo_slug}"

    def renamed(self, new_name: str) -> "BootstrapContext":
        return replace(
            self,
            params=replace(self.params, name=new_name),
            project_dir=target_dir_for(self.template_dir, new_name),
        )

    def with_credentials(self, credentials: "CredentialBundle") -> "BootstrapContext":
        return replace(self, credentials=credentials)


class StepStatus(enum.Enum):
    SUCCESS = "success"
    WARNING = "warning"
    FATAL = "fatal"


@dataclass(frozen=True)
class StepResult:
    step: str
    status: StepStatus
    reason: str = ""
    context: BootstrapContext | None = None
    details: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def success(cls, step: str, *, context: BootstrapContext | None = None, **details: Any) -> "StepResult":
        return cls(step, StepStatus.SUCCESS, "", context, details)

    @classmethod
    def warning(cls, step: str, reason: str, *, context: BootstrapContext | None = None, **details: Any) -> "StepResult":
        return cls(step, StepStatus.WARNING, reason, context, details)

    @classmethod
    def fatal(cls, step: str, reason: str) -> "StepResult":
        return cls(step, StepStatus.FATAL, reason)
