"""
pipeline.py

Responsibility: The ordered bootstrap steps and the driver that runs them.

Each step takes a `BootstrapContext` and returns a `StepResult`. A step that
raises `BootstrapError` is recorded as fatal; `UserAbort` passes straight
through to the CLI. Warnings are collected and the run continues.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, NamedTuple

from bootstrapper.containers import build_dependencies, install_hooks, run_smoke_tests
from bootstrapper.context import BootstrapContext, StepResult, StepStatus
from bootstrapper.credentials import collect_credentials
from bootstrapper.customizer import customize_project
from bootstrapper.errors import BootstrapError, UserAbort
from bootstrapper.git_repo import init_and_commit
from bootstrapper.logging_config import get_logger, log_success
from bootstrapper.materializer import copy_template
from bootstrapper.paths import resolve_target_path
from bootstrapper.remote import check_existing_repository, provision_secrets, publish_repository
from bootstrapper.scaffold import scaffold_stack
from bootstrapper.tools import check_prerequisites

logger = get_logger(__name__)


class Step(NamedTuple):
    name: str
    func: Callable[[BootstrapContext], StepResult]


@dataclass
class PipelineReport:
    context: BootstrapContext
    results: list[StepResult] = field(default_factory=list)
    aborted: StepResult | None = None

    @property
    def warnings(self) -> list[StepResult]:
        return [r for r in self.results if r.status is StepStatus.WARNING]

    def result(self, step: str) -> StepResult | None:
        for r in self.results:
            if r.step == step:
                return r
        return None


def step_prerequisites(ctx: BootstrapContext) -> StepResult:
    check_prerequisites(ctx.settings.required_tools)
    return StepResult.success("prerequisites")


def step_credentials(ctx: BootstrapContext) -> StepResult:
    creds = collect_credentials(ctx.settings, ctx.prompter, ctx.secret_store)
    return StepResult.success("credentials", context=ctx.with_credentials(creds))


def step_resolve_path(ctx: BootstrapContext) -> StepResult:
    return StepResult.success("resolve_path", context=resolve_target_path(ctx))


def step_copy_template(ctx: BootstrapContext) -> StepResult:
    logger.info("Copying template to new project directory...")
    result = copy_template(
        template_dir=ctx.template_dir,
        destination_dir=ctx.project_dir,
        exclude=ctx.settings.exclude,
    )
    log_success(logger, "Template copied", path=str(ctx.project_dir), files=result.copied_files)
    return StepResult.success("copy_template", files=result.copied_files)


def step_customize(ctx: BootstrapContext) -> StepResult:
    report = customize_project(ctx.project_dir, ctx.settings, ctx.project_name, ctx.params.description)
    return StepResult.success("customize", updated=report.updated, swept=report.catch_all_updated)


def step_git(ctx: BootstrapContext) -> StepResult:
    sha = init_and_commit(
        ctx.project_dir,
        ctx.params,
        branch=ctx.settings.default_branch,
        deterministic=ctx.deterministic_git,
    )
    return StepResult.success("git", commit=sha)


def step_scaffold(ctx: BootstrapContext) -> StepResult:
    files = scaffold_stack(
        ctx.project_dir,
        ctx.params.stack,
        project_name=ctx.project_name,
        description=ctx.params.description,
    )
    return StepResult.success("scaffold", files=files)


DEFAULT_STEPS: tuple[Step, ...] = (
    Step("prerequisites", step_prerequisites),
    Step("credentials", step_credentials),
    Step("resolve_path", step_resolve_path),
    Step("check_remote", check_existing_repository),
    Step("copy_template", step_copy_template),
    Step("customize", step_customize),
    Step("git", step_git),
    Step("publish_remote", publish_repository),
    Step("provision_secrets", provision_secrets),
    Step("scaffold", step_scaffold),
    Step("build_dependencies", build_dependencies),
    Step("install_hooks", install_hooks),
    Step("smoke_tests", run_smoke_tests),
)


def run_pipeline(ctx: BootstrapContext, steps: tuple[Step, ...] = DEFAULT_STEPS) -> PipelineReport:
    """
    Run `steps` in order. Stops at the first fatal result and records it in
    `report.aborted`; nothing already written is cleaned up.
    """
    report = PipelineReport(context=ctx)
    for step in steps:
        try:
            result = step.func(report.context)
        except UserAbort:
            raise
        except BootstrapError as e:
            result = StepResult.fatal(step.name, str(e))

        report.results.append(result)
        if result.context is not None:
            report.context = result.context

        if result.status is StepStatus.FATAL:
            report.aborted = result
            return report
        if result.status is StepStatus.WARNING:
            logger.warning(result.reason, step=result.step)
    return report
