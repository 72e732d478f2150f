"""
cli.py

Responsibility: CLI entrypoint for the project bootstrapper.

Sub-commands:
- `create`: validate -> prerequisites -> credentials -> paths -> remote check
  -> copy -> customize -> git -> publish -> secrets -> scaffold -> build
  -> hooks -> tests -> summary
- `secrets`: (re)provision the CI secrets of an existing GitHub repository
- `registry-secret`: write the image-pull Secret manifest into a project

This module wires capabilities together and maps errors to exit codes; the
steps themselves live in their own modules (see `pipeline.py`).
Secrets are never accepted as flags so they stay out of shell history.
"""

from __future__ import annotations

import argparse
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Callable

from bootstrapper import __version__
from bootstrapper.containers import ContainerBuilder, DockerContainerBuilder
from bootstrapper.context import BootstrapContext, target_dir_for
from bootstrapper.credentials import CredentialBundle, KubectlSecretStore, SecretStore, manual_secret_command
from bootstrapper.errors import BootstrapError, CredentialError, UserAbort
from bootstrapper.github_client import RemoteRepositoryClient, make_client
from bootstrapper.logging_config import get_logger, log_success, setup_logging
from bootstrapper.pipeline import run_pipeline
from bootstrapper.prompts import Prompter, TerminalPrompter
from bootstrapper.registry_secret import write_registry_secret
from bootstrapper.remote import SECRET_FAILED, set_repository_secrets
from bootstrapper.settings import Settings, load_settings
from bootstrapper.summary import render_summary
from bootstrapper.validation import Stack, validate_params, validate_project_name

logger = get_logger(__name__)


@dataclass
class Dependencies:
    """Capabilities used by the commands; tests swap in fakes."""

    prompter: Prompter = field(default_factory=TerminalPrompter)
    secret_store: SecretStore = field(default_factory=KubectlSecretStore)
    containers: Callable[[Settings], ContainerBuilder] = lambda s: DockerContainerBuilder(s.compose_command)
    remote: Callable[[], RemoteRepositoryClient | None] = make_client
    echo: Callable[[str], None] = lambda text: print(text, end="")


def _settings(args: argparse.Namespace, template_dir: Path | None) -> Settings:
    settings = load_settings(args.config, template_dir=template_dir)
    if args.org:
        settings = replace(settings, github_org=args.org)
    return settings


def create_cmd(args: argparse.Namespace, deps: Dependencies) -> int:
    params = validate_params(args.name, args.stack, args.description)
    template_dir = Path(args.template_dir).resolve()
    settings = _settings(args, template_dir)

    remote = None if args.skip_github else deps.remote()
    ctx = BootstrapContext(
        settings=settings,
        params=params,
        template_dir=template_dir,
        project_dir=target_dir_for(template_dir, params.name),
        prompter=deps.prompter,
        secret_store=deps.secret_store,
        containers=deps.containers(settings),
        remote=remote,
        deterministic_git=bool(args.deterministic_git),
        skip_build=bool(args.skip_build),
        skip_tests=bool(args.skip_tests),
    )

    report = run_pipeline(ctx)
    if report.aborted is not None:
        logger.error(report.aborted.reason, step=report.aborted.step)
        deps.echo(render_summary(report))
        return 1

    log_success(logger, "Project bootstrap completed successfully!")
    deps.echo(render_summary(report))
    return 0


def secrets_cmd(args: argparse.Namespace, deps: Dependencies) -> int:
    name = validate_project_name(args.name or "")
    settings = _settings(args, None)
    remote = deps.remote()
    if remote is None:
        raise CredentialError(
            "GitHub CLI not found or not logged in. Please run: gh auth login\n"
            f"Then manually set up secrets at: https://github.com/{settings.github_org}/{name}/settings/secrets/actions"
        )

    p = deps.prompter
    username = p.ask(f"Enter your Docker Hub username [{settings.registry_username}]: ").strip()
    token = p.ask_secret("Enter your Docker Hub access token: ").strip()
    p.say("Get the ArgoCD admin password by running:")
    p.say(manual_secret_command(settings))
    password = p.ask_secret("Enter ArgoCD admin password: ").strip()
    if not token or not password:
        raise CredentialError("Docker Hub token and ArgoCD password are required.")

    creds = CredentialBundle(username or settings.registry_username, token, password)
    outcome = set_repository_secrets(remote, settings.github_org, name, creds.as_secrets())
    deps.echo(f"\nVerify with: gh secret list --repo {settings.github_org}/{name}\n")
    if SECRET_FAILED in outcome.values():
        return 1
    log_success(logger, "GitHub secrets setup completed!")
    return 0


def registry_secret_cmd(args: argparse.Namespace, deps: Dependencies) -> int:
    name = validate_project_name(args.name or "")
    settings = _settings(args, None)
    project_dir = Path(args.project_dir or ".").resolve()
    username = args.username or settings.registry_username
    token = deps.prompter.ask_secret("Enter your Docker Hub access token: ").strip()
    if not token:
        raise CredentialError("Docker Hub token is required. Please provide the access token.")

    out = write_registry_secret(project_dir, name, username, token)
    log_success(logger, "Docker registry secret written", path=str(out), namespace=name)
    deps.echo(
        "\nCommit and push it so ArgoCD syncs the secret:\n"
        f"git add {out.relative_to(project_dir).as_posix()}\n"
        "git commit -m 'Update Docker registry secret with real credentials'\n"
        f"git push origin {settings.default_branch}\n"
    )
    return 0


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="bootstrap-project",
        description="Create a new project from the dev template",
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING or ERROR (or set LOG_LEVEL)")
    p.add_argument("--log-format", choices=["console", "json"], default=None, help="Log output format (or set LOG_FORMAT)")
    sub = p.add_subparsers(dest="command", required=True)

    c = sub.add_parser(
        "create",
        help="Copy the template into a new project, customize it, commit and publish",
        epilog="Example: bootstrap-project create -n my-awesome-project -s fullstack -d 'My awesome project'",
    )
    c.add_argument("-n", "--name", default=None, help="Project name (kebab-case)")
    c.add_argument("-s", "--stack", default=None, help=f"Stack ({'|'.join(Stack.choices())})")
    c.add_argument("-d", "--description", default=None, help="Project description")
    c.add_argument("--template-dir", default=".", help="Template directory (default: current directory)")
    c.add_argument("--config", default=None, help="Settings YAML (default: <template-dir>/bootstrap.yaml if present)")
    c.add_argument("--org", default=None, help="GitHub organisation (overrides settings)")
    c.add_argument("--skip-github", action="store_true", help="Do not look up, create or configure the GitHub repo")
    c.add_argument("--skip-build", action="store_true", help="Do not build container images")
    c.add_argument("--skip-tests", action="store_true", help="Do not run the smoke tests")
    c.add_argument(
        "--deterministic-git",
        action="store_true",
        default=False,
        help="Use fixed git author/committer identity and timestamps",
    )
    c.set_defaults(func=create_cmd)

    s = sub.add_parser("secrets", help="Set the CI/CD secrets on an existing GitHub repository")
    s.add_argument("-n", "--name", default=None, help="Project name (kebab-case)")
    s.add_argument("--config", default=None, help="Settings YAML")
    s.add_argument("--org", default=None, help="GitHub organisation (overrides settings)")
    s.set_defaults(func=secrets_cmd)

    r = sub.add_parser("registry-secret", help="Write k8s/base/secret.yaml with Docker Hub pull credentials")
    r.add_argument("-n", "--name", default=None, help="Project name; used as namespace and app label")
    r.add_argument("--project-dir", default=None, help="Project directory (default: current directory)")
    r.add_argument("--username", default=None, help="Docker Hub username (default from settings)")
    r.add_argument("--config", default=None, help="Settings YAML")
    r.add_argument("--org", default=None, help=argparse.SUPPRESS)
    r.set_defaults(func=registry_secret_cmd)
    return p


def main(argv: list[str] | None = None, deps: Dependencies | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    setup_logging(log_format=args.log_format, log_level=args.log_level)
    deps = deps or Dependencies()

    try:
        return int(args.func(args, deps))
    except UserAbort:
        return 0
    except BootstrapError as e:
        logger.error(str(e))
        return 1
    except EOFError:
        logger.error("No input available for an interactive prompt")
        return 1
    except KeyboardInterrupt:
        logger.error("Interrupted")
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
