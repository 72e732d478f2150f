"""Hand-off text printed at the end of a bootstrap run, including runs that stopped early."""

from __future__ import annotations

from bootstrapper.pipeline import PipelineReport
from bootstrapper.remote import SECRET_SET, SECRET_SKIPPED

RULE = "=" * 42


def render_summary(report: PipelineReport) -> str:
    ctx = report.context
    compose = " ".join(ctx.settings.compose_command)
    secrets_result = report.result("provision_secrets")
    secrets = secrets_result.details.get("secrets", {}) if secrets_result else {}
    publish = report.result("publish_remote")
    repo_url = publish.details.get("url", ctx.repo_url) if publish else ctx.repo_url

    lines = [
        RULE,
        f"  Project Created: {ctx.project_name}",
        RULE,
        "",
        f"Project location: {ctx.project_dir}",
        f"GitHub repository: {repo_url}",
        "",
        "Next steps:",
        "1. Change to the project directory:",
        f"   cd {ctx.project_dir}",
        "",
    ]

    if secrets and all(s == SECRET_SET for s in secrets.values()):
        lines.append("2. GitHub Secrets: already configured")
    else:
        lines.append("2. GitHub Secrets: finish setup at")
        lines.append(f"   {ctx.repo_url}/settings/secrets/actions")
    for name, status in secrets.items():
        label = {SECRET_SET: "Set", SECRET_SKIPPED: "Skipped"}.get(status, "FAILED")
        lines.append(f"   - {name}: {label}")

    lines += [
        "",
        "3. Review and customize the configuration files",
        "4. Update the .env file with your specific settings",
        f"5. Start development: {compose} up -d",
        "6. Access the application at http://localhost:3000",
        "",
        "Useful commands:",
        f"- Start development: {compose} up -d",
        f"- Run tests: {compose} run --rm app npm test",
        f"- Run Python tests: {compose} run --rm python python -m pytest",
        f"- Build images: {compose} build",
        "- Deploy to K8s: kubectl apply -k k8s/overlays/development",
        "",
        f"CI/CD: pushes to {ctx.settings.default_branch} build images and ArgoCD syncs them",
        f"- Monitor deployment at: {ctx.settings.argocd_url}",
        "",
        "Documentation: docs/README.md",
    ]

    if report.warnings:
        lines += ["", "Warnings during bootstrap:"]
        lines += [f"- [{r.step}] {r.reason}" for r in report.warnings]

    if report.aborted is not None:
        lines += ["", f"Bootstrap stopped at step \"{report.aborted.step}\":", f"  {report.aborted.reason}"]
        banner = "  Bootstrap incomplete: fix the error above and re-run"
    else:
        banner = "  Ready to start development!"

    lines += [
        "",
        RULE,
        banner,
        RULE,
    ]
    return "\n".join(lines) + "\n"
