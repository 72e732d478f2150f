"""
settings.py

Responsibility: Load bootstrap settings (organisation, registry user, template
identifiers, tooling) into a typed, immutable model.

Defaults reproduce the stock dev-template. A YAML file can override any
top-level field; the template directory may ship one as `bootstrap.yaml`.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any

import yaml

from bootstrapper.errors import SettingsError

SETTINGS_FILENAME = "bootstrap.yaml"

DEFAULT_CUSTOMIZE_FILES: tuple[str, ...] = (
    "docker-compose.yml",
    "package.json",
    "package-lock.json",
    "README.md",
    ".github/workflows/ci-cd.yml",
    "k8s/base/deployment.yaml",
    "k8s/base/service.yaml",
    "k8s/base/configmap.yaml",
    "k8s/base/namespace.yaml",
    "k8s/base/secret.yaml",
    "k8s/base/ingress.yaml",
    "k8s/base/pvc.yaml",
    "k8s/base/hpa.yaml",
    "k8s/base/networkpolicy.yaml",
    "k8s/base/tcp-service.yaml",
    "k8s/base/tcp-configmap.yaml",
    "k8s/base/kustomization.yaml",
    "k8s/overlays/development/kustomization.yaml",
    "k8s/overlays/staging/kustomization.yaml",
    "k8s/overlays/production/kustomization.yaml",
    "k8s/overlays/production/deployment-patch.yaml",
)


@dataclass(frozen=True)
class TemplateIdentifiers:
    """Literal strings in the template that get rewritten for a new project."""

    project_id: str = "dev-template"
    display_name: str = "Dev-PyNode"
    legacy_db_names: tuple[str, ...] = ("dev_pynode_db", "dev_template_db")
    description: str = "AI-powered development platform with Node.js and Python backend"
    env_placeholder: str = "PROJECT_NAME"


@dataclass(frozen=True)
class Settings:
    github_org: str = "Bionic-AI-Solutions"
    registry_username: str = "docker4zerocool"
    argocd_namespace: str = "argocd"
    argocd_secret: str = "argocd-initial-admin-secret"
    argocd_secret_key: str = "password"
    argocd_url: str = "https://argocd.bionicaisolutions.com"
    default_branch: str = "main"
    required_tools: tuple[str, ...] = ("docker", "docker-compose", "git")
    compose_command: tuple[str, ...] = ("docker-compose",)
    node_image: str = "node:18"
    python_image: str = "python:3.11"
    exclude: tuple[str, ...] = (".git", "node_modules", "__pycache__", "*.pyc", ".env")
    customize_files: tuple[str, ...] = DEFAULT_CUSTOMIZE_FILES
    catch_all_suffixes: tuple[str, ...] = (".md", ".yml", ".yaml", ".json", ".py", ".ts", ".js")
    identifiers: TemplateIdentifiers = field(default_factory=TemplateIdentifiers)


def _as_tuple(key: str, value: Any) -> tuple[str, ...]:
    if isinstance(value, str):
        return (value,)
    if not isinstance(value, list):
        raise SettingsError(f"`{key}` must be a string or a list of strings.")
    return tuple(str(v) for v in value)


def settings_from_mapping(data: dict[str, Any], *, base: Settings | None = None) -> Settings:
    """
    Overlay a plain mapping (usually parsed YAML) on top of `base` (or defaults).

    Unknown keys are rejected so typos surface instead of silently doing nothing.
    """
    base = base or Settings()
    known = {f.name: f for f in fields(Settings)}
    updates: dict[str, Any] = {}

    for key, value in data.items():
        if key not in known:
            raise SettingsError(f"Unknown settings key: `{key}`")
        if key == "identifiers":
            if not isinstance(value, dict):
                raise SettingsError("`identifiers` must be a mapping when provided.")
            id_known = {f.name for f in fields(TemplateIdentifiers)}
            unknown = sorted(set(value) - id_known)
            if unknown:
                raise SettingsError(f"Unknown identifiers keys: {', '.join(unknown)}")
            id_updates = dict(value)
            if "legacy_db_names" in id_updates:
                id_updates["legacy_db_names"] = _as_tuple("legacy_db_names", id_updates["legacy_db_names"])
            updates[key] = replace(base.identifiers, **id_updates)
        elif isinstance(getattr(base, key), tuple):
            updates[key] = _as_tuple(key, value)
        else:
            if value is None:
                raise SettingsError(f"`{key}` must not be null.")
            updates[key] = str(value)

    return replace(base, **updates)


def load_settings(path: str | Path | None = None, *, template_dir: Path | None = None) -> Settings:
    """
    Resolve settings in priority order:
    - explicit `path` (must exist)
    - `bootstrap.yaml` inside `template_dir` (optional)
    - built-in defaults
    """
    if path is not None:
        cfg = Path(path)
        if not cfg.exists():
            raise SettingsError(f"Settings file does not exist: {cfg}")
    elif template_dir is not None and (template_dir / SETTINGS_FILENAME).is_file():
        cfg = template_dir / SETTINGS_FILENAME
    else:
        return Settings()

    try:
        data = yaml.safe_load(cfg.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise SettingsError(f"Invalid YAML in settings file {cfg}: {e}") from e
    if not isinstance(data, dict):
        raise SettingsError("Settings file must be a mapping/object at the top level.")
    return settings_from_mapping(data)
