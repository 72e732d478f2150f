"""
registry_secret.py

Responsibility: Generate the image-pull Secret manifest (`k8s/base/secret.yaml`)
for a Docker Hub account, so ArgoCD can sync it with the rest of the project.
"""

from __future__ import annotations

import base64
import json
from pathlib import Path
from typing import Any

import yaml

SECRET_PATH = "k8s/base/secret.yaml"
REGISTRY_URL = "https://index.docker.io/v1/"


def _b64(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def dockerconfigjson(username: str, token: str, registry: str = REGISTRY_URL) -> str:
    config = {
        "auths": {
            registry: {
                "username": username,
                "password": token,
                "email": f"{username}@example.com",
                "auth": _b64(f"{username}:{token}"),
            }
        }
    }
    return _b64(json.dumps(config, separators=(",", ":")))


def registry_secret_manifest(project_name: str, username: str, token: str) -> dict[str, Any]:
    return {
        "apiVersion": "v1",
        "kind": "Secret",
        "metadata": {
            "name": "docker-registry-secret",
            "namespace": project_name,
            "labels": {"app": project_name},
        },
        "type": "kubernetes.io/dockerconfigjson",
        "data": {".dockerconfigjson": dockerconfigjson(username, token)},
    }


def write_registry_secret(project_dir: Path, project_name: str, username: str, token: str) -> Path:
    out = project_dir / SECRET_PATH
    out.parent.mkdir(parents=True, exist_ok=True)
    manifest = registry_secret_manifest(project_name, username, token)
    out.write_text(yaml.safe_dump(manifest, sort_keys=False), encoding="utf-8")
    return out
