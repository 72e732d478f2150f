"""
credentials.py

Responsibility: Collect the three CI/CD secrets for one run.

Nothing here writes a secret to disk; the bundle lives in memory until the
secret provisioner pushes it to GitHub.
"""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass, field
from typing import Protocol

from bootstrapper.errors import CommandError, CredentialError
from bootstrapper.logging_config import get_logger, log_success
from bootstrapper.prompts import Prompter
from bootstrapper.settings import Settings
from bootstrapper.tools import run

logger = get_logger(__name__)


@dataclass(frozen=True)
class CredentialBundle:
    registry_username: str
    registry_token: str = field(repr=False)
    deploy_password: str = field(repr=False)

    def as_secrets(self) -> dict[str, str]:
        return {
            "DOCKERHUB_USERNAME": self.registry_username,
            "DOCKERHUB_TOKEN": self.registry_token,
            "ARGOCD_PASSWORD": self.deploy_password,
        }


class SecretStore(Protocol):
    def read_secret(self, namespace: str, name: str, key: str) -> str:
        """Return the decoded value, or "" when it cannot be read."""
        ...


class KubectlSecretStore:
    def read_secret(self, namespace: str, name: str, key: str) -> str:
        try:
            raw = run(["kubectl", "-n", namespace, "get", "secret", name, "-o", f"jsonpath={{.data.{key}}}"])
        except CommandError as e:
            logger.debug("kubectl secret lookup failed", error=str(e))
            return ""
        try:
            return base64.b64decode(raw.strip(), validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError):
            return ""


def manual_secret_command(settings: Settings) -> str:
    return (
        f"kubectl -n {settings.argocd_namespace} get secret {settings.argocd_secret} "
        f"-o jsonpath='{{.data.{settings.argocd_secret_key}}}' | base64 -d"
    )


def collect_credentials(settings: Settings, prompter: Prompter, store: SecretStore) -> CredentialBundle:
    """
    Username comes from settings, the registry token from a masked prompt and
    the deployment password from the cluster. The token is only checked once
    everything else has been collected.
    """
    logger.info("Collecting required secrets for CI/CD pipeline...")
    username = settings.registry_username
    logger.info("Docker Hub username", username=username)

    prompter.say("1. Go to: https://hub.docker.com/settings/security")
    prompter.say("2. Create a new access token with 'Read, Write, Delete' permissions")
    prompter.say("3. Copy the token (you won't be able to see it again)")
    prompter.say()
    token = prompter.ask_secret("Enter your Docker Hub access token: ").strip()

    logger.info("Retrieving ArgoCD admin password...")
    password = store.read_secret(settings.argocd_namespace, settings.argocd_secret, settings.argocd_secret_key)
    if not password:
        raise CredentialError(
            "Failed to retrieve ArgoCD password. Please ensure:\n"
            "1. ArgoCD is installed and running\n"
            f"2. You have kubectl access to the {settings.argocd_namespace} namespace\n"
            f"3. The {settings.argocd_secret} exists\n\n"
            "You can manually retrieve it with:\n"
            f"{manual_secret_command(settings)}"
        )
    log_success(logger, "ArgoCD password retrieved successfully")

    if not token:
        raise CredentialError("Docker Hub token is required. Please provide the access token.")

    log_success(logger, "Secrets collected successfully")
    return CredentialBundle(registry_username=username, registry_token=token, deploy_password=password)
