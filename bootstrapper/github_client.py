"""
github_client.py

Responsibility: Isolate all direct GitHub REST API interaction.

This module must be the only place that:
- Constructs GitHub REST endpoints
- Sends HTTP requests to api.github.com
- Interprets GitHub API responses / error payloads
- Encrypts Actions secrets for upload

Everything else (git commands, prompts, pipeline flow) goes through the
`RemoteRepositoryClient` protocol so tests can substitute a fake.
"""

from __future__ import annotations

import base64
import os
from dataclasses import dataclass
from typing import Any, Protocol

import requests
from nacl import encoding, public

from bootstrapper.errors import BootstrapError, CommandError
from bootstrapper.logging_config import get_logger
from bootstrapper.tools import has_tool, run

logger = get_logger(__name__)


class GitHubError(BootstrapError):
    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class RepoInfo:
    owner: str
    name: str
    html_url: str
    clone_url: str
    default_branch: str


class RemoteRepositoryClient(Protocol):
    def get_repo(self, owner: str, name: str) -> RepoInfo | None: ...

    def create_repo(self, *, owner: str, name: str, private: bool, description: str = "") -> RepoInfo: ...

    def delete_repo(self, owner: str, name: str) -> None: ...

    def set_secret(self, owner: str, name: str, secret_name: str, value: str) -> None: ...

    def auth_url(self, clone_url: str) -> str: ...


def resolve_token(env: dict[str, str] | None = None) -> str | None:
    """
    Find a GitHub token: GITHUB_TOKEN / GH_TOKEN first, then `gh auth token`.

    Returns None when gh is missing or not logged in; callers treat that as
    "skip the remote steps".
    """
    env = os.environ if env is None else env
    for key in ("GITHUB_TOKEN", "GH_TOKEN"):
        if env.get(key, "").strip():
            return env[key].strip()
    if not has_tool("gh"):
        logger.debug("GitHub CLI not found")
        return None
    try:
        token = run(["gh", "auth", "token"]).strip()
    except CommandError:
        logger.debug("GitHub CLI is not authenticated")
        return None
    return token or None


def encrypt_secret(public_key_b64: str, value: str) -> str:
    """Seal `value` with the repository's libsodium public key (base64 in, base64 out)."""
    key = public.PublicKey(public_key_b64.encode("utf-8"), encoding.Base64Encoder())
    sealed = public.SealedBox(key).encrypt(value.encode("utf-8"))
    return base64.b64encode(sealed).decode("utf-8")


class GitHubClient:
    def __init__(self, token: str, api_base: str = "https://api.github.com") -> None:
        if not token.strip():
            raise GitHubError("GitHub token is required.")
        self._token = token
        self._api_base = api_base.rstrip("/")

    def _headers(self) -> dict[str, str]:
        return {
            "Accept": "application/vnd.github+json",
            "Authorization": f"Bearer {self._token}",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": "bootstrap-project",
        }

    def _request(self, method: str, path: str, *, json_body: dict[str, Any] | None = None) -> Any:
        url = f"{self._api_base}{path}"
        try:
            r = requests.request(method, url, headers=self._headers(), json=json_body, timeout=30)
        except requests.RequestException as e:
            raise GitHubError(f"GitHub API request failed {method} {path}: {e}") from e
        if r.status_code >= 400:
            try:
                payload = r.json()
            except ValueError:
                payload = {"message": r.text}
            raise GitHubError(
                f"GitHub API error {r.status_code} {method} {path}: {payload.get('message', payload)}",
                status_code=r.status_code,
            )
        if r.status_code == 204 or not r.content:
            return None
        return r.json()

    @staticmethod
    def _repo_info(owner: str, name: str, data: dict[str, Any]) -> RepoInfo:
        return RepoInfo(
            owner=owner,
            name=name,
            html_url=data["html_url"],
            clone_url=data["clone_url"],
            default_branch=data.get("default_branch") or "main",
        )

    def get_repo(self, owner: str, name: str) -> RepoInfo | None:
        """
        Return RepoInfo if the repo exists and is accessible; otherwise None.
        """
        try:
            data = self._request("GET", f"/repos/{owner}/{name}")
        except GitHubError as e:
            if e.status_code == 404:
                return None
            raise
        return self._repo_info(owner, name, data)

    def create_repo(
        self,
        *,
        owner: str,
        name: str,
        private: bool,
        description: str = "",
    ) -> RepoInfo:
        """
        Create a new repository under either:
        - the authenticated user (if owner matches the viewer login), OR
        - an organization (if owner is an org).
        """
        viewer = self._request("GET", "/user")
        viewer_login = str(viewer.get("login") or "")

        body = {
            "name": name,
            "private": private,
            "description": description,
            "auto_init": False,
            "has_issues": True,
            "has_projects": False,
            "has_wiki": False,
        }

        if owner == viewer_login:
            data = self._request("POST", "/user/repos", json_body=body)
        else:
            data = self._request("POST", f"/orgs/{owner}/repos", json_body=body)
        return self._repo_info(owner, name, data)

    def delete_repo(self, owner: str, name: str) -> None:
        # Needs the delete_repo scope on the token.
        self._request("DELETE", f"/repos/{owner}/{name}")

    def set_secret(self, owner: str, name: str, secret_name: str, value: str) -> None:
        key = self._request("GET", f"/repos/{owner}/{name}/actions/secrets/public-key")
        self._request(
            "PUT",
            f"/repos/{owner}/{name}/actions/secrets/{secret_name}",
            json_body={"encrypted_value": encrypt_secret(key["key"], value), "key_id": key["key_id"]},
        )

    def auth_url(self, clone_url: str) -> str:
        """
        Convert https://github.com/owner/name.git into an HTTPS URL containing the token.

        GitHub supports x-access-token in the username position.
        """
        return clone_url.replace("https://", f"https://x-access-token:{self._token}@", 1)


def make_client(env: dict[str, str] | None = None) -> GitHubClient | None:
    token = resolve_token(env)
    return GitHubClient(token) if token else None
