import base64
import json
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Protocol

import requests

from domain.errors import ConflictError, CredentialsMissingError, MalformedSnapshotError, RemoteApiError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RemoteDocument:
    payload: Any
    token: str | None = None


class RemoteSnapshotStore(Protocol):
    """Versioned document store contract used by the synchronizer."""

    @property
    def is_configured(self) -> bool:
        ...

    def fetch(self) -> RemoteDocument:
        ...

    def fetch_token(self) -> str | None:
        ...

    def put(self, payload: Any, token: str | None) -> str:
        ...


class GitHubContentsStore:
    """Snapshot document kept as a JSON file in a GitHub repository."""

    def __init__(
        self,
        *,
        owner: str,
        repo: str,
        file_path: str,
        branch: str = "main",
        token_provider: Callable[[], str | None] = lambda: None,
        api_url: str = "https://api.github.com",
        raw_url: str = "https://raw.githubusercontent.com",
        timeout: float = 15.0,
        session: requests.Session | None = None,
    ) -> None:
        self._owner = owner
        self._repo = repo
        self._file_path = file_path
        self._branch = branch
        self._token_provider = token_provider
        self._api_url = api_url.rstrip("/")
        self._raw_url = raw_url.rstrip("/")
        self._timeout = timeout
        self._session = session or requests.Session()

    @property
    def contents_url(self) -> str:
        return f"{self._api_url}/repos/{self._owner}/{self._repo}/contents/{self._file_path}"

    @property
    def public_url(self) -> str:
        return f"{self._raw_url}/{self._owner}/{self._repo}/{self._branch}/{self._file_path}"

    @property
    def is_configured(self) -> bool:
        return bool(self._token())

    def _token(self) -> str:
        return str(self._token_provider() or "").strip()

    def _headers(self, token: str) -> dict[str, str]:
        return {
            "Authorization": f"token {token}",
            "Accept": "application/vnd.github.v3+json",
        }

    def _request(self, method: str, url: str, **kwargs) -> requests.Response:
        try:
            return self._session.request(method, url, timeout=self._timeout, **kwargs)
        except requests.RequestException as exc:
            raise RemoteApiError(f"Network error talking to GitHub: {exc}") from exc

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("message"):
            return str(body["message"])
        return str(response.status_code)

    def fetch(self) -> RemoteDocument:
        token = self._token()
        if not token:
            return self._fetch_public()

        logger.info("Fetching checks from GitHub API %s", self.contents_url)
        response = self._request("GET", self.contents_url, headers=self._headers(token), params={"ref": self._branch})
        if response.status_code != 200:
            raise RemoteApiError(
                f"GitHub API error: {self._error_message(response)}", status_code=response.status_code
            )
        try:
            meta = response.json()
            content = base64.b64decode(meta["content"]).decode("utf-8")
            payload = json.loads(content)
        except (ValueError, KeyError, TypeError) as exc:
            raise MalformedSnapshotError(f"Malformed GitHub contents response: {exc}") from exc
        return RemoteDocument(payload=payload, token=meta.get("sha"))

    def _fetch_public(self) -> RemoteDocument:
        logger.info("No GitHub token, fetching checks from %s", self.public_url)
        response = self._request("GET", self.public_url, params={"t": int(time.time() * 1000)})
        if response.status_code != 200:
            raise RemoteApiError(f"Public fetch failed: {response.status_code}", status_code=response.status_code)
        try:
            payload = response.json()
        except ValueError as exc:
            raise MalformedSnapshotError(f"Public snapshot is not valid JSON: {exc}") from exc
        return RemoteDocument(payload=payload, token=None)

    def fetch_token(self) -> str | None:
        """Current blob sha, or None when the document does not exist yet."""
        token = self._token()
        if not token:
            raise CredentialsMissingError()
        response = self._request("GET", self.contents_url, headers=self._headers(token), params={"ref": self._branch})
        if response.status_code == 404:
            return None
        if response.status_code != 200:
            raise RemoteApiError(
                f"GitHub API error: {self._error_message(response)}", status_code=response.status_code
            )
        try:
            return response.json()["sha"]
        except (ValueError, KeyError, TypeError) as exc:
            raise RemoteApiError(f"Malformed GitHub contents response: {exc}") from exc

    def put(self, payload: Any, token: str | None) -> str:
        credential = self._token()
        if not credential:
            raise CredentialsMissingError()

        content = json.dumps(payload, indent=2, ensure_ascii=False)
        body = {
            "message": f"Update check data - {datetime.now().strftime('%d.%m.%Y %H:%M:%S')}",
            "content": base64.b64encode(content.encode("utf-8")).decode("ascii"),
            "branch": self._branch,
        }
        if token:
            body["sha"] = token

        logger.info("Saving checks to GitHub %s", self.contents_url)
        response = self._request(
            "PUT",
            self.contents_url,
            headers={**self._headers(credential), "Content-Type": "application/json"},
            json=body,
        )
        if response.status_code not in (200, 201):
            message = self._error_message(response)
            if response.status_code == 409 or (response.status_code == 422 and "sha" in message.lower()):
                raise ConflictError(
                    f"GitHub rejected the write, data changed remotely: {message}",
                    status_code=response.status_code,
                )
            raise RemoteApiError(f"GitHub API error: {message}", status_code=response.status_code)

        try:
            return response.json()["content"]["sha"]
        except (ValueError, KeyError, TypeError) as exc:
            raise RemoteApiError(f"Malformed GitHub write response: {exc}") from exc
