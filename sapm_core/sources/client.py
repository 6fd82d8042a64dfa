from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Any
from urllib.parse import quote

import requests
from requests.exceptions import RequestException, Timeout

from ..errors import SourceUnavailable, VersionNotFound

logger = logging.getLogger(__name__)


def _error_body_snippet(response: requests.Response, max_chars: int = 200) -> str:
    body = response.text or ""
    compact = " ".join(body.split())
    return compact[:max_chars]


class RegistryClient:
    """Reads package documents and tarballs from an npm-compatible registry."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 30.0,
        max_retries: int = 2,
        backoff_seconds: float = 0.2,
        token: str | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = max(float(timeout), 1.0)
        self.max_retries = max(1, int(max_retries))
        self.backoff_seconds = max(0.0, float(backoff_seconds))
        self.headers: dict[str, str] = {"accept": "application/json"}
        if token:
            self.headers["authorization"] = f"Bearer {token}"

    def package_url(self, name: str) -> str:
        # Scoped names travel as a single path segment: @scope%2Fname.
        return f"{self.base_url}/{quote(name, safe='@')}"

    def package_document(self, name: str) -> dict[str, Any]:
        response = self._get(self.package_url(name))
        if response.status_code == 404:
            raise VersionNotFound(f"package not found on registry: {name}")
        if response.status_code >= 400:
            raise SourceUnavailable(
                f"registry lookup failed for {name}: {response.status_code} {_error_body_snippet(response)}"
            )
        try:
            payload = response.json()
        except ValueError as exc:
            raise SourceUnavailable(f"registry returned invalid JSON for {name}") from exc
        if not isinstance(payload, dict):
            raise SourceUnavailable(f"registry returned an unexpected document for {name}")
        return payload

    def download(self, url: str, out_path: Path) -> Path:
        response = self._get(url, stream=True)
        if response.status_code >= 400:
            raise SourceUnavailable(f"download failed: {response.status_code} {url}")
        out_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            with out_path.open("wb") as handle:
                for chunk in response.iter_content(chunk_size=1024 * 1024):
                    if chunk:
                        handle.write(chunk)
        except RequestException as exc:
            raise SourceUnavailable(f"download interrupted: {url}") from exc
        return out_path

    def _get(self, url: str, *, stream: bool = False) -> requests.Response:
        last_error: Exception | None = None
        for attempt in range(1, self.max_retries + 1):
            try:
                logger.debug("registry request attempt=%s/%s url=%s", attempt, self.max_retries, url)
                response = requests.get(url, headers=self.headers, timeout=self.timeout, stream=stream)
                if response.status_code < 500:
                    return response
                last_error = SourceUnavailable(f"upstream error status={response.status_code}")
                logger.warning(
                    "registry upstream error attempt=%s/%s status=%s",
                    attempt,
                    self.max_retries,
                    response.status_code,
                )
            except Timeout as exc:
                last_error = exc
                logger.warning("registry timeout attempt=%s/%s url=%s", attempt, self.max_retries, url)
            except RequestException as exc:
                last_error = exc
                logger.warning(
                    "registry transport error attempt=%s/%s: %s",
                    attempt,
                    self.max_retries,
                    exc,
                )
            if attempt < self.max_retries:
                time.sleep(min(self.backoff_seconds * attempt, 2.0))
        raise SourceUnavailable(f"registry unreachable after {self.max_retries} attempts: {url}") from last_error
