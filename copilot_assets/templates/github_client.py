"""GitHub contents API client.

Lists a repository directory recursively (page by page) and downloads raw
file content. Requests go through ``urllib.request`` with a fixed timeout;
every HTTP, network or timeout failure becomes a ``RemoteFetchError``.
"""

from __future__ import annotations

import json
import logging
import os
import urllib.error
import urllib.parse
import urllib.request
from dataclasses import dataclass
from typing import Any, Callable

from copilot_assets import __version__
from copilot_assets.errors import RemoteFetchError

logger = logging.getLogger(__name__)

API_BASE = "https://api.github.com"
RAW_BASE = "https://raw.githubusercontent.com"
TIMEOUT_SECONDS = 30
PER_PAGE = 100

Opener = Callable[..., Any]


@dataclass(frozen=True)
class RemoteFile:
    """A file found under the listed directory."""

    path: str  # relative to the listed directory
    download_url: str
    size: int = 0


def github_token() -> str | None:
    """Token for private repositories: ``GITHUB_TOKEN`` then ``GH_TOKEN``."""
    return os.environ.get("GITHUB_TOKEN") or os.environ.get("GH_TOKEN") or None


class GitHubClient:
    """Thin wrapper over the GitHub REST contents endpoint.

    Parameters
    ----------
    token : str | None
        Bearer token. Falls back to :func:`github_token` when *None*.
    opener : callable | None
        ``urlopen``-compatible callable; injected by tests.
    """

    def __init__(
        self,
        token: str | None = None,
        opener: Opener | None = None,
        timeout: float = TIMEOUT_SECONDS,
    ) -> None:
        self.token = token if token is not None else github_token()
        self.timeout = timeout
        self._open = opener or urllib.request.urlopen

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def list_files(self, owner: str, repo: str, path: str, branch: str) -> list[RemoteFile]:
        """Recursively list every file under *path* at *branch*."""
        files: list[RemoteFile] = []
        self._collect(owner, repo, path, branch, root=path, files=files)
        return files

    def download(self, url: str) -> str:
        body = self._get(url, accept="application/vnd.github.raw")
        try:
            return body.decode("utf-8")
        except UnicodeDecodeError as e:
            raise RemoteFetchError(f"File is not UTF-8 text: {url}") from e

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _collect(
        self,
        owner: str,
        repo: str,
        path: str,
        branch: str,
        root: str,
        files: list[RemoteFile],
    ) -> None:
        for item in self._list_directory(owner, repo, path, branch):
            item_path = item.get("path") or f"{path}/{item.get('name', '')}"
            relative = item_path[len(root) + 1:] if item_path.startswith(root + "/") else item_path

            if item.get("type") == "file":
                files.append(
                    RemoteFile(
                        path=relative,
                        download_url=item.get("download_url")
                        or f"{RAW_BASE}/{owner}/{repo}/{branch}/{root}/{relative}",
                        size=_item_size(item, item_path),
                    )
                )
            elif item.get("type") == "dir":
                self._collect(owner, repo, item_path, branch, root, files)

    def _list_directory(self, owner: str, repo: str, path: str, branch: str) -> list[dict]:
        """One directory listing, following pages until a short page."""
        items: list[dict] = []
        page = 1
        quoted_path = urllib.parse.quote(path)
        query_ref = urllib.parse.quote(branch, safe="")

        while True:
            url = (
                f"{API_BASE}/repos/{owner}/{repo}/contents/{quoted_path}"
                f"?ref={query_ref}&per_page={PER_PAGE}&page={page}"
            )
            body = self._get(url, accept="application/vnd.github+json")
            try:
                data = json.loads(body)
            except ValueError as e:
                raise RemoteFetchError(f"Failed to parse GitHub API response: {e}") from e

            if not isinstance(data, list):
                raise RemoteFetchError(f"Expected a directory listing at {path}")

            items.extend(data)
            if len(data) < PER_PAGE:
                return items
            page += 1

    def _get(self, url: str, accept: str) -> bytes:
        headers = {
            "Accept": accept,
            "User-Agent": f"copilot-assets/{__version__}",
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        logger.debug("GET %s", url)
        req = urllib.request.Request(url, headers=headers, method="GET")
        try:
            with self._open(req, timeout=self.timeout) as resp:
                return resp.read()
        except urllib.error.HTTPError as e:
            raise RemoteFetchError(f"GitHub API returned {e.code} for {url}") from e
        except TimeoutError as e:
            raise RemoteFetchError("Request timed out") from e
        except urllib.error.URLError as e:
            if isinstance(e.reason, TimeoutError):
                raise RemoteFetchError("Request timed out") from e
            raise RemoteFetchError(f"Network error: {e.reason}") from e


def _item_size(item: dict, item_path: str) -> int:
    try:
        return int(item.get("size") or 0)
    except (TypeError, ValueError) as e:
        raise RemoteFetchError(f"Invalid size in listing for {item_path}: {item.get('size')!r}") from e
