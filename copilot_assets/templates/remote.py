"""Templates from a remote GitHub repository.

A remote failure is reported as a failed ``TemplateResult``; bundled
templates are never substituted for a configured remote. The one automatic
fallback is when no remote is configured at all, which is the normal
default state.
"""

from __future__ import annotations

import logging

from copilot_assets.config import RemoteConfig
from copilot_assets.errors import RemoteFetchError
from copilot_assets.models.manifest import HOME_DIR, TemplateSource
from copilot_assets.security.limits import ContentLimits
from copilot_assets.security.paths import is_valid_branch, is_valid_repository, sanitize_path
from copilot_assets.templates.base import TemplateFile, TemplateProvider, TemplateResult
from copilot_assets.templates.bundled import BundledTemplateProvider
from copilot_assets.templates.github_client import GitHubClient

logger = logging.getLogger(__name__)

REMOTE_TEMPLATES_DIR = HOME_DIR


class RemoteTemplateProvider(TemplateProvider):
    """Lists ``.github/`` in ``owner/repo`` at a branch and downloads each file."""

    def __init__(
        self,
        config: RemoteConfig,
        client: GitHubClient | None = None,
        bundled: BundledTemplateProvider | None = None,
    ):
        self.config = config
        self.client = client or GitHubClient()
        self.bundled = bundled or BundledTemplateProvider()

    @property
    def source(self) -> TemplateSource:
        return TemplateSource.remote(self.config.source or "", self.config.branch)

    def fetch(self) -> TemplateResult:
        if not self.config.has_remote_source:
            return self.bundled.fetch()

        repository = self.config.source.strip()
        branch = self.config.branch
        source = TemplateSource.remote(repository, branch)

        if not is_valid_repository(repository):
            return TemplateResult.failed(source, f"Invalid repository: {repository}")
        if not is_valid_branch(branch):
            return TemplateResult.failed(source, f"Invalid branch: {branch}")

        owner, repo = repository.split("/")
        try:
            templates = self._download_all(owner, repo, branch)
        except RemoteFetchError as e:
            logger.debug("Remote fetch from %s failed: %s", source.descriptor, e)
            return TemplateResult.failed(source, str(e))

        if not templates:
            return TemplateResult.failed(
                source, f"No template files found in {REMOTE_TEMPLATES_DIR} directory"
            )
        return TemplateResult(templates=templates, source=source)

    def is_available(self) -> bool:
        if not self.config.has_remote_source:
            return False
        if not is_valid_repository(self.config.source) or not is_valid_branch(self.config.branch):
            return False

        owner, repo = self.config.source.strip().split("/")
        try:
            self.client.list_files(owner, repo, REMOTE_TEMPLATES_DIR, self.config.branch)
        except RemoteFetchError:
            return False
        return True

    def _download_all(self, owner: str, repo: str, branch: str) -> list[TemplateFile]:
        templates = []
        remote_files = self.client.list_files(owner, repo, REMOTE_TEMPLATES_DIR, branch)

        for remote_file in sorted(remote_files, key=lambda f: f.path):
            relative_path = sanitize_path(remote_file.path)

            if not ContentLimits.is_allowed_extension(relative_path):
                logger.warning("Skipping remote file with disallowed extension: %s", relative_path)
                continue
            if remote_file.size > ContentLimits.MAX_FILE_SIZE:
                logger.warning("Skipping oversized remote file: %s", relative_path)
                continue

            content = self.client.download(remote_file.download_url)
            if len(content.encode("utf-8")) > ContentLimits.MAX_FILE_SIZE:
                logger.warning("Skipping oversized remote file: %s", relative_path)
                continue
            templates.append(TemplateFile(relative_path=relative_path, content=content))

        return templates
