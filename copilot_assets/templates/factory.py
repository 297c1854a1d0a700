"""Pick a template provider from configuration or a command-line source."""

from __future__ import annotations

from copilot_assets.config import DEFAULT_BRANCH, RemoteConfig, parse_source_option
from copilot_assets.templates.base import TemplateProvider
from copilot_assets.templates.bundled import BundledTemplateProvider
from copilot_assets.templates.github_client import GitHubClient
from copilot_assets.templates.remote import RemoteTemplateProvider


class TemplateProviderFactory:
    def __init__(
        self,
        bundled: BundledTemplateProvider | None = None,
        client: GitHubClient | None = None,
    ):
        self.bundled = bundled or BundledTemplateProvider()
        self.client = client

    def default_provider(self) -> TemplateProvider:
        return self.bundled

    def remote_provider(self, repository: str, branch: str | None = None) -> TemplateProvider:
        config = RemoteConfig(source=repository, branch=branch or DEFAULT_BRANCH)
        return RemoteTemplateProvider(config, client=self.client, bundled=self.bundled)

    def from_config(self, config: RemoteConfig | None = None) -> TemplateProvider:
        config = config or RemoteConfig.load()
        if config.has_remote_source:
            return RemoteTemplateProvider(config, client=self.client, bundled=self.bundled)
        return self.bundled

    def from_source(self, source: str | None) -> TemplateProvider:
        """``default``/``bundled``/empty → bundled; ``owner/repo[@branch]`` → remote."""
        parsed = parse_source_option(source)
        if parsed is None:
            return self.bundled
        repository, branch = parsed
        return self.remote_provider(repository, branch)

    def resolve(self, source: str | None = None, use_default: bool = False) -> TemplateProvider:
        """Provider for a command: explicit default, then override, then config."""
        if use_default:
            return self.bundled
        if source:
            return self.from_source(source)
        return self.from_config()
