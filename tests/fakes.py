"""In-memory collaborators shared by the test modules."""

import io
import json
import urllib.error

from copilot_assets.models.manifest import TemplateSource
from copilot_assets.templates.base import TemplateFile, TemplateProvider, TemplateResult


class StaticProvider(TemplateProvider):
    """Serves a fixed ``{relative_path: content}`` mapping."""

    def __init__(self, files: dict, error: str | None = None):
        self.files = dict(files)
        self.error = error
        self.fetch_count = 0

    def fetch(self) -> TemplateResult:
        self.fetch_count += 1
        if self.error:
            return TemplateResult.failed(TemplateSource.default(), self.error)
        return TemplateResult(
            templates=[TemplateFile(p, c) for p, c in self.files.items()],
            source=TemplateSource.default(),
        )

    def is_available(self) -> bool:
        return self.error is None


class FakeResponse(io.BytesIO):
    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False


class FakeOpener:
    """urlopen stand-in answering from a ``{url_substring: body}`` table.

    Bodies that are lists or dicts are sent as JSON; an int is an HTTP
    status to fail with. Unmatched URLs fail with 404.
    """

    def __init__(self, routes: dict):
        self.routes = routes
        self.requests = []

    def __call__(self, req, timeout=None):
        url = req.full_url
        self.requests.append((url, timeout, dict(req.header_items())))
        for fragment, body in self.routes.items():
            if fragment in url:
                if isinstance(body, int):
                    raise urllib.error.HTTPError(url, body, "error", {}, None)
                if isinstance(body, (list, dict)):
                    body = json.dumps(body)
                if isinstance(body, str):
                    body = body.encode("utf-8")
                return FakeResponse(body)
        raise urllib.error.HTTPError(url, 404, "not found", {}, None)
