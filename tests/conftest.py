"""
Test configuration and fixtures for the Website Analyser API.

No test launches a real browser, runs Lighthouse or calls the LLM: the
collaborators are replaced with the fakes defined here.
"""

import os
from contextlib import asynccontextmanager
from typing import Generator

os.environ["GROQ_API_KEY"] = ""
os.environ["ANALYSIS_MODE"] = "full"

import pytest
from fastapi.testclient import TestClient

from site_analyser.core.config import Settings
from site_analyser.core.exceptions import AuditError, InspectionError
from site_analyser.models import AuditResult, Issue, ScoreSet, ServerInfo, TechnicalSnapshot


def make_lhr(performance=0.95, accessibility=0.99, best_practices=1.0, seo=0.82, audits=None):
    """Builds a minimal Lighthouse result with the four categories."""
    return {
        "finalUrl": "https://example.com/",
        "categories": {
            "performance": {"score": performance},
            "accessibility": {"score": accessibility},
            "best-practices": {"score": best_practices},
            "seo": {"score": seo},
            "pwa": {"score": 0.1},
        },
        "audits": audits if audits is not None else {
            "render-blocking-resources": {
                "id": "render-blocking-resources",
                "title": "Eliminate render-blocking resources",
                "description": "Resources are blocking the first paint of your page.",
                "score": 0.45,
            },
            "document-title": {
                "id": "document-title",
                "title": "Document has a `<title>` element",
                "description": "The title gives screen reader users an overview of the page.",
                "score": 1,
            },
        },
    }


class SpyLauncher:
    """Stands in for `launch_browser` and counts launches and closes."""

    def __init__(self, browser=None, launch_error=None):
        self.browser = browser
        self.launch_error = launch_error
        self.launched = 0
        self.closed = 0
        self.args = None

    def __call__(self, args, headless=True):
        return self._session(args)

    @asynccontextmanager
    async def _session(self, args):
        if self.launch_error:
            raise self.launch_error
        self.launched += 1
        self.args = args
        try:
            yield self.browser
        finally:
            self.closed += 1


class FakeAuditRunner:
    def __init__(self, result=None, error=None):
        self.result = result or AuditResult(
            scores=ScoreSet(performance=95, accessibility=99, best_practices=100, seo=82, url="https://example.com/"),
            issues=[Issue(title="Eliminate render-blocking resources", description="Blocking.", score=45)],
        )
        self.error = error
        self.calls = 0

    async def run(self, url):
        self.calls += 1
        if self.error:
            raise self.error
        return self.result


class FakeInspector:
    def __init__(self, snapshot=None, error=None):
        self.snapshot = snapshot
        self.error = error
        self.calls = 0

    async def inspect(self, url):
        self.calls += 1
        if self.error:
            raise self.error
        return self.snapshot


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, GROQ_API_KEY=None)


@pytest.fixture
def snapshot() -> TechnicalSnapshot:
    return TechnicalSnapshot(
        technologies=["React", "Google Tag Manager"],
        meta={"description": "An example site", "viewport": "width=device-width"},
        scripts=["https://cdn.jsdelivr.net/npm/react.js"],
        server_info=ServerInfo(server="nginx"),
    )


@pytest.fixture
def audit_error() -> AuditError:
    return AuditError("Lighthouse analysis failed: Chrome could not be reached")


@pytest.fixture
def inspection_error() -> InspectionError:
    return InspectionError("Technical analysis failed: Timeout 30000ms exceeded")


@pytest.fixture(scope="session")
def test_app():
    """Create FastAPI test application."""
    from site_analyser.main import app

    return app


@pytest.fixture(scope="function")
def client(test_app) -> Generator[TestClient, None, None]:
    with TestClient(test_app) as test_client:
        yield test_client
    test_app.dependency_overrides.clear()
