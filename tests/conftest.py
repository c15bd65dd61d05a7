"""Shared test fixtures for the FolioForge test suite.

The app runs against a throwaway SQLite file created for the session; the
drafts table is cleared before each test. Model calls never leave the
process: the client fixture swaps the orchestrator for one driven by a
``ScriptedGenerator`` whose responses each test sets up.
"""

import os
import tempfile

# Point the app at a scratch database before any app imports.
_DB_DIR = tempfile.mkdtemp(prefix="folioforge-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'test.db')}"
os.environ["LOG_FORMAT"] = "text"
os.environ["ENVIRONMENT"] = "development"
os.environ["GENERATION_MODEL"] = "anthropic/test-model"

from typing import List, Union

import pytest
from fastapi.testclient import TestClient

from folioforge.api.portfolios import get_orchestrator
from folioforge.database import Base, SessionLocal, engine
from folioforge.generation.circuit_breaker import reset_all
from folioforge.generation.orchestrator import ContinuationOrchestrator
from folioforge.main import app
from folioforge.middleware.request_context import model_call_budget
from folioforge.models import Draft

Base.metadata.create_all(bind=engine)


# ---------------------------------------------------------------------------
# Stub text generator
# ---------------------------------------------------------------------------


class ScriptedGenerator:
    """TextGenerator stub that replays a fixed list of responses.

    Each entry is either the text to return or an exception to raise. When
    the script runs out, the last entry repeats.
    """

    def __init__(self, responses: List[Union[str, Exception]] = None):
        self.responses = list(responses or [])
        self.prompts: List[str] = []

    @property
    def calls(self) -> int:
        return len(self.prompts)

    async def complete(self, prompt: str, max_tokens: int, temperature: float) -> str:
        self.prompts.append(prompt)
        if not self.responses:
            raise RuntimeError("ScriptedGenerator has no responses")
        index = min(len(self.prompts), len(self.responses)) - 1
        response = self.responses[index]
        if isinstance(response, Exception):
            raise response
        return response


def make_orchestrator(generator, **overrides) -> ContinuationOrchestrator:
    """Orchestrator with the production attempt ceiling and no retry delay."""
    options = {"max_attempts": 2, "retry_delay": 0}
    options.update(overrides)
    return ContinuationOrchestrator(generator, **options)


# ---------------------------------------------------------------------------
# HTML factories
# ---------------------------------------------------------------------------

FOOTER = (
    '<footer style="text-align: center;">2026 Ada Moreau — product of '
    "Interract Agency. All rights reserved. 🎨</footer>"
)


def make_head(title: str = "Ada Moreau") -> str:
    return (
        "<!DOCTYPE html>\n<html lang=\"en\">\n<head>\n<meta charset=\"utf-8\">\n"
        "<meta name=\"viewport\" content=\"width=device-width, initial-scale=1.0\"/>\n"
        f"<title>{title}</title>\n<style>body {{ font-family: sans-serif; margin: 0; }}"
        " .project { padding: 2rem; }</style>\n</head>\n<body>\n"
    )


def make_sections(count: int = 8) -> str:
    return "".join(
        f'<section class="project" id="p{i}"><h2>Project {i}</h2>'
        f"<p>Case study text for project number {i}, describing the brief and result.</p></section>\n"
        for i in range(1, count + 1)
    )


def make_complete_html(sections: int = 8) -> str:
    """Well-formed document that scores 100."""
    return make_head() + make_sections(sections) + FOOTER + "\n</body>\n</html>"


def make_truncated_html(sections: int = 8) -> str:
    """Continuable document cut off mid-section (over 500 chars, no closing tags)."""
    return make_head() + make_sections(sections) + '<section class="project"><h2>Unfin'


def make_portfolio(**overrides) -> dict:
    """Factory for portfolio request payloads."""
    payload = {
        "personal_info": {
            "name": "Ada Moreau",
            "title": "Brand Designer",
            "email": "ada@example.com",
            "bio": "Designing identities for independent studios.",
            "skills": ["Branding", "Typography"],
        },
        "projects": [
            {
                "project_id": "lumen",
                "title": "Lumen Coffee",
                "subtitle": "Roastery identity",
                "category": "branding",
                "overview": "Identity system for a specialty roaster.",
                "tags": ["identity", "packaging"],
                "final_images": [{"url": "https://res.cloudinary.com/demo/lumen-1.jpg"}],
                "process_images": [{"url": "https://res.cloudinary.com/demo/lumen-sketch.jpg"}],
            }
        ],
        "style_preferences": {"color_scheme": "warm", "mood": "creative"},
    }
    payload.update(overrides)
    return payload


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _clean_state():
    """Empty the drafts table and circuit breakers before each test."""
    db = SessionLocal()
    try:
        db.query(Draft).delete()
        db.commit()
    finally:
        db.close()
    reset_all()
    yield


@pytest.fixture()
def db():
    """Per-test database session."""
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture()
def generator() -> ScriptedGenerator:
    return ScriptedGenerator()


@pytest.fixture()
def client(generator):
    """TestClient whose generation routes are driven by the ``generator`` fixture."""
    orchestrator = make_orchestrator(generator)
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    model_call_budget.reset()  # Reset the budget so tests don't hit 429
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
