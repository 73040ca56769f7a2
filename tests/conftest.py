"""
Pytest configuration and shared fixtures.

Every test gets a throwaway QA tree under tmp_path laid out like a real
project (tests/cypress/reports, tests/playwright/..., config/sync) and a
log directory inside tmp_path, so nothing is written to the working tree.
"""

import json
import sys
from pathlib import Path

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from qalens import logging as qlog
from qalens.config_loader import load_config
from qalens.gateway import Gateway


# =============================================================================
# SAMPLE REPORTS
# =============================================================================

CYPRESS_MOCHAWESOME = {
    "stats": {"tests": 4, "passes": 2, "failures": 1, "pending": 1},
    "results": [
        {
            "title": "",
            "tests": [],
            "suites": [
                {
                    "title": "Login",
                    "tests": [
                        {"title": "logs in", "state": "passed"},
                        {"title": "rejects bad password", "state": "failed",
                         "err": {"message": "Timed out retrying after 4000ms"}},
                    ],
                    "suites": [
                        {
                            "title": "Nested",
                            "tests": [
                                {"title": "remembers me", "state": "passed"},
                                {"title": "sso", "state": "pending"},
                            ],
                            "suites": [],
                        }
                    ],
                }
            ],
        }
    ],
}

PLAYWRIGHT_ALL_PASS = {
    "suites": [
        {
            "title": "article.spec.js",
            "specs": [
                {"title": "creates article", "tests": [{"results": [{"status": "passed"}]}]},
                {"title": "edits article", "tests": [{"results": [{"status": "passed"}]}]},
            ],
            "suites": [],
        }
    ],
}


# =============================================================================
# LOGGING ISOLATION
# =============================================================================

@pytest.fixture(autouse=True)
def isolated_log(tmp_path):
    """Point the canonical log at tmp_path for every test."""
    log_dir = tmp_path / "logs"
    qlog.configure(log_dir=log_dir, level="DEBUG")
    yield log_dir
    qlog.clear_trace_id()


# =============================================================================
# QA TREE FIXTURES
# =============================================================================

@pytest.fixture
def qa_base(tmp_path):
    """A project directory with every default category root populated."""
    base = tmp_path / "project"
    cypress = base / "tests" / "cypress" / "reports"
    results = base / "tests" / "playwright" / "test-results"
    html = base / "tests" / "playwright" / "html-reports"
    specs = base / "tests" / "playwright" / "tests"
    drupal = base / "config" / "sync"
    for d in (cypress, results, html, specs, drupal):
        d.mkdir(parents=True)

    (cypress / "results.json").write_text(json.dumps(CYPRESS_MOCHAWESOME), encoding="utf-8")
    (cypress / "timeout.log").write_text("Request timed out after 30s\n", encoding="utf-8")
    (cypress / "forbidden.log").write_text("GET /admin returned 403\n", encoding="utf-8")
    (results / "results.json").write_text(json.dumps(PLAYWRIGHT_ALL_PASS), encoding="utf-8")
    (results / "run-1").mkdir()
    (results / "run-1" / "output.txt").write_text("all good\n", encoding="utf-8")
    (html / "index.html").write_text("<html><body>report</body></html>", encoding="utf-8")
    (specs / "article.spec.js").write_text("test('article', async () => {});\n", encoding="utf-8")
    (drupal / "user.role.editor.yml").write_text(
        "id: editor\npermissions:\n  - 'administer nodes'\n  - 'publish content'\n",
        encoding="utf-8",
    )

    # Sibling of the cypress root sharing its name as a string prefix
    sibling = base / "tests" / "cypress" / "reports2"
    sibling.mkdir()
    (sibling / "secret.json").write_text('{"secret": true}', encoding="utf-8")

    return base


@pytest.fixture
def config(qa_base):
    return load_config(base_dir=qa_base)


@pytest.fixture
def gateway(config):
    return Gateway.from_config(config)


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def tool_payload(protocol_result: dict) -> dict:
    """Decode the JSON text block of a call_tool result."""
    content = protocol_result["content"]
    assert len(content) == 1
    assert content[0]["type"] == "text"
    return json.loads(content[0]["text"])
