"""Behaviour tests for documents with broken or missing front matter.

A header that fails to parse must not stop the build: the document is
published with default metadata, its body is kept and a warning is logged.
Scenarios live in ``features/tolerant_front_matter.feature``.
"""

from __future__ import annotations

import logging
import typing as typ
from pathlib import Path

import pytest
from bs4 import BeautifulSoup
from pytest_bdd import given, parsers, scenarios, then, when

if typ.TYPE_CHECKING:
    from octoblog.generator import BuildReport, Site

FEATURE_FILE = (
    Path(__file__).resolve().parents[2] / "features" / "tolerant_front_matter.feature"
)
scenarios(FEATURE_FILE)

ScenarioState = dict[str, typ.Any]


@pytest.fixture
def scenario_state() -> ScenarioState:
    """Return a mutable dict used to share scenario state across BDD steps."""
    return {}


@given("a blog with a post whose front matter is malformed")
def given_malformed_post(
    write_post: typ.Callable[..., Path], scenario_state: ScenarioState
) -> None:
    """Add a post whose header block is not valid YAML."""
    scenario_state["output"] = "2024/02/01/broken-post.html"
    write_post(
        "2024-02-01-broken-post.md",
        body='---\ntitle: "x\ndate: [invalid\n---\n\nStill here.\n',
    )


@given("a blog with a post that has no front matter")
def given_plain_post(
    write_post: typ.Callable[..., Path], scenario_state: ScenarioState
) -> None:
    """Add a post made only of body text."""
    scenario_state["output"] = "2024/02/02/plain.html"
    write_post("2024-02-02-plain.md", body="Just text.\n")


@when("I build the blog")
def when_build(
    scenario_state: ScenarioState,
    build_site: typ.Callable[..., tuple[Site, BuildReport]],
    caplog: pytest.LogCaptureFixture,
) -> None:
    """Build the blog while capturing warnings."""
    with caplog.at_level(logging.WARNING):
        build_site()
    scenario_state["log"] = caplog.text


@then(parsers.parse('the post is published with the title "{title}"'))
def then_published(title: str, site_root: Path, scenario_state: ScenarioState) -> None:
    """Assert the post page exists and shows the fallback title."""
    path = site_root / "_site" / scenario_state["output"]
    soup = BeautifulSoup(path.read_text(encoding="utf-8"), "html.parser")
    heading = soup.find("h1", class_="post-title")
    assert heading is not None, "expected the post layout heading"
    assert heading.get_text() == title
    scenario_state["soup"] = soup


@then(parsers.parse('the post body contains "{text}"'))
def then_body_contains(text: str, scenario_state: ScenarioState) -> None:
    """Assert the rendered body keeps the document text."""
    soup = typ.cast("BeautifulSoup", scenario_state["soup"])
    body = soup.select_one(".post-body")
    assert body is not None
    assert text in body.get_text()


@then("a front matter warning was logged")
def then_warning_logged(scenario_state: ScenarioState) -> None:
    """Assert the parser reported the malformed header."""
    assert "malformed front matter" in scenario_state["log"]
