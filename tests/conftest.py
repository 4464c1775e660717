"""Shared pytest fixtures for PumaGPT tests."""

import logging
from unittest.mock import Mock

import pytest
import requests

from pumagpt.config import ServerConfig
from pumagpt.rag.config import RAGConfig

SITE = "https://www.example.org"


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests without network access")


def make_response(body: str = "", status_code: int = 200, content_type: str = "text/html; charset=utf-8", json_data=None):
    """Build a Mock that behaves like a requests.Response."""
    response = Mock()
    response.status_code = status_code
    response.content = body.encode("utf-8")
    response.text = body
    response.headers = {"content-type": content_type}
    response.json.return_value = json_data
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status_code} Error", response=response)
    else:
        response.raise_for_status.return_value = None
    return response


def fake_site(pages: dict[str, str]):
    """requests.get replacement serving pages by URL; unknown URLs are 404s."""

    def get(url, headers=None, timeout=None):
        if url in pages:
            return make_response(pages[url])
        return make_response("Not found", status_code=404)

    return get


@pytest.fixture(autouse=True)
def package_logger():
    """Restore the package logger after tests that configure logging."""
    logger = logging.getLogger("pumagpt")
    handlers, level = list(logger.handlers), logger.level
    yield logger
    for handler in logger.handlers:
        if handler not in handlers:
            handler.close()
    logger.handlers = handlers
    logger.setLevel(level)


@pytest.fixture
def server_config():
    """Provide a complete ServerConfig for testing."""
    return ServerConfig(
        QDRANT_URL="http://qdrant.test:6333",
        QDRANT_API_KEY="qdrant-key",
        OPENAI_SECRET_KEY="sk-test",
        CONTACT_EMAIL="editor@example.org",
        OPENAI_BASE_URL="http://openai.test/v1",
    )


@pytest.fixture
def rag_config():
    """Provide a RAGConfig pointed at the fixture site, without progress bars."""
    return RAGConfig(base_url=SITE, show_progress=False)


@pytest.fixture
def article_html():
    """A Squarespace-style article page."""
    return """
    <html><body>
      <header><a href="/">Home</a><a href="/blog">Blog</a></header>
      <h1 data-content-field="title">Robotics Team Heads to State</h1>
      <div class="sqs-block-content">
        <p><strong>By Jane Doe</strong></p>
        <p>   </p>
        <p>Photo: Sam Lee</p>
        <p>The team won the regional final on Saturday.</p>
        <p>  Next stop is the state championship.  </p>
        <div><p>Nested paragraphs are not article text.</p></div>
      </div>
      <div class="sidebar"><p>Subscribe to our newsletter</p></div>
      <div class="sqs-block-content"><p>Made with Squarespace</p></div>
    </body></html>
    """


@pytest.fixture
def two_article_site():
    """Home page linking to two article pages."""
    return {
        SITE: f"""
        <html><body>
          <article><a href="/blog/robotics-team-state">Robotics</a><time> March 3, 2023 </time></article>
          <article><a href="{SITE}/blog/new-principal-named">Principal</a><time>April 4, 2023</time></article>
        </body></html>
        """,
        f"{SITE}/blog/robotics-team-state": """
        <html><body>
          <h1 data-content-field="title">Robotics Team Heads to State</h1>
          <div class="sqs-block-content"><p><strong>By Jane Doe</strong></p><p>They won.</p></div>
          <a href="/">Home</a>
        </body></html>
        """,
        f"{SITE}/blog/new-principal-named": """
        <html><body>
          <h1 data-content-field="title">New Principal Named</h1>
          <div class="sqs-block-content"><p><strong>By Ann Cho</strong></p><p>Welcome aboard.</p></div>
          <a href="/blog/robotics-team-state">Related</a>
        </body></html>
        """,
    }
