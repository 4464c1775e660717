"""Article extraction from Squarespace article pages."""

from bs4 import BeautifulSoup

from .config import RAGConfig
from .models import ArticleFields


def _first_text(soup: BeautifulSoup, selector: str) -> str:
    element = soup.select_one(selector)
    return element.get_text() if element is not None else ""


def extract_article(html: str, config: RAGConfig | None = None) -> ArticleFields:
    """Parse an article page into title, credits and content.

    Content is the article's paragraphs with photo captions, the repeated
    byline, empty lines and the platform footer removed, joined by blank lines.
    Markup that doesn't match the selectors yields empty fields instead of
    raising.

    Args:
        html: Raw page HTML
        config: RAG configuration providing selectors and filter markers

    Returns:
        ArticleFields for the page
    """
    config = config or RAGConfig()
    soup = BeautifulSoup(html or "", "html.parser")

    title = _first_text(soup, config.title_selector)
    credits = _first_text(soup, config.credits_selector)

    paragraphs = [element.get_text().strip() for element in soup.select(config.paragraph_selector)]
    content = "\n\n".join(
        paragraph
        for paragraph in paragraphs
        if paragraph != ""
        and config.photo_credit_marker not in paragraph
        and paragraph != credits
        and paragraph != config.footer_text
    )

    return ArticleFields(title=title, credits=credits, content=content)
