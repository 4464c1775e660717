"""Context assembly: pick retrieved articles under a word budget and render them."""

import logging

from .config import RAGConfig
from .models import Article, SearchResult

logger = logging.getLogger(__name__)


def count_words(text: str) -> int:
    """Whitespace-separated word count."""
    return len(text.split())


def word_budget(turn_count: int, config: RAGConfig) -> int:
    """Context word budget: larger for a fresh question, smaller once there is history."""
    if turn_count == 1:
        return config.single_turn_word_budget
    return config.multi_turn_word_budget


def select_articles(results: list[SearchResult], budget: int) -> list[Article]:
    """Greedily take results in rank order while they fit in the budget.

    Selection stops at the first article that would overflow the budget; lower
    ranked articles are not considered even if they are shorter.

    Args:
        results: Search results ranked by descending score
        budget: Maximum total content words

    Returns:
        Selected articles in rank order
    """
    selected: list[Article] = []
    words = 0

    for result in results:
        article = result.article
        article_words = count_words(article.content)

        if words + article_words > budget:
            logger.debug(
                f"[RAG] Stopping at {article.title!r}: {words} + {article_words} words exceeds budget of {budget}"
            )
            break

        words += article_words
        selected.append(article)

    return selected


def render_article(article: Article) -> str:
    parts = [article.title]
    if article.date_string != "":
        parts.append(f"Featured on {article.date_string}")
    parts.extend([article.credits, article.content])
    return "\n\n".join(parts)


def render_context(articles: list[Article]) -> str:
    """Render articles as blank-line separated blocks: title, optional date, credits, content."""
    return "\n\n".join(render_article(article) for article in articles)
