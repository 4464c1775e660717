"""Tests for context assembly."""

import pytest

from pumagpt.rag.config import RAGConfig
from pumagpt.rag.context import count_words, render_context, select_articles, word_budget
from pumagpt.rag.models import Article, SearchResult


def result_with_words(article_id: int, words: int) -> SearchResult:
    return SearchResult(
        id=article_id,
        score=1.0 - article_id / 10,
        payload={"title": f"Article {article_id}", "credits": "", "dateString": "", "content": "word " * words},
    )


@pytest.mark.unit
class TestCountWords:
    def test_ignores_repeated_whitespace(self):
        assert count_words("  one\ttwo\n\nthree  ") == 3

    def test_empty(self):
        assert count_words("") == 0
        assert count_words(" \n ") == 0


@pytest.mark.unit
class TestSelectArticles:
    """Test greedy prefix selection under a word budget."""

    @pytest.mark.parametrize("budget", [3000, 2400])
    def test_stops_at_first_overflow(self, budget):
        results = [result_with_words(0, 1200), result_with_words(1, 900), result_with_words(2, 1000)]

        selected = select_articles(results, budget)

        assert [article.id for article in selected] == [0, 1]

    def test_does_not_skip_ahead_to_smaller_article(self):
        results = [result_with_words(0, 500), result_with_words(1, 3000), result_with_words(2, 10)]

        selected = select_articles(results, 1000)

        assert [article.id for article in selected] == [0]

    def test_exact_fit_is_accepted(self):
        results = [result_with_words(0, 1000), result_with_words(1, 2000)]

        assert [article.id for article in select_articles(results, 3000)] == [0, 1]

    def test_first_article_too_long_selects_nothing(self):
        assert select_articles([result_with_words(0, 5000)], 3000) == []

    def test_never_exceeds_budget(self):
        results = [result_with_words(i, words) for i, words in enumerate([700, 800, 900, 100, 50])]

        selected = select_articles(results, 2400)

        assert sum(count_words(article.content) for article in selected) <= 2400


@pytest.mark.unit
class TestWordBudget:
    def test_single_turn_gets_larger_budget(self):
        config = RAGConfig()

        assert word_budget(1, config) == 3000
        assert word_budget(3, config) == 2400


@pytest.mark.unit
class TestRenderContext:
    def test_renders_blocks_with_optional_date(self):
        articles = [
            Article(id=0, title="Title A", credits="By A", date_string="May 5, 2023", content="Body A"),
            Article(id=1, title="Title B", credits="By B", date_string="", content="Body B"),
        ]

        assert render_context(articles) == (
            "Title A\n\nFeatured on May 5, 2023\n\nBy A\n\nBody A\n\nTitle B\n\nBy B\n\nBody B"
        )

    def test_empty(self):
        assert render_context([]) == ""
