"""End-to-end ingestion tests over a fixture site."""

from unittest.mock import Mock, patch

import pytest

from pumagpt.rag.crawler import SiteCrawler
from pumagpt.rag.indexer import ArticleIndexer
from tests.conftest import fake_site


class InMemoryCollection:
    """Stands in for QdrantCollection, keeping points in a dict."""

    def __init__(self):
        self.points = {}
        self.ensured = 0

    def ensure_collection(self):
        self.ensured += 1

    def upsert(self, points):
        for point in points:
            self.points[point.id] = point

    def count(self):
        return len(self.points)


@pytest.fixture
def store():
    return InMemoryCollection()


@pytest.mark.unit
class TestArticleIndexer:
    """Test crawl, extract, embed and upsert."""

    def test_two_articles_one_listing_page(self, server_config, rag_config, two_article_site, store):
        embed = Mock(side_effect=lambda text: [float(len(text))] * 3)
        indexer = ArticleIndexer(server_config, rag_config, crawler=SiteCrawler(rag_config), store=store, embed=embed)

        with patch("pumagpt.rag.crawler.requests.get", side_effect=fake_site(two_article_site)):
            articles = indexer.crawl_and_index()

        assert [article.id for article in articles] == [0, 1]
        assert indexer.count() == 2
        assert store.ensured == 1

        first = store.points[0].payload
        assert first == {
            "title": "Robotics Team Heads to State",
            "credits": "By Jane Doe",
            "dateString": "March 3, 2023",
            "content": "They won.",
        }
        assert store.points[1].payload["title"] == "New Principal Named"
        assert store.points[1].payload["dateString"] == "April 4, 2023"

    def test_embeds_title_credits_and_content(self, server_config, rag_config, two_article_site, store):
        embed = Mock(return_value=[0.0])
        indexer = ArticleIndexer(server_config, rag_config, crawler=SiteCrawler(rag_config), store=store, embed=embed)

        with patch("pumagpt.rag.crawler.requests.get", side_effect=fake_site(two_article_site)):
            indexer.crawl_and_index()

        assert embed.call_args_list[0].args[0] == "Robotics Team Heads to State\n\nBy Jane Doe\n\nThey won."

    def test_embedding_failure_aborts_run(self, server_config, rag_config, two_article_site, store):
        embed = Mock(side_effect=[[0.0], RuntimeError("rate limited")])
        indexer = ArticleIndexer(server_config, rag_config, crawler=SiteCrawler(rag_config), store=store, embed=embed)

        with patch("pumagpt.rag.crawler.requests.get", side_effect=fake_site(two_article_site)):
            with pytest.raises(RuntimeError):
                indexer.crawl_and_index()

        assert list(store.points) == [0]

    def test_rerun_overwrites_ids(self, server_config, rag_config, two_article_site, store):
        indexer = ArticleIndexer(
            server_config, rag_config, crawler=SiteCrawler(rag_config), store=store, embed=Mock(return_value=[0.0])
        )

        with patch("pumagpt.rag.crawler.requests.get", side_effect=fake_site(two_article_site)):
            indexer.crawl_and_index()
            indexer.crawl_and_index()

        assert indexer.count() == 2
