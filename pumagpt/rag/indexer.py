"""Offline ingestion: crawl the site, extract articles, embed and upload them.

The run is strictly sequential (one fetch, one embedding, one upsert at a
time) and has no checkpoint: any failure aborts it and a rerun starts over.
"""

import logging
import sys
from collections.abc import Callable

from tqdm import tqdm

from ..backends import get_embedding
from ..config import ServerConfig
from .config import RAGConfig
from .crawler import SiteCrawler
from .extractor import extract_article
from .models import Article, Point
from .vectorstore import QdrantCollection

logger = logging.getLogger(__name__)


class ArticleIndexer:
    """Builds the article collection from a crawl of the site."""

    def __init__(
        self,
        server_config: ServerConfig,
        rag_config: RAGConfig,
        crawler: SiteCrawler | None = None,
        store: QdrantCollection | None = None,
        embed: Callable[[str], list[float]] | None = None,
    ):
        """Initialize the indexer.

        Args:
            server_config: Service configuration (secrets, endpoints)
            rag_config: Crawl and collection configuration
            crawler: Crawler to use (defaults to a SiteCrawler for rag_config.base_url)
            store: Collection client (defaults to QdrantCollection)
            embed: Text embedding function (defaults to the configured embedding API)
        """
        self.server_config = server_config
        self.config = rag_config
        self.crawler = crawler or SiteCrawler(rag_config, contact_email=server_config.CONTACT_EMAIL)
        self.store = store or QdrantCollection(server_config, rag_config)
        self.embed = embed or (lambda text: get_embedding(text, server_config))

    def crawl_and_index(self, starting_url: str | None = None) -> list[Article]:
        """Crawl, extract, embed and upsert every discovered article.

        Point ids follow discovery order starting at 0, so they are only unique
        within this run.

        Args:
            starting_url: Crawl start (defaults to config.base_url)

        Returns:
            The uploaded articles, in id order
        """
        self.store.ensure_collection()

        discovered = self.crawler.traverse(starting_url)
        logger.info(f"[INDEXER] Article URLs: {[article.url for article in discovered]}")
        logger.info(f"[INDEXER] Article count: {len(discovered)}")

        uploaded: list[Article] = []
        pbar = tqdm(
            discovered,
            desc="Uploading articles",
            unit="article",
            disable=not self.crawler.show_progress,
            file=sys.stderr,
        )
        for article_id, found in enumerate(pbar):
            html, _ = self.crawler.fetch_page(found.url)
            fields = extract_article(html, self.config)
            article = Article.from_fields(article_id, fields, found.date_string)

            vector = self.embed(fields.embedding_text())
            self.store.upsert([Point(id=article.id, vector=vector, payload=article.to_payload())])

            logger.info(f"[INDEXER] Uploaded {article.title!r} (id={article.id})")
            uploaded.append(article)

        logger.info(f"[INDEXER] Uploaded {len(uploaded)} articles")
        return uploaded

    def count(self) -> int:
        """Exact number of points currently in the collection."""
        total = self.store.count()
        logger.info(f"[INDEXER] {total} points in collection {self.config.collection_name}")
        return total
