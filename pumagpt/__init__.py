"""PumaGPT - question answering over a news site's articles with hypothetical document retrieval."""

from .config import ConfigError, ServerConfig
from .rag.config import RAGConfig
from .server import PumaServer

# Optional modules available but not imported by default:
# - Indexing: from pumagpt.rag.indexer import ArticleIndexer
# - Crawling: from pumagpt.rag.crawler import SiteCrawler

__version__ = "0.1.0"
__all__ = [
    "ConfigError",
    "PumaServer",
    "RAGConfig",
    "ServerConfig",
]
