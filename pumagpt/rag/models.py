"""Records passed between the crawler, indexer, vector store and query path."""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class DiscoveredArticle:
    """An article link found during traversal, in discovery order."""

    url: str
    date_string: str = ""


@dataclass
class ArticleFields:
    """Fields parsed from one article page."""

    title: str = ""
    credits: str = ""
    content: str = ""

    def embedding_text(self) -> str:
        """Text embedded for the article: title, byline and body separated by blank lines."""
        return f"{self.title}\n\n{self.credits}\n\n{self.content}"


@dataclass
class Article:
    """An indexed article.

    ``id`` follows crawl order within one ingestion run and is not a stable
    per-article identity across runs.
    """

    id: int
    title: str
    credits: str
    date_string: str
    content: str

    @classmethod
    def from_fields(cls, article_id: int, fields: ArticleFields, date_string: str) -> "Article":
        return cls(
            id=article_id,
            title=fields.title,
            credits=fields.credits,
            date_string=date_string,
            content=fields.content,
        )

    @classmethod
    def from_payload(cls, article_id: int, payload: dict[str, Any]) -> "Article":
        """Rebuild an article from a vector-store payload, tolerating missing keys."""
        return cls(
            id=article_id,
            title=str(payload.get("title") or ""),
            credits=str(payload.get("credits") or ""),
            date_string=str(payload.get("dateString") or ""),
            content=str(payload.get("content") or ""),
        )

    def to_payload(self) -> dict[str, Any]:
        """Payload stored next to the vector (camelCase keys match existing collections)."""
        return {
            "title": self.title,
            "credits": self.credits,
            "dateString": self.date_string,
            "content": self.content,
        }


@dataclass
class Point:
    """A vector-store point: id, embedding and payload."""

    id: int
    vector: list[float]
    payload: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "vector": self.vector, "payload": self.payload}


@dataclass
class SearchResult:
    """One nearest-neighbor hit; results arrive ranked by descending score."""

    id: int | str
    score: float
    payload: dict[str, Any] = field(default_factory=dict)

    @property
    def article(self) -> Article:
        return Article.from_payload(self.id, self.payload)
