"""Hypothetical-document retrieval.

A short question embeds poorly next to full articles, so the planner first
asks the model for a made-up excerpt answering the question and searches with
that excerpt's embedding instead.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from ..backends import complete_text, get_embedding
from ..config import ServerConfig
from ..prompts import hyde_messages, is_single_turn
from .config import RAGConfig
from .models import SearchResult
from .vectorstore import QdrantCollection

logger = logging.getLogger(__name__)


@dataclass
class RetrievalPlan:
    """Outcome of planning one query: the hypothetical excerpt and the ranked hits."""

    predicted_answer: str
    results: list[SearchResult] = field(default_factory=list)


class QueryPlanner:
    """Generate a hypothetical answer, embed it and search the article collection."""

    def __init__(
        self,
        server_config: ServerConfig,
        rag_config: RAGConfig,
        store: QdrantCollection | None = None,
        complete: Callable[..., str] | None = None,
        embed: Callable[[str], list[float]] | None = None,
    ):
        self.server_config = server_config
        self.config = rag_config
        self.store = store or QdrantCollection(server_config, rag_config)
        self.complete = complete or (lambda messages, **kwargs: complete_text(messages, server_config, **kwargs))
        self.embed = embed or (lambda text: get_embedding(text, server_config))

    def max_tokens_for(self, messages: list[str]) -> int:
        if is_single_turn(messages):
            return self.config.hyde_single_turn_max_tokens
        return self.config.hyde_multi_turn_max_tokens

    def predict_answer(self, messages: list[str]) -> str:
        """Deterministic (temperature 0) made-up article excerpt for the last user turn."""
        return self.complete(
            hyde_messages(messages, self.config.publication_name),
            temperature=0,
            max_tokens=self.max_tokens_for(messages),
        )

    def plan(self, messages: list[str]) -> RetrievalPlan:
        """Retrieve the articles nearest to a hypothetical answer.

        Each step waits for the previous one; failures from the model or the
        vector store propagate.

        Args:
            messages: Conversation turns, starting with the user's opening message

        Returns:
            RetrievalPlan with the predicted answer and ranked search results
        """
        predicted_answer = self.predict_answer(messages)
        logger.debug(f"[RAG] Predicted answer: {predicted_answer}")

        embedding = self.embed(predicted_answer)
        results = self.store.search(embedding, limit=self.config.search_limit)
        logger.debug(f"[RAG] Retrieved {len(results)} candidates: {[r.payload.get('title') for r in results]}")

        return RetrievalPlan(predicted_answer=predicted_answer, results=results)
