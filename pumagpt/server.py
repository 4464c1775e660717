"""PumaGPT HTTP service: answers questions about the site's articles as a plain-text stream."""

import logging
from collections.abc import Callable
from typing import Any, Dict, Generator, List, Optional

from flask import Flask, Response, jsonify, request, stream_with_context
from flask_cors import CORS

from .backends import call_chat_completion, check_openai_health
from .config import ServerConfig
from .logging_utils import configure_logging
from .prompts import answer_messages
from .rag.config import RAGConfig
from .rag.context import render_context, select_articles, word_budget
from .rag.retrieval import QueryPlanner
from .rag.vectorstore import QdrantCollection
from .streaming import StreamTranscript, iter_content_deltas


def parse_messages(data: Any) -> Optional[List[str]]:
    """Turn a request body into conversation turns.

    Accepts ``{"messages": [str, ...]}`` or, as a one-turn conversation,
    ``{"query": str}``. Returns None for anything else.
    """
    if not isinstance(data, dict):
        return None

    if "messages" in data:
        messages = data["messages"]
        if not isinstance(messages, list) or not messages:
            return None
        if any(not isinstance(message, str) for message in messages):
            return None
        return messages

    query = data.get("query")
    if isinstance(query, str) and query.strip():
        return [query]

    return None


class PumaServer:
    """Flask server that retrieves articles for a conversation and streams the answer."""

    def __init__(
        self,
        config: ServerConfig,
        rag_config: Optional[RAGConfig] = None,
        name: str = "PumaGPT",
        planner: Optional[QueryPlanner] = None,
        store: Optional[QdrantCollection] = None,
        generate: Optional[Callable[[List[Dict]], Any]] = None,
        verbose: bool = False,
    ):
        """Initialize the server.

        Args:
            config: ServerConfig instance
            rag_config: RAG configuration (defaults to RAGConfig())
            name: Display name for the server
            planner: Query planner (defaults to a QueryPlanner over the collection)
            store: Collection client (defaults to QdrantCollection)
            generate: Opens the streamed answer for a message list and returns a
                response with ``iter_content()`` and ``close()``
            verbose: Log at DEBUG instead of INFO on the console
        """
        self.name = name
        self.config = config
        self.rag_config = rag_config or RAGConfig()
        self.store = store or QdrantCollection(config, self.rag_config)
        self.planner = planner or QueryPlanner(config, self.rag_config, store=self.store)
        self.generate = generate or (
            lambda messages: call_chat_completion(messages, config, temperature=0, stream=True)
        )

        # Create Flask app
        self.app = Flask(name.lower())
        CORS(self.app)

        self.logger = logging.getLogger(__name__)
        configure_logging(config, verbose=verbose)

        # Register routes
        self._register_routes()

    def _register_routes(self):
        """Register Flask routes."""
        self.app.route("/health", methods=["GET"])(self.health)
        self.app.route("/api/bot", methods=["POST"])(self.bot)
        self.app.register_error_handler(405, self.method_not_allowed)

    def check_backend_health(self) -> bool:
        """Check that the model provider and the collection are reachable.

        Returns:
            True if both are healthy, False otherwise
        """
        healthy = True
        for is_healthy, message in (check_openai_health(self.config), self.store.check_health()):
            print(f"✓ {message}" if is_healthy else f"✗ {message}")
            healthy = healthy and is_healthy
        return healthy

    def health(self):
        """Health check endpoint."""
        return jsonify(
            {"status": "healthy", "model": self.config.CHAT_MODEL, "collection": self.rag_config.collection_name}
        )

    def method_not_allowed(self, error):
        return Response("Method Not Allowed", status=405, mimetype="text/plain")

    def bot(self):
        """Answer a conversation with a plain-text stream of the generated reply."""
        messages = parse_messages(request.get_json(force=True, silent=True))
        if messages is None:
            return Response("Bad request", status=400, mimetype="text/plain")

        try:
            plan = self.planner.plan(messages)

            candidates = [result.article for result in plan.results]
            articles = select_articles(plan.results, word_budget(len(messages), self.rag_config))
            context = render_context(articles)

            upstream = self.generate(
                answer_messages(messages, context, self.rag_config.publication_name, self.rag_config.subject_name)
            )
        except Exception as e:
            self.logger.exception("[SERVER] Failed to prepare answer")
            return jsonify({"error": str(e)}), 500

        def stream() -> Generator[str, None, None]:
            transcript = StreamTranscript()
            try:
                for delta in iter_content_deltas(upstream.iter_content(chunk_size=None), transcript=transcript):
                    if delta:
                        yield delta
            finally:
                upstream.close()

            self.logger.info(f"[SERVER] Messages: {messages}")
            self.logger.info(f"[SERVER] Response: {transcript.text}")
            self.logger.info(f"[SERVER] Predicted response: {plan.predicted_answer}")
            self.logger.info(f"[SERVER] Unfiltered articles: {[article.title for article in candidates]}")
            self.logger.info(f"[SERVER] Articles: {[article.title for article in articles]}")

        return Response(
            stream_with_context(stream()),
            content_type="text/plain; charset=utf-8",
            headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
        )

    def run(self, port: Optional[int] = None, host: Optional[str] = None, debug: bool = False, health_check: bool = True):
        """Run the Flask server.

        Args:
            port: Port to run on (defaults to config.DEFAULT_PORT)
            host: Host to bind to (defaults to config.DEFAULT_HOST, which is 127.0.0.1)
            debug: Enable debug mode
            health_check: Check the model provider and collection before starting
        """
        port = port or self.config.DEFAULT_PORT
        host = host or self.config.DEFAULT_HOST

        print(
            f"""
╭────────────────────────────────────╮
│  {self.name} - Article Q&A Service      │
╰────────────────────────────────────╯

Model: {self.config.CHAT_MODEL}
Collection: {self.rag_config.collection_name}
Site: {self.rag_config.base_url}
Host: {host}
Port: {port}
API: http://localhost:{port}/api/bot
"""
        )

        if host == "0.0.0.0":
            print("⚠️  WARNING: Server is binding to 0.0.0.0 (all network interfaces)")
            print("   For security, use HOST=127.0.0.1 (localhost only) unless you need network access.\n")

        if health_check:
            print("Checking backend health...")
            if not self.check_backend_health():
                print("\n⚠️  Warning: Backend health check failed!")
                print("The server will start anyway, but requests may fail.\n")

        self.app.run(host=host, port=port, debug=debug)
