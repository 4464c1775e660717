"""RAG configuration dataclass."""

from dataclasses import dataclass


@dataclass
class RAGConfig:
    """Configuration for crawling, indexing and retrieving site articles.

    Attributes:
        base_url: Starting URL for crawling (e.g., "https://www.thepumaprensa.org")
        publication_name: How prompts refer to the site's articles
        subject_name: What the answering model should sound knowledgeable about

        # Vector store settings
        collection_name: Qdrant collection holding one point per article
        vector_size: Embedding dimension (1536 for text-embedding-ada-002)

        # Crawling settings
        section_marker: Path segment that directly precedes article slugs (".../blog/<slug>")
        date_container_tag: Enclosing element searched for an article link's date
        date_tag: Date-bearing element inside the container
        request_timeout: HTTP request timeout in seconds
        show_progress: Show progress bars during crawling and uploading

        # Extraction settings
        title_selector: CSS selector for the article title
        credits_selector: CSS selector for the byline
        paragraph_selector: CSS selector for content paragraphs
        photo_credit_marker: Paragraphs containing this are photo captions and dropped
        footer_text: Platform footer paragraph that is dropped

        # Search settings
        search_limit: Number of nearest articles retrieved per query (default: 5)
        single_turn_word_budget: Context word budget for a one-message conversation
        multi_turn_word_budget: Context word budget once the conversation has history
        hyde_single_turn_max_tokens: Token cap for the hypothetical excerpt, one message
        hyde_multi_turn_max_tokens: Token cap for the hypothetical excerpt, longer conversations
    """

    # Core settings
    base_url: str = "https://www.thepumaprensa.org"
    publication_name: str = 'Maria Carrillo High\'s school newspaper "The Puma Prensa"'
    subject_name: str = "Maria Carrillo High"

    # Vector store settings
    collection_name: str = "pumagpt"
    vector_size: int = 1536

    # Crawling settings
    section_marker: str = "blog"
    date_container_tag: str = "article"
    date_tag: str = "time"
    request_timeout: float = 10.0
    show_progress: bool = True

    # Extraction settings (Squarespace markup)
    title_selector: str = 'h1[data-content-field="title"]'
    credits_selector: str = "strong"
    paragraph_selector: str = ".sqs-block-content > p"
    photo_credit_marker: str = "Photo: "
    footer_text: str = "Made with Squarespace"

    # Search settings
    search_limit: int = 5
    single_turn_word_budget: int = 3000
    multi_turn_word_budget: int = 2400
    hyde_single_turn_max_tokens: int = 300
    hyde_multi_turn_max_tokens: int = 200

    def __post_init__(self):
        """Normalize base_url and validate numeric settings."""
        self.base_url = self.base_url.rstrip("/")

        if not self.base_url.startswith(("http://", "https://")):
            raise ValueError(f"base_url must be an http(s) URL, got {self.base_url!r}")

        if not self.section_marker or "/" in self.section_marker:
            raise ValueError(f"section_marker must be a single path segment, got {self.section_marker!r}")

        for name in (
            "vector_size",
            "search_limit",
            "single_turn_word_budget",
            "multi_turn_word_budget",
            "hyde_single_turn_max_tokens",
            "hyde_multi_turn_max_tokens",
        ):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")
