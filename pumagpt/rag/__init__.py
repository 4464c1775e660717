"""Article crawling, indexing and retrieval."""
