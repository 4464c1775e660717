"""Tests for hypothetical-document retrieval and prompt selection."""

from unittest.mock import Mock, patch

import pytest

from pumagpt.backends import complete_text, get_embedding
from pumagpt.prompts import ANSWER_SYSTEM_PROMPT, HYDE_SYSTEM_PROMPT, answer_messages, hyde_messages
from pumagpt.rag.models import SearchResult
from pumagpt.rag.retrieval import QueryPlanner
from tests.conftest import make_response


@pytest.fixture
def store():
    store = Mock()
    store.search.return_value = [SearchResult(id=4, score=0.8, payload={"title": "Homecoming recap"})]
    return store


@pytest.mark.unit
class TestQueryPlanner:
    """Test the generate, embed, search sequence."""

    def test_embeds_predicted_answer_not_question(self, server_config, rag_config, store):
        complete = Mock(return_value="Homecoming week kicked off with a rally...")
        embed = Mock(return_value=[0.5] * 4)
        planner = QueryPlanner(server_config, rag_config, store=store, complete=complete, embed=embed)

        plan = planner.plan(["When was homecoming?"])

        embed.assert_called_once_with("Homecoming week kicked off with a rally...")
        store.search.assert_called_once_with([0.5] * 4, limit=5)
        assert plan.predicted_answer == "Homecoming week kicked off with a rally..."
        assert [r.id for r in plan.results] == [4]

    def test_single_turn_uses_larger_token_cap(self, server_config, rag_config, store):
        complete = Mock(return_value="excerpt")
        planner = QueryPlanner(server_config, rag_config, store=store, complete=complete, embed=Mock(return_value=[]))

        planner.plan(["Question?"])

        assert complete.call_args.kwargs == {"temperature": 0, "max_tokens": 300}

    def test_multi_turn_uses_smaller_token_cap(self, server_config, rag_config, store):
        complete = Mock(return_value="excerpt")
        planner = QueryPlanner(server_config, rag_config, store=store, complete=complete, embed=Mock(return_value=[]))

        planner.plan(["Question?", "Answer.", "Follow up?"])

        assert complete.call_args.kwargs == {"temperature": 0, "max_tokens": 200}

    def test_completion_failure_propagates(self, server_config, rag_config, store):
        planner = QueryPlanner(
            server_config, rag_config, store=store, complete=Mock(side_effect=RuntimeError("boom")), embed=Mock()
        )

        with pytest.raises(RuntimeError):
            planner.plan(["Question?"])
        store.search.assert_not_called()


@pytest.mark.unit
class TestPrompts:
    """Test template selection by turn count."""

    def test_hyde_single_turn(self):
        messages = hyde_messages(["Who won the game?"], "The Paper")

        assert messages[0] == {"role": "system", "content": HYDE_SYSTEM_PROMPT}
        assert "article from The Paper that would answer the following question" in messages[1]["content"]
        assert messages[1]["content"].endswith("Who won the game?")

    def test_hyde_multi_turn_includes_conversation(self):
        messages = hyde_messages(["Q1", "A1", "Q2"], "The Paper")

        assert "final question in the following" in messages[1]["content"]
        assert messages[1]["content"].endswith("Q1\n\nA1\n\nQ2")

    def test_answer_single_turn(self):
        messages = answer_messages(["Who won?"], "CONTEXT", "The Paper", "the school")

        assert [m["role"] for m in messages] == ["system", "user"]
        assert messages[0]["content"] == ANSWER_SYSTEM_PROMPT
        assert "CONTEXT" in messages[1]["content"]
        assert "respond to the following:\n\nWho won?" in messages[1]["content"]

    def test_answer_multi_turn_alternates_roles(self):
        messages = answer_messages(["Q1", "A1", "Q2", "A2", "Q3"], "CONTEXT", "The Paper", "the school")

        assert [m["role"] for m in messages] == ["system", "user", "assistant", "user", "assistant", "user"]
        assert messages[1]["content"].endswith("Here's the user's first message:\n\nQ1")
        assert [m["content"] for m in messages[2:]] == ["A1", "Q2", "A2", "Q3"]


@pytest.mark.unit
class TestBackends:
    """Test the model provider request shapes."""

    def test_get_embedding(self, server_config):
        with patch("pumagpt.backends.requests.post") as mock_post:
            mock_post.return_value = make_response(json_data={"data": [{"embedding": [0.1, 0.2]}]})

            assert get_embedding("hello", server_config) == [0.1, 0.2]

        assert mock_post.call_args.args[0] == "http://openai.test/v1/embeddings"
        assert mock_post.call_args.kwargs["json"] == {"input": "hello", "model": "text-embedding-ada-002"}
        assert mock_post.call_args.kwargs["headers"]["Authorization"] == "Bearer sk-test"

    def test_complete_text(self, server_config):
        with patch("pumagpt.backends.requests.post") as mock_post:
            mock_post.return_value = make_response(json_data={"choices": [{"message": {"content": "Hi there"}}]})

            result = complete_text([{"role": "user", "content": "hi"}], server_config, temperature=0, max_tokens=200)

        assert result == "Hi there"
        payload = mock_post.call_args.kwargs["json"]
        assert payload["max_tokens"] == 200
        assert payload["temperature"] == 0
        assert "stream" not in payload

    def test_embedding_error_propagates(self, server_config):
        import requests

        with patch("pumagpt.backends.requests.post") as mock_post:
            mock_post.return_value = make_response(status_code=429)

            with pytest.raises(requests.HTTPError):
                get_embedding("hello", server_config)
