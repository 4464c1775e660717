"""Backend communication for the OpenAI embedding and chat completion APIs."""

from typing import Dict, List, Optional, Tuple

import requests

from .config import ServerConfig


def _auth_headers(config: ServerConfig) -> Dict[str, str]:
    return {
        "Authorization": f"Bearer {config.OPENAI_SECRET_KEY}",
        "Content-Type": "application/json",
    }


def get_embedding(text: str, config: ServerConfig) -> List[float]:
    """Embed text with the configured embedding model.

    Errors from the API propagate to the caller; there is no retry.
    """
    endpoint = f"{config.openai_base_url}/embeddings"
    payload = {"input": text, "model": config.EMBEDDING_MODEL}

    response = requests.post(endpoint, json=payload, headers=_auth_headers(config), timeout=config.backend_timeout)
    response.raise_for_status()
    return response.json()["data"][0]["embedding"]


def call_chat_completion(
    messages: List[Dict],
    config: ServerConfig,
    temperature: float = 0.0,
    max_tokens: Optional[int] = None,
    stream: bool = False,
):
    """Call the chat completion API.

    With ``stream=True`` the returned response is left open so the caller can
    consume ``iter_content()``; otherwise the body is already read.
    """
    endpoint = f"{config.openai_base_url}/chat/completions"

    payload = {
        "model": config.CHAT_MODEL,
        "messages": messages,
        "temperature": temperature,
    }
    if max_tokens is not None:
        payload["max_tokens"] = max_tokens
    if stream:
        payload["stream"] = True

    response = requests.post(
        endpoint, json=payload, headers=_auth_headers(config), stream=stream, timeout=config.backend_timeout
    )
    response.raise_for_status()
    return response


def complete_text(
    messages: List[Dict], config: ServerConfig, temperature: float = 0.0, max_tokens: Optional[int] = None
) -> str:
    """Non-streaming completion returning only the first choice's message content."""
    response = call_chat_completion(messages, config, temperature=temperature, max_tokens=max_tokens)
    return response.json()["choices"][0]["message"]["content"]


def check_openai_health(config: ServerConfig, timeout: int = 5) -> Tuple[bool, str]:
    """Check if the model provider is reachable with the configured key.

    Args:
        config: ServerConfig instance
        timeout: Request timeout in seconds

    Returns:
        Tuple of (is_healthy: bool, message: str)
    """
    try:
        endpoint = f"{config.openai_base_url}/models"
        response = requests.get(endpoint, headers=_auth_headers(config), timeout=timeout)
        response.raise_for_status()

        model_ids = [model.get("id", "") for model in response.json().get("data", [])]
        missing = [model for model in (config.CHAT_MODEL, config.EMBEDDING_MODEL) if model not in model_ids]

        if missing:
            return False, f"Model provider is reachable but model(s) not available: {', '.join(missing)}"
        return True, f"Model provider is healthy. Using '{config.CHAT_MODEL}' and '{config.EMBEDDING_MODEL}'."

    except requests.Timeout:
        return False, f"Model provider health check timed out after {timeout}s."
    except requests.ConnectionError:
        return False, f"Cannot connect to model provider at {config.OPENAI_BASE_URL}."
    except Exception as e:
        return False, f"Model provider health check failed: {e!s}"
