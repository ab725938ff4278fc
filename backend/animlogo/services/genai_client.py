"""Gemini API client access using the google-genai SDK.

Clients are keyed by API key: when the user switches or re-selects a key,
the next call gets a client bound to the new credential.

Usage:
    from animlogo.services.genai_client import get_genai_client

    client = get_genai_client(api_key)
"""

import logging

from google import genai

logger = logging.getLogger(__name__)

# Per-key client cache
_clients: dict[str, genai.Client] = {}


def get_genai_client(api_key: str) -> genai.Client:
    """Get or create a Gemini API client for the given key.

    Args:
        api_key: Gemini API key selected through the credential gate.

    Returns:
        genai.Client: Configured client instance
    """
    if not api_key:
        raise ValueError("api_key is required")

    if api_key not in _clients:
        logger.debug("Creating Gemini API client")
        _clients[api_key] = genai.Client(api_key=api_key)

    return _clients[api_key]


def clear_client_cache() -> None:
    """Drop cached clients, e.g. after a credential was rejected."""
    _clients.clear()
