"""
Perplexity dialect.

Perplexity exposes an OpenAI-compatible Chat Completions API, so its
tool and request shapes are the OpenAI ones.
"""

from aiplugin.models.openai_provider import OpenAIProvider


class PerplexityProvider(OpenAIProvider):
    """
    PerplexityProvider reuses the OpenAI function envelope.
    """
