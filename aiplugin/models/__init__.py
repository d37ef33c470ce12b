"""
Provider dialects.

This package collects the dialect base class and registry in `base.py`
and one module per provider: OpenAI, Perplexity (OpenAI-compatible),
Anthropic Claude, Mistral, Qwen and Gemini. Adding a dialect involves
creating a new module that subclasses `BaseProvider` and registering it.
"""

__all__ = [
    "base",
    "openai_provider",
    "perplexity_provider",
    "anthropic_provider",
    "mistral_provider",
    "qwen_provider",
    "gemini_provider",
]
