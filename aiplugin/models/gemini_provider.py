"""
Gemini dialect.

Gemini lists unwrapped function schemas under `functions`. System
messages stay inline.
"""

from aiplugin.models.base import BaseProvider


class GeminiProvider(BaseProvider):
    """
    GeminiProvider renames the tool list to `functions`.
    """

    tools_key = "functions"
