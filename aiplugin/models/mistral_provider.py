"""
Mistral dialect.

Mistral's tool document mimics Claude's: function schemas listed
unwrapped under `tools`. Unlike Claude, system messages stay inline.
"""

from aiplugin.models.base import BaseProvider


class MistralProvider(BaseProvider):
    """
    MistralProvider uses the base dialect unchanged.
    """
