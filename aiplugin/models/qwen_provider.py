"""
Qwen dialect.

Qwen lists unwrapped function schemas under `apis` instead of `tools`.
"""

from aiplugin.models.base import BaseProvider


class QwenProvider(BaseProvider):
    """
    QwenProvider renames the tool list to `apis`.
    """

    tools_key = "apis"
