"""
aiplugin package root.

This package provides the plugin contract and registry, schema
derivation for LLM tool calling, provider dialects, the line-change
diff engine, concrete plugins, and configuration loading.
"""

__all__ = [
    "config",
    "core",
    "models",
    "plugins",
]
