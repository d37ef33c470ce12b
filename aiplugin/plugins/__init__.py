"""
Plugin implementations.

Plugins implement specific capabilities accessible to a model, such as
reading and patching files, presenting and retrieving answers, web
search and page reading, and small utilities. Plugins are registered
via the `PluginRegistry` and described to providers by the schema layer.
"""

__all__ = [
    "base",
    "files",
    "answers",
    "web",
    "utility",
]
