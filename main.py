from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv

from aiplugin.config import is_enabled, load_app_config, section_entry
from aiplugin.core.registry import PluginRegistry
from aiplugin.core.router import ToolCallRouter
from aiplugin.core.schema import build_function_schemas, derive_schema
from aiplugin.models.anthropic_provider import AnthropicProvider
from aiplugin.models.base import AIModel, BaseProvider, DialectRegistry, ProviderError
from aiplugin.models.gemini_provider import GeminiProvider
from aiplugin.models.mistral_provider import MistralProvider
from aiplugin.models.openai_provider import OpenAIProvider
from aiplugin.models.perplexity_provider import PerplexityProvider
from aiplugin.models.qwen_provider import QwenProvider
from aiplugin.plugins.answers import AnswerStore, PresentAnswerPlugin, RetrieveAnswerPlugin
from aiplugin.plugins.base import PluginResult
from aiplugin.plugins.files import (
    FileInfoPlugin,
    FileOperationsPlugin,
    FileWorkflowPlugin,
    ReadFilePlugin,
)
from aiplugin.plugins.utility import (
    GenerateRandomNumberPlugin,
    GetDateTimePlugin,
    StringManipulatorPlugin,
    SystemInfoPlugin,
    UrlValidatorPlugin,
)
from aiplugin.plugins.web import WebReaderPlugin, WebSearchPlugin

logger = logging.getLogger("aiplugin")

DIALECT_CLASSES = {
    AIModel.OPENAI: OpenAIProvider,
    AIModel.PERPLEXITY: PerplexityProvider,
    AIModel.CLAUDE: AnthropicProvider,
    AIModel.MISTRAL: MistralProvider,
    AIModel.QWEN: QwenProvider,
    AIModel.GEMINI: GeminiProvider,
}

PLUGIN_CLASSES = {
    "read_file": ReadFilePlugin,
    "file_operations": FileOperationsPlugin,
    "file_workflow": FileWorkflowPlugin,
    "file_info": FileInfoPlugin,
    "web_search": WebSearchPlugin,
    "web_reader": WebReaderPlugin,
    "get_date_time": GetDateTimePlugin,
    "generate_random_number": GenerateRandomNumberPlugin,
    "string_manipulator": StringManipulatorPlugin,
    "system_info": SystemInfoPlugin,
    "url_validator": UrlValidatorPlugin,
}

ANSWER_PLUGIN_CLASSES = {
    "present_answer": PresentAnswerPlugin,
    "retrieve_answer": RetrieveAnswerPlugin,
}


# --------------------------------------------------------------------------------------
# Registry builders
# --------------------------------------------------------------------------------------


def configure_logging(cfg: Dict[str, Any]) -> None:
    log_cfg = cfg.get("logging") or {}
    level = str(log_cfg.get("level", "WARNING")).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format=log_cfg.get("format", "%(asctime)s %(levelname)s %(name)s: %(message)s"),
    )


def build_dialect_registry(cfg: Dict[str, Any]) -> DialectRegistry:
    """
    Build the dialect registry from the `providers:` section.

    Without a `providers:` section every built-in dialect is available.
    Otherwise only the enabled ones are registered, so asking for a
    disabled provider fails like asking for an unknown one.
    """
    providers_cfg = cfg.get("providers") or {}
    if not providers_cfg:
        return DialectRegistry.default()

    registry = DialectRegistry()
    for model, provider_cls in DIALECT_CLASSES.items():
        if not is_enabled(cfg, "providers", model.value):
            continue
        provider: BaseProvider = provider_cls.from_config(
            model.value, section_entry(cfg, "providers", model.value)
        )
        registry.register_provider(model, provider)
    return registry


def build_plugin_registry(cfg: Dict[str, Any], store: Optional[AnswerStore] = None) -> PluginRegistry:
    """
    Build the plugin registry from the `plugins:` section.

    Plugins are registered only if they are enabled. The answer plugins
    share one `AnswerStore`, created here unless one is passed in.
    """
    store = store or AnswerStore()
    registry = PluginRegistry()

    for name, plugin_cls in PLUGIN_CLASSES.items():
        if is_enabled(cfg, "plugins", name):
            registry.register(plugin_cls.from_config(section_entry(cfg, "plugins", name)))

    for name, plugin_cls in ANSWER_PLUGIN_CLASSES.items():
        if is_enabled(cfg, "plugins", name):
            registry.register(
                plugin_cls.from_config(section_entry(cfg, "plugins", name), store=store)
            )

    return registry


# --------------------------------------------------------------------------------------
# Output helpers
# --------------------------------------------------------------------------------------


def format_result(result: PluginResult) -> str:
    return json.dumps(result.to_dict(), indent=2, default=str)


def describe_plugins(registry: PluginRegistry) -> str:
    lines: List[str] = []
    for descriptor in registry.list_capabilities():
        lines.append(f"{descriptor.name}: {descriptor.description}")
        if not descriptor.parameters:
            lines.append("  (no parameters)")
        for spec in descriptor.parameters:
            marker = " [required]" if spec.required else ""
            lines.append(f"  - {spec.key} ({spec.type.json_type}): {spec.description}{marker}")
    return "\n".join(lines)


def parse_messages(raw_messages: List[str]) -> List[Dict[str, str]]:
    """Parse `role:content` strings; a bare string is a user message."""
    messages: List[Dict[str, str]] = []
    for raw in raw_messages:
        role, sep, content = raw.partition(":")
        if sep and role in ("system", "user", "assistant"):
            messages.append({"role": role, "content": content.strip()})
        else:
            messages.append({"role": "user", "content": raw})
    return messages


# --------------------------------------------------------------------------------------
# Interactive loop
# --------------------------------------------------------------------------------------


def interactive_chat(router: ToolCallRouter) -> None:
    """
    Simple terminal loop: pick a plugin, enter its parameters as JSON,
    see the result. Ends on /exit, /quit or Ctrl+C.
    """
    print("\n[Interactive plugin session started]")
    print(describe_plugins(router.registry))
    print("Type /exit or press Ctrl+C to end the session.\n")

    while True:
        try:
            name = input("Plugin> ").strip()
            if not name:
                continue
            if name.lower() in {"/exit", "/quit"}:
                print("Bye")
                break
            if name not in router.registry:
                print("Unknown plugin")
                continue
            raw = input("Parameters (JSON, Enter for none)> ").strip()
            result = asyncio.run(router.dispatch(name, raw or None))
            print(format_result(result))
        except KeyboardInterrupt:
            print("\n[Session interrupted by user, exiting]")
            break


# --------------------------------------------------------------------------------------
# CLI
# --------------------------------------------------------------------------------------


def parse_args(argv: List[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Plugin registry, tool schema generator and dispatcher for LLM tool calling."
    )
    parser.add_argument(
        "--config",
        required=True,
        help="Path to config.yaml file.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("list", help="List registered plugins and their parameters.")

    schema_parser = subparsers.add_parser(
        "schema", help="Print the tool schema document for a provider."
    )
    schema_parser.add_argument(
        "--provider",
        required=True,
        help="Provider dialect (openai, perplexity, claude, mistral, qwen, gemini).",
    )

    call_parser = subparsers.add_parser("call", help="Invoke a plugin once.")
    call_parser.add_argument("name", help="Plugin name (case-insensitive).")
    call_parser.add_argument(
        "--params",
        default=None,
        help="Plugin parameters as a JSON object.",
    )

    request_parser = subparsers.add_parser(
        "request", help="Print a provider chat request body including all plugins as tools."
    )
    request_parser.add_argument("--provider", required=True, help="Provider dialect.")
    request_parser.add_argument("--model", required=True, help="Provider model identifier.")
    request_parser.add_argument(
        "--message",
        action="append",
        default=[],
        help="Message as 'role:content' (repeatable). Bare text is a user message.",
    )
    request_parser.add_argument("--temperature", type=float, default=None)
    request_parser.add_argument("--max-tokens", type=int, default=None)

    subparsers.add_parser("chat", help="Interactive plugin session.")

    return parser.parse_args(argv)


# --------------------------------------------------------------------------------------
# main()
# --------------------------------------------------------------------------------------


def main(argv: Optional[List[str]] = None) -> int:
    # Load environment variables from .env (if present)
    load_dotenv()

    args = parse_args(sys.argv[1:] if argv is None else argv)
    config = load_app_config(args.config)
    configure_logging(config)

    plugins = build_plugin_registry(config)
    dialects = build_dialect_registry(config)
    router = ToolCallRouter(plugins)

    if args.command == "list":
        print(describe_plugins(plugins))
        return 0

    if args.command == "schema":
        try:
            document = derive_schema(plugins.list_plugins(), args.provider, dialects)
        except ProviderError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return 2
        print(json.dumps(document, indent=2))
        return 0

    if args.command == "call":
        result = asyncio.run(router.dispatch(args.name, args.params))
        print(format_result(result))
        return 0 if result.success else 1

    if args.command == "request":
        try:
            dialect = dialects.resolve(args.provider)
        except ProviderError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return 2
        body = dialect.build_request(
            model=args.model,
            messages=parse_messages(args.message),
            tools=build_function_schemas(plugins.list_plugins()),
            temperature=args.temperature,
            max_tokens=args.max_tokens,
        )
        print(json.dumps(body, indent=2))
        return 0

    if args.command == "chat":
        interactive_chat(router)
        return 0

    # Should never reach here
    raise SystemExit(f"Unknown command: {args.command!r}")


if __name__ == "__main__":
    sys.exit(main())
