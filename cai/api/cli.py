"""
Command-line entrypoint for cai.

Architectural role:
- Parses arguments into a model specifier, execution options and prompt.
- Delegates dispatch to `cai.api.console` (single prompt or broadcast).

Interface responsibilities:
- `cai [options] <prompt...>` uses the first provider with a configured key.
- Provider commands (`openai <model> <prompt...>`, ...) pick a model alias.
- Shortcut, media, broadcast and language-context commands preset a model.

Request lifecycle (per invocation):
1. Load `.env` into the process environment.
2. Move the command token (if any) to the front; default to `ask`.
3. Parse arguments; read stdin when it is not a terminal.
4. Load the configuration map once.
5. Run the command and return its exit status.

Input validation behavior:
- No arguments on an interactive terminal prints help (exit 2).
- An invalid `--json-schema` value is an argparse usage error (exit 2).
- An empty prompt is reported after credential resolution.

Error handling strategy:
- Pipeline failures are printed by `console` and map to exit status 1.
- Keyboard interrupts exit with status 130 without a traceback.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Sequence

from dotenv import load_dotenv

from cai import __version__
from cai.api.console import broadcast, submit_prompt
from cai.core.errors import CaiError
from cai.core.types import ExecutionOptions, ModelSpecifier, Provider
from cai.llm.aliases import format_aliases
from cai.llm.provider_config import load_config
from cai.llm.service import (
    LANGUAGE_CONTEXT_MODEL,
    LANGUAGE_CONTEXTS,
    OCR_MODEL,
    build_ocr_request,
    prompt_with_lang_context,
)


# =========================================================
# COMMAND TABLES
# =========================================================

DEFAULT_COMMAND = "ask"

# Commands taking a model alias followed by the prompt.
PROVIDER_COMMANDS = {
    "anthropic": (Provider.ANTHROPIC, ["an"]),
    "cerebras": (Provider.CEREBRAS, ["ce"]),
    "deepseek": (Provider.DEEPSEEK, ["de"]),
    "google": (Provider.GOOGLE, ["gemini"]),
    "groq": (Provider.GROQ, ["gr"]),
    "openai": (Provider.OPENAI, ["op"]),
    "ollama": (Provider.OLLAMA, ["ol"]),
    "xai": (Provider.XAI, []),
    "perplexity": (Provider.PERPLEXITY, ["pe"]),
}

SHORTCUTS = {
    "ll": (ModelSpecifier(Provider.GROQ, "llama"), "Groq Llama 3.1 8B shortcut"),
    "mi": (ModelSpecifier(Provider.GROQ, "mixtral"), "Groq Mixtral shortcut"),
    "gp": (ModelSpecifier(Provider.OPENAI, "gpt-4o"), "OpenAI GPT-4o shortcut"),
    "gm": (ModelSpecifier(Provider.OPENAI, "gpt-4o-mini"), "OpenAI GPT-4o mini shortcut"),
    "cl": (ModelSpecifier(Provider.ANTHROPIC, "opus"), "Claude Opus shortcut"),
    "so": (ModelSpecifier(Provider.ANTHROPIC, "sonnet"), "Claude Sonnet shortcut"),
    "ha": (ModelSpecifier(Provider.ANTHROPIC, "haiku"), "Claude Haiku shortcut"),
    "grok": (ModelSpecifier(Provider.XAI, "grok"), "xAI Grok shortcut"),
    "son": (ModelSpecifier(Provider.PERPLEXITY, "sonar"), "Perplexity Sonar shortcut"),
}

# Media commands with a preset OpenAI model; the command name is the context.
MEDIA_COMMANDS = {
    "image": (ModelSpecifier(Provider.OPENAI, "image"), "Generate an image with OpenAI"),
    "say": (ModelSpecifier(Provider.OPENAI, "tts"), "Convert text to speech with OpenAI"),
}

OPTIONS_WITH_VALUE = frozenset({"--json-schema"})

TOP_LEVEL_FLAGS = frozenset({"-h", "--help", "--version"})


def command_names() -> set[str]:
    names = {DEFAULT_COMMAND, "llamafile", "lf", "all", "transcribe", "ocr"}
    names.update(SHORTCUTS, MEDIA_COMMANDS, LANGUAGE_CONTEXTS)
    for name, (_, aliases) in PROVIDER_COMMANDS.items():
        names.add(name)
        names.update(aliases)
    return names


# =========================================================
# PARSER
# =========================================================

def _common_options() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("-r", "--raw", action="store_true",
                        help="Print only the response (no metadata)")
    common.add_argument("-j", "--json", action="store_true",
                        help="Request a JSON object response")
    common.add_argument("--json-schema", metavar="SCHEMA", default=None,
                        help="JSON schema of the expected output (inline JSON or path)")
    common.add_argument("-v", "--verbose", action="store_true",
                        help="Log request details to stderr")
    return common


def build_parser() -> argparse.ArgumentParser:
    common = _common_options()
    parser = argparse.ArgumentParser(
        prog="cai",
        description="The fastest CLI tool for prompting LLMs",
    )
    parser.add_argument("--version", action="version", version=f"cai {__version__}")
    subparsers = parser.add_subparsers(dest="command", metavar="<command>")

    def add(name, help_text, mode, aliases=(), description=None, **defaults):
        sub = subparsers.add_parser(
            name,
            aliases=list(aliases),
            parents=[common],
            help=help_text,
            description=description or help_text,
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )
        sub.set_defaults(mode=mode, context=name, **defaults)
        return sub

    add(DEFAULT_COMMAND, "Use the first provider with an API key (default)",
        "prompt", specifier=None).add_argument("prompt", nargs="*")

    for name, (provider, aliases) in PROVIDER_COMMANDS.items():
        sub = add(
            name, str(provider), "provider", aliases,
            description=f"{provider}\n\nFollowing aliases are available:\n"
                        f"{format_aliases(provider)}",
            provider=provider,
        )
        sub.add_argument("model", help="Model alias or full model id")
        sub.add_argument("prompt", nargs="*")

    add("llamafile", "Llamafile server hosted at http://localhost:8080", "prompt",
        ["lf"], specifier=ModelSpecifier(Provider.LLAMAFILE)).add_argument("prompt", nargs="*")

    for name, (specifier, help_text) in {**SHORTCUTS, **MEDIA_COMMANDS}.items():
        add(name, help_text, "prompt", specifier=specifier).add_argument("prompt", nargs="*")

    add("all", "Send the prompt to every provider's default model simultaneously",
        "all").add_argument("prompt", nargs="*")

    add("transcribe", "Transcribe an audio file with OpenAI",
        "transcribe").add_argument("file", help="Audio file to transcribe")
    add("ocr", "Extract text from an image with OpenAI",
        "ocr").add_argument("file", help="Image file to extract text from")

    for name, language in LANGUAGE_CONTEXTS.items():
        add(name, f"Use {language} development as the prompt context",
            "language", language=language).add_argument("prompt", nargs="*")

    return parser


def normalize_argv(argv: Sequence[str]) -> list[str]:
    """Move the command token to the front, or prepend the default command.

    Options may appear before the command (`cai -r openai 4o hi`); they are
    defined on every subcommand, so only the command position matters.
    """
    argv = list(argv)
    if argv and argv[0] in TOP_LEVEL_FLAGS:
        return argv

    names = command_names()
    skip_value = False
    for index, token in enumerate(argv):
        if skip_value:
            skip_value = False
            continue
        if token in OPTIONS_WITH_VALUE:
            skip_value = True
            continue
        if token.startswith("-"):
            continue
        if token in names:
            return [token] + argv[:index] + argv[index + 1:]
        break

    return [DEFAULT_COMMAND] + argv


# =========================================================
# INPUT ASSEMBLY
# =========================================================

def load_json_schema(value: str | None) -> dict[str, Any] | None:
    """Parse `--json-schema` as inline JSON, or else as a path to a JSON file.

    Raises:
        ValueError: Neither inline JSON nor a readable JSON file, or the
            result is not a JSON object.
    """
    if value is None:
        return None
    try:
        schema = json.loads(value)
    except ValueError:
        try:
            text = Path(value).read_text(encoding="utf-8")
        except OSError as err:
            raise ValueError(f"not JSON and not a readable file ({err.strerror or err})") from err
        schema = json.loads(text)
    if not isinstance(schema, dict):
        raise ValueError("schema must be a JSON object")
    return schema


def read_stdin() -> str:
    if sys.stdin is None or sys.stdin.isatty():
        return ""
    return sys.stdin.read().strip()


def assemble_prompt(words: Sequence[str], stdin_text: str = "") -> str:
    return "\n".join(part for part in (stdin_text, " ".join(words)) if part)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _reconfigure_stdout() -> None:
    """Best-effort UTF-8 console output; the header line contains an emoji."""
    if hasattr(sys.stdout, "reconfigure"):
        try:
            sys.stdout.reconfigure(encoding="utf-8", errors="replace")
        except (ValueError, OSError):
            pass


# =========================================================
# DISPATCH
# =========================================================

async def run_command(
    args: argparse.Namespace,
    options: ExecutionOptions,
    config: dict[str, str],
    stdin_text: str = "",
) -> int:
    """Execute a parsed command and return its exit status."""
    if args.mode == "transcribe":
        specifier = ModelSpecifier(Provider.OPENAI, "transcribe")
        return await submit_prompt(specifier, options, args.file, config)

    if args.mode == "ocr":
        prompt = build_ocr_request(args.file, OCR_MODEL)
        return await submit_prompt(ModelSpecifier(Provider.OPENAI, OCR_MODEL), options, prompt, config)

    user_prompt = assemble_prompt(args.prompt, stdin_text)

    if args.mode == "all":
        return await broadcast(user_prompt, options, config)

    if args.mode == "language":
        prompt = prompt_with_lang_context(args.language, [user_prompt]) if user_prompt else ""
        return await submit_prompt(LANGUAGE_CONTEXT_MODEL, options, prompt, config)

    if args.mode == "provider":
        specifier = ModelSpecifier(args.provider, args.model)
    else:
        specifier = args.specifier

    return await submit_prompt(specifier, options, user_prompt, config)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the CLI and return the process exit status."""
    load_dotenv()
    _reconfigure_stdout()

    argv = sys.argv[1:] if argv is None else list(argv)
    parser = build_parser()
    stdin_text = read_stdin()

    if not argv and not stdin_text:
        parser.print_help()
        return 2

    args = parser.parse_args(normalize_argv(argv))
    configure_logging(args.verbose)

    try:
        schema = load_json_schema(args.json_schema)
    except (ValueError, OSError) as err:
        parser.error(f"invalid --json-schema: {err}")

    options = ExecutionOptions(
        is_raw=args.raw,
        is_json=args.json,
        json_schema=schema,
        subcommand=args.context,
    )
    config = load_config()

    try:
        return asyncio.run(run_command(args, options, config, stdin_text))
    except CaiError as err:
        print(f"ERROR:\n{err}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
