"""
Configuration management.

Handles loading/saving the config.json file and resolving the parser
settings (context-aware mode, context separator, default deck).
"""

import json
from dataclasses import dataclass
from pathlib import Path

# Config lives next to the package
CONFIG_FILE = Path(__file__).resolve().parent.parent / "config.json"

DEFAULT_CONTEXT_SEPARATOR = " > "
DEFAULT_DECK = "Default"


@dataclass
class Settings:
    """Parser settings supplied by the caller."""
    context_aware_mode: bool = True
    context_separator: str = DEFAULT_CONTEXT_SEPARATOR
    default_deck: str = DEFAULT_DECK


def load() -> dict:
    """Load config from config.json. Returns empty dict if not found."""
    if CONFIG_FILE.exists():
        with open(CONFIG_FILE, "r", encoding="utf-8") as f:
            return json.load(f)
    return {}


def save(config: dict) -> None:
    """Save config to config.json."""
    with open(CONFIG_FILE, "w", encoding="utf-8") as f:
        json.dump(config, f, indent=2, ensure_ascii=False)


def _resolve(config: dict, key: str, cli_override, default, label: str):
    if cli_override is not None:
        config[key] = cli_override
        print(f"[config] {label} set via CLI: {cli_override!r}")
        return cli_override, True

    if key in config:
        value = config[key]
        print(f"[config] Loaded {label}: {value!r}")
        return value, False

    return default, False


def get_settings(
    context_aware: bool | None = None,
    separator: str | None = None,
    deck: str | None = None,
) -> Settings:
    """
    Resolve the parser settings.

    Priority for each value:
    1. CLI argument
    2. Saved config
    3. Built-in default

    Values given on the command line are saved to config.json for
    future runs.
    """
    config = load()

    context_aware, changed_mode = _resolve(
        config, "context_aware_mode", context_aware, True, "Context-aware mode")
    separator, changed_sep = _resolve(
        config, "context_separator", separator, DEFAULT_CONTEXT_SEPARATOR, "Context separator")
    deck, changed_deck = _resolve(
        config, "default_deck", deck, DEFAULT_DECK, "Default deck")

    if changed_mode or changed_sep or changed_deck:
        save(config)
        print(f"[config] Saved to {CONFIG_FILE}")

    return Settings(
        context_aware_mode=bool(context_aware),
        context_separator=separator,
        default_deck=deck,
    )


# ---------------------------------------------------------------------------
# Shared folder-discovery helpers
# ---------------------------------------------------------------------------

SKIP_FOLDERS = {".obsidian", ".trash", ".git", "Scripts", "Templates"}


def discover_md_files(folder: Path, recursive: bool) -> list[Path]:
    """Find markdown files in *folder*, skipping non-note directories."""
    if recursive:
        all_md = sorted(folder.rglob("*.md"))
        return [
            f for f in all_md
            if not any(part in SKIP_FOLDERS for part in f.relative_to(folder).parts)
        ]
    return sorted(folder.glob("*.md"))
