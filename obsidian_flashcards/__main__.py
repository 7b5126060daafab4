"""
CLI entry point.

Usage:
    python -m obsidian_flashcards <file>
    python -m obsidian_flashcards <folder>              (batch: .md files in folder)
    python -m obsidian_flashcards <folder> --recursive  (all subfolders too)
    python -m obsidian_flashcards <file> --json         (dump cards as JSON)
    python -m obsidian_flashcards <file> --no-context --deck Biology --tags bio,exam
"""

import argparse
import json
import sys
from contextlib import redirect_stdout
from dataclasses import asdict
from pathlib import Path

from . import __version__
from .config import Settings, discover_md_files, get_settings
from .images import find_missing
from .markup import MarkdownRenderer
from .parser import ParsedNote, parse_note


def _print_banner(mode: str, target: str, settings: Settings) -> None:
    """Print a startup banner with run configuration."""
    print()
    print("=" * 60)
    print(f"  Obsidian Flashcards v{__version__}")
    print("=" * 60)
    print(f"  Mode:          {mode}")
    print(f"  Target:        {target}")
    print(f"  Context-aware: {'YES' if settings.context_aware_mode else 'no'}")
    if settings.context_aware_mode:
        print(f"  Separator:     {settings.context_separator!r}")
    print(f"  Default deck:  {settings.default_deck}")
    print("=" * 60)
    print()


def _print_summary(note: ParsedNote, missing_media: list[str]) -> None:
    """Print a summary of what was parsed from the note."""
    known = sum(1 for card in note.flashcards if card.inserted)
    print(f"  File:     {note.file_path.name}")
    print(f"  Vault:    {note.vault_root}")
    print(f"  Deck:     {note.deck_name}")
    print(f"  Tags:     {' '.join(note.tags) or '(none)'}")
    print(f"  Cards:    {len(note.flashcards)} ({len(note.flashcards) - known} new, {known} known)")
    print(f"  Spaced:   {len(note.spaced_cards)}")
    print(f"  Orphaned: {', '.join(map(str, note.orphaned_ids)) or '(none)'}")
    print(f"  ID stubs: {len(note.id_blocks)}")
    if missing_media:
        print(f"  Missing:  {', '.join(missing_media)}")
    print()
    for i, card in enumerate(note.flashcards, 1):
        status = card.id if card.inserted else "new"
        kind = " (reverse)" if card.reversed else ""
        print(f"  Card {i} [{status}]{kind}: {card.original_question[:60]}")
    if note.flashcards:
        print()


def _note_to_dict(note: ParsedNote) -> dict:
    return {
        "file": str(note.file_path),
        "deck": note.deck_name,
        "tags": note.tags,
        "flashcards": [asdict(card) for card in note.flashcards],
        "spaced": [asdict(card) for card in note.spaced_cards],
        "orphaned_ids": note.orphaned_ids,
        "id_blocks": [asdict(block) for block in note.id_blocks],
    }


def _process(md_file: Path, settings: Settings, extra_tags: list[str], renderer: MarkdownRenderer) -> ParsedNote:
    note = parse_note(md_file, settings, extra_tags, renderer)
    media = [name for card in note.flashcards for name in card.media]
    missing = find_missing(media, note.file_path, note.vault_root) if media else []
    print("--- Parse summary ---")
    _print_summary(note, missing)
    return note


def run_single(file_path: str, settings: Settings, extra_tags: list[str], as_json: bool = False) -> None:
    """Parse a single markdown file."""
    renderer = MarkdownRenderer()

    if as_json:
        try:
            with redirect_stdout(sys.stderr):
                note = parse_note(file_path, settings, extra_tags, renderer)
        except FileNotFoundError as e:
            print(f"[error] {e}", file=sys.stderr)
            sys.exit(1)
        print(json.dumps(_note_to_dict(note), indent=2, ensure_ascii=False))
        return

    _print_banner("Single file", file_path, settings)

    try:
        _process(Path(file_path), settings, extra_tags, renderer)
    except FileNotFoundError as e:
        print(f"[error] {e}")
        sys.exit(1)

    print("=" * 60)
    print("  Parse complete!")
    print("=" * 60)


def run_batch(
    folder_path: str,
    settings: Settings,
    extra_tags: list[str],
    recursive: bool = False,
    as_json: bool = False,
) -> None:
    """Parse all markdown files in a folder (optionally recursive)."""
    folder = Path(folder_path).resolve()
    md_files = discover_md_files(folder, recursive)
    renderer = MarkdownRenderer()

    if as_json:
        notes = []
        for md_file in md_files:
            try:
                with redirect_stdout(sys.stderr):
                    note = parse_note(md_file, settings, extra_tags, renderer)
                notes.append(_note_to_dict(note))
            except Exception as e:
                print(f"[error] Failed to process {md_file.name}: {e}", file=sys.stderr)
        print(json.dumps(notes, indent=2, ensure_ascii=False))
        return

    mode = "Recursive (all subfolders)" if recursive else "Batch (folder)"
    _print_banner(mode, str(folder), settings)

    if not md_files:
        print(f"[batch] No .md files found in: {folder}")
        return

    print(f"[batch] Found {len(md_files)} file(s) to process:")
    for f in md_files:
        print(f"[batch]   - {f.relative_to(folder)}")
    print()

    success = 0
    errors = 0
    total_cards = 0

    for i, md_file in enumerate(md_files):
        print()
        print(f"{'─' * 60}")
        print(f"  File {i + 1}/{len(md_files)}: {md_file.relative_to(folder)}")
        print(f"{'─' * 60}")

        try:
            note = _process(md_file, settings, extra_tags, renderer)
            total_cards += len(note.flashcards)
            success += 1
        except Exception as e:
            print(f"[error] Failed to process {md_file.name}: {e}")
            errors += 1

    print()
    print("=" * 60)
    print(f"  Batch complete! {success} succeeded, {errors} failed")
    print(f"  Total: {total_cards} flashcard(s)")
    print("=" * 60)


def _split_tags(value: str | None) -> list[str]:
    if not value:
        return []
    return [t.strip().lstrip("#") for t in value.split(",") if t.strip().lstrip("#")]


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def main():
    parser = argparse.ArgumentParser(
        prog="obsidian_flashcards",
        description="Extract #flashcard cards from Obsidian notes",
    )
    parser.add_argument(
        "path",
        help="Path to a markdown file or folder (batch mode)",
    )
    parser.add_argument(
        "-r", "--recursive",
        action="store_true",
        help="Process all .md files in subfolders too (skips .obsidian, .trash, Scripts, Templates)",
    )
    parser.add_argument(
        "--deck",
        help="Deck used when a note has no cards-deck field (saved after first use)",
        default=None,
    )
    parser.add_argument(
        "--tags",
        help="Comma-separated tags added to every card",
        default=None,
    )
    parser.add_argument(
        "--separator",
        help="String joining context headings and the question (saved after first use)",
        default=None,
    )
    context = parser.add_mutually_exclusive_group()
    context.add_argument(
        "--context",
        dest="context_aware",
        action="store_const",
        const=True,
        default=None,
        help="Prefix questions with their ancestor headings (saved after first use)",
    )
    context.add_argument(
        "--no-context",
        dest="context_aware",
        action="store_const",
        const=False,
        help="Don't prefix questions with headings (saved after first use)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the extracted cards as JSON instead of a summary",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    args = parser.parse_args()
    target = Path(args.path)

    # Progress lines go to stderr so --json output stays parseable
    with redirect_stdout(sys.stderr if args.json else sys.stdout):
        settings = get_settings(args.context_aware, args.separator, args.deck)
    extra_tags = _split_tags(args.tags)

    if target.is_dir():
        run_batch(args.path, settings, extra_tags, recursive=args.recursive, as_json=args.json)
    elif target.is_file():
        run_single(args.path, settings, extra_tags, as_json=args.json)
    else:
        print(f"[error] '{args.path}' is not a valid file or folder.")
        sys.exit(1)


if __name__ == "__main__":
    main()
