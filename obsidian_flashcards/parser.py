"""
Markdown and flashcard parsing.

Finds flashcards written inline in Obsidian notes:

    ## Biology
    What is DNA? #flashcard #genetics
    Deoxyribonucleic acid
    ^1681234567890

The question is the block ending with the #flashcard (or
#flashcard-reverse) marker, the answer is the block that follows, and an
optional ^ID stub records the Anki note the card was already sent to.

Also handles reading note files: front-matter deck and tags, the vault
root, and orphaned IDs.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from .config import Settings
from .headings import build_heading_index, heading_prefix, iter_lines, resolve_context
from .identity import ID_STUB_RE, IdBlock, find_id_blocks, get_cards_to_delete
from .images import extract_media, substitute_image_links
from .markup import MarkdownRenderer, math_to_anki

FLASHCARD_MARKER = "#flashcard"
REVERSE_MARKER = "#flashcard-reverse"
SPACED_MARKER = "#spaced"

_WORD_RE = re.compile(r'\w+')


@dataclass
class Flashcard:
    """A flashcard extracted from a note, ready to be sent to Anki."""
    id: int                  # -1 until the card has been sent to Anki
    deck_name: str
    original_question: str   # question text without context, before rendering
    fields: dict[str, str]   # {"Front": html, "Back": html}
    reversed: bool
    end_position: int
    tags: list[str]
    inserted: bool
    media: list[str]


@dataclass
class SpacedCard:
    """A #spaced prompt: a question with no answer, reviewed on its own."""
    question: str
    end_position: int


@dataclass
class ParsedNote:
    """The result of parsing an Obsidian markdown note."""
    file_path: Path
    vault_root: Path
    deck_name: str
    tags: list[str]
    flashcards: list[Flashcard] = field(default_factory=list)
    spaced_cards: list[SpacedCard] = field(default_factory=list)
    orphaned_ids: list[int] = field(default_factory=list)
    id_blocks: list[IdBlock] = field(default_factory=list)


@dataclass
class _Block:
    start: int
    heading_level: int
    question: str
    reversed: bool
    tag_string: str
    answer: str
    note_id: int | None
    end: int


# ---------------------------------------------------------------------------
# Tags
# ---------------------------------------------------------------------------

def parse_tags(tag_string: str, global_tags: list[str]) -> list[str]:
    """Global tags first, then every '#'-separated tag of the marker line."""
    tags = list(global_tags)
    if tag_string:
        for tag in tag_string.split("#"):
            tag = tag.strip()
            if tag:
                tags.append(tag)
    return tags


def _is_tag_tail(text: str) -> bool:
    """True if *text* holds nothing but '#word' tokens and spaces."""
    for token in text.split(" "):
        if not token:
            continue
        if token[0] != "#":
            return False
        if not all(_WORD_RE.fullmatch(piece) for piece in token[1:].split("#")):
            return False
    return True


# ---------------------------------------------------------------------------
# Block scanning
# ---------------------------------------------------------------------------

def _find_marker(line: str, begin: int = 0) -> tuple[int, bool, str] | None:
    """
    Locate the flashcard marker on *line*, at or after column *begin*.

    The marker only counts when the rest of the line is tags and spaces.
    Returns (marker_column, reversed, tag_string), or None.
    """
    lower = line.lower()
    pos = lower.find(FLASHCARD_MARKER, begin)
    while pos != -1:
        if lower.startswith(REVERSE_MARKER, pos):
            tail = line[pos + len(REVERSE_MARKER):]
            if _is_tag_tail(tail):
                return pos, True, tail
        tail = line[pos + len(FLASHCARD_MARKER):]
        if _is_tag_tail(tail):
            return pos, False, tail
        pos = lower.find(FLASHCARD_MARKER, pos + 1)
    return None


def _marker_kind(line: str) -> str | None:
    """
    How a marker on *line* would start a card.

    "inline" when question text precedes the marker on the same line,
    "bare" when a plain line holds only the marker (its question is the
    lines above), None when the line starts no card.
    """
    level, prefix_len = heading_prefix(line)
    marker = _find_marker(line, prefix_len)
    if marker is None:
        return None
    if line[prefix_len:marker[0]].strip():
        return "inline"
    return "bare" if level == -1 else None


def _scan_flashcard_blocks(document: str) -> list[_Block]:
    """Split *document* into question/answer blocks, in document order."""
    lines = list(iter_lines(document))
    blocks: list[_Block] = []
    floor = 0  # nothing before the end of the previous card is reused
    i = 0

    while i < len(lines):
        start, text, terminated = lines[i]
        column_floor = max(0, floor - start)
        level, prefix_len = heading_prefix(text)
        question_begin = max(prefix_len, column_floor) if level != -1 else column_floor
        marker = _find_marker(text, question_begin) if terminated else None
        if marker is None:
            i += 1
            continue
        marker_column, is_reversed, tag_string = marker

        # Question: the marker line, plus the paragraph above for plain text
        question_start = start + question_begin
        parts = [text[question_begin:marker_column]]
        if level == -1:
            j = i - 1
            while j >= 0:
                line_start, line, _ = lines[j]
                if line_start < floor or not line.strip() or heading_prefix(line)[0] != -1:
                    break
                parts.insert(0, line)
                question_start = line_start
                j -= 1
        question = "\n".join(parts)
        if not question.strip():
            i += 1
            continue

        # Answer: the next paragraph, up to an ID stub or the next card
        j = i + 1
        while j < len(lines) and not lines[j][1].strip():
            j += 1
        answer_begin = j
        answer_parts = []
        end = start + len(text) + 1  # marker lines always end in a newline
        note_id = None
        while j < len(lines):
            line_start, line, line_terminated = lines[j]
            if not line.strip():
                break
            id_match = ID_STUB_RE.search(line)
            if id_match:
                answer_parts.append(line[:id_match.start()])
                end = line_start + id_match.end()
                note_id = int(id_match.group(1))
                j += 1
                break
            kind = _marker_kind(line) if line_terminated else None
            if kind == "inline":
                break
            if kind == "bare":
                # Lines after the first answer line are the next card's question
                if len(answer_parts) > 1:
                    del answer_parts[1:]
                    first_start, first_line, _ = lines[answer_begin]
                    end = first_start + len(first_line) + 1
                break
            answer_parts.append(line)
            end = line_start + len(line) + (1 if line_terminated else 0)
            j += 1

        blocks.append(_Block(
            start=question_start,
            heading_level=level,
            question=question,
            reversed=is_reversed,
            tag_string=tag_string,
            answer="\n".join(answer_parts),
            note_id=note_id,
            end=end,
        ))
        floor = end
        i = max(j, i + 1)

    return blocks


# ---------------------------------------------------------------------------
# Flashcards
# ---------------------------------------------------------------------------

def generate_flashcards(
    document: str,
    global_tags: list[str] | None = None,
    deck_name: str = "Default",
    settings: Settings | None = None,
    renderer: MarkdownRenderer | None = None,
) -> list[Flashcard]:
    """
    Extract every flashcard in *document*, in document order.

    In context-aware mode the question is prefixed with its ancestor
    headings, joined by the configured separator. Question and answer
    are then rendered to HTML and their math converted for Anki.
    Renderer errors are not caught.
    """
    settings = settings or Settings()
    renderer = renderer or MarkdownRenderer()
    global_tags = global_tags or []
    context_aware = settings.context_aware_mode

    headings = build_heading_index(document) if context_aware else []
    flashcards = []

    for block in _scan_flashcard_blocks(document):
        original_question = block.question.strip()
        if context_aware:
            context = resolve_context(headings, block.start, block.heading_level)
            question = settings.context_separator.join([*context, original_question])
        else:
            question = original_question
        answer = block.answer.strip()

        media = extract_media(question)
        media.extend(extract_media(answer))

        front = math_to_anki(renderer.render(substitute_image_links(question)))
        back = math_to_anki(renderer.render(substitute_image_links(answer)))

        flashcards.append(Flashcard(
            id=block.note_id if block.note_id is not None else -1,
            deck_name=deck_name,
            original_question=original_question,
            fields={"Front": front, "Back": back},
            reversed=block.reversed,
            end_position=block.end,
            tags=parse_tags(block.tag_string, global_tags),
            inserted=block.note_id is not None,
            media=media,
        ))

    return flashcards


def _find_spaced_marker(line: str, begin: int) -> int:
    lower = line.lower()
    pos = lower.find(SPACED_MARKER, begin)
    while pos != -1:
        after = pos + len(SPACED_MARKER)
        if after == len(line) or line[after].isspace():
            return pos
        pos = lower.find(SPACED_MARKER, pos + 1)
    return -1


def generate_spaced_cards(document: str) -> list[SpacedCard]:
    """Extract the #spaced prompts of *document*, in document order."""
    lines = list(iter_lines(document))
    spaced = []
    floor = 0

    for i, (start, text, _) in enumerate(lines):
        column_floor = max(0, floor - start)
        pos = _find_spaced_marker(text, column_floor)
        if pos == -1:
            continue

        parts = [text[column_floor:pos]]
        j = i - 1
        while j >= 0 and lines[j][0] >= floor and lines[j][1].strip():
            parts.insert(0, lines[j][1])
            j -= 1
        question = "\n".join(parts).lstrip("# ").strip()
        if not question:
            continue

        floor = start + pos + len(SPACED_MARKER)
        spaced.append(SpacedCard(question=question, end_position=floor))

    return spaced


# ---------------------------------------------------------------------------
# Notes on disk
# ---------------------------------------------------------------------------

def find_vault_root(file_path: Path) -> Path:
    """
    Walk up from the file to find the vault root.
    The vault root is the folder containing .obsidian/.
    Falls back to the file's parent directory if not found.
    """
    current = file_path.resolve().parent
    while current != current.parent:
        if (current / ".obsidian").exists():
            print(f"[parser] Vault root found: {current}")
            return current
        current = current.parent

    fallback = file_path.resolve().parent
    print(f"[parser] No .obsidian folder found — using fallback: {fallback}")
    return fallback


def _frontmatter(md_content: str) -> dict:
    """The note's YAML front matter as a dict (empty when absent or invalid)."""
    match = re.match(r'^---\s*\n(.*?)\n---', md_content, re.DOTALL)
    if not match:
        return {}
    try:
        data = yaml.safe_load(match.group(1))
    except yaml.YAMLError as e:
        print(f"[parser] WARNING: Front matter is not valid YAML, ignoring it: {e}")
        return {}
    return data if isinstance(data, dict) else {}


def extract_deck_name(md_content: str, default: str = "Default") -> str:
    """Deck from the 'cards-deck' front-matter field, else *default*."""
    deck = _frontmatter(md_content).get("cards-deck")
    if deck is None:
        return default
    return str(deck).strip() or default


def extract_global_tags(md_content: str) -> list[str]:
    """
    Tags from the front-matter 'tags' field.

    Accepts a YAML list or a string of comma/space separated tags.
    Leading '#' is dropped.
    """
    value = _frontmatter(md_content).get("tags")
    if value is None:
        return []
    if isinstance(value, list):
        raw = [str(item) for item in value if item is not None]
    else:
        raw = re.split(r'[,\s]+', str(value))

    tags = []
    for tag in raw:
        tag = tag.strip().lstrip("#")
        if tag:
            tags.append(tag)
    return tags


def parse_note(
    file_path: str | Path,
    settings: Settings | None = None,
    extra_tags: list[str] | None = None,
    renderer: MarkdownRenderer | None = None,
) -> ParsedNote:
    """
    Parse an Obsidian markdown note and return structured data.

    Reads the file, finds the vault root, takes deck and global tags from
    the front matter, then extracts flashcards, spaced cards and orphaned
    IDs.
    """
    settings = settings or Settings()
    file_path = Path(file_path).resolve()

    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")

    print(f"[parser] Reading file: {file_path.name}")

    vault_root = find_vault_root(file_path)

    with open(file_path, "r", encoding="utf-8") as f:
        content = f.read()

    print(f"[parser] File loaded ({len(content)} chars)")

    deck_name = extract_deck_name(content, settings.default_deck)
    tags = extract_global_tags(content) + list(extra_tags or [])
    if tags:
        print(f"[parser] Global tags: {' '.join(tags)}")

    flashcards = generate_flashcards(content, tags, deck_name, settings, renderer)
    spaced_cards = generate_spaced_cards(content)
    orphaned_ids = get_cards_to_delete(content)
    id_blocks = find_id_blocks(content)

    new_count = sum(1 for card in flashcards if not card.inserted)
    print(f"[parser] Flashcards parsed: {len(flashcards)} ({new_count} new), "
          f"{len(spaced_cards)} spaced, {len(orphaned_ids)} orphaned ID(s)")

    if not flashcards and not spaced_cards:
        print("[parser] WARNING: No flashcards found — mark questions with #flashcard")

    return ParsedNote(
        file_path=file_path,
        vault_root=vault_root,
        deck_name=deck_name,
        tags=tags,
        flashcards=flashcards,
        spaced_cards=spaced_cards,
        orphaned_ids=orphaned_ids,
        id_blocks=id_blocks,
    )
