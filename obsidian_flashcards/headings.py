"""
Heading index and context resolution.

Scans a markdown document once for ATX headings and, for any position in
the document, works out the chain of ancestor headings that contain it.
The chain is what gets prefixed to a flashcard question in context-aware
mode.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class HeadingEntry:
    """A heading line: where it starts, how deep it is, and its title."""
    position: int
    level: int
    title: str


def iter_lines(text: str):
    """
    Yield (start_offset, line, terminated) for every line in *text*.

    *line* excludes the newline; *terminated* tells whether one followed.
    """
    start = 0
    length = len(text)
    while start < length:
        end = text.find("\n", start)
        if end == -1:
            yield start, text[start:], False
            return
        yield start, text[start:end], True
        start = end + 1


def heading_prefix(line: str) -> tuple[int, int]:
    """
    Recognise an ATX heading prefix: 0-3 spaces, 1-6 '#', then a space.

    Returns (level, prefix_length) where prefix_length covers the spaces
    after the hashes, or (-1, 0) when the line is not a heading.
    """
    i = 0
    while i < len(line) and i < 3 and line[i] == " ":
        i += 1
    hashes = 0
    while i + hashes < len(line) and line[i + hashes] == "#":
        hashes += 1
    if not 1 <= hashes <= 6:
        return -1, 0
    i += hashes
    if i >= len(line) or line[i] != " ":
        return -1, 0
    while i < len(line) and line[i] == " ":
        i += 1
    return hashes, i


def _is_tag_token(token: str) -> bool:
    # '#' followed by at least one non-whitespace character
    return len(token) >= 2 and token[0] == "#" and not any(c.isspace() for c in token)


def _strip_trailing_tags(text: str) -> str:
    """
    Drop trailing '#tag' tokens from a heading's text.

    The title keeps at least one character, so a heading made only of
    tags keeps them as its title.
    """
    text = text.rstrip(" ")
    end = len(text)
    while end > 0:
        word_start = text.rfind(" ", 0, end) + 1
        word = text[word_start:end]
        if word_start > 0 and _is_tag_token(word):
            end = len(text[:word_start].rstrip(" "))
            continue
        # A tag glued to the title, e.g. "Title#tag"
        for j in range(1, len(word) - 1):
            if word[j] == "#" and _is_tag_token(word[j:]):
                return text[:word_start + j]
        return text[:end]
    return text


def build_heading_index(document: str) -> list[HeadingEntry]:
    """Return every heading in *document*, in document order."""
    headings = []
    for start, line, _ in iter_lines(document):
        level, prefix_len = heading_prefix(line)
        if level == -1:
            continue
        rest = line[prefix_len:]
        if not rest.strip():
            continue
        title = _strip_trailing_tags(rest).strip()
        headings.append(HeadingEntry(position=start, level=level, title=title))
    return headings


def resolve_context(
    headings: list[HeadingEntry],
    position: int,
    heading_level: int = -1,
) -> list[str]:
    """
    Give back the ancestor heading titles of *position*, outermost first.

    Only headings starting before *position* are candidates.

    When *heading_level* is not -1 the card itself sits in a heading of
    that level: its own heading is skipped and the search starts at the
    parent level. Otherwise the nearest preceding heading is the
    innermost ancestor, whatever its level.

    From there, each step looks backwards for the closest heading whose
    level is exactly one less than the last match.
    """
    context: list[str] = []
    cursor = position
    i = len(headings) - 1

    if heading_level != -1:
        goal_level = heading_level - 1
    else:
        goal_level = 0
        while i >= 0:
            entry = headings[i]
            if entry.position < cursor:
                context.insert(0, entry.title)
                cursor = entry.position
                goal_level = entry.level - 1
                break
            i -= 1

    while i >= 0 and goal_level > 0:
        entry = headings[i]
        if entry.level == goal_level and entry.position < cursor:
            context.insert(0, entry.title)
            cursor = entry.position
            goal_level = entry.level - 1
        i -= 1

    return context
