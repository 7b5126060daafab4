"""
Card identity stubs.

A card that has already been sent to Anki carries its note ID as a
block reference right after its answer:

    What is DNA? #flashcard
    Deoxyribonucleic acid
    ^1681234567890

This module lists those stubs, spots stubs whose card text was deleted,
and writes freshly assigned IDs back into a document.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from .headings import iter_lines

ID_DIGITS = 13

ID_STUB_RE = re.compile(r'\^(\d{13})(?!\d)')
ID_BLOCK_RE = re.compile(r'\^(\d{13})(?!\d)\s*')
BARE_STUB_RE = re.compile(r'\^(\d{13})\s*')


@dataclass
class IdBlock:
    """A ^NNNNNNNNNNNNN stub found in a document."""
    id: int
    start: int
    end: int


def find_id_blocks(document: str) -> list[IdBlock]:
    """Return every identity stub in *document*, in document order."""
    return [
        IdBlock(id=int(m.group(1)), start=m.start(), end=m.end())
        for m in ID_BLOCK_RE.finditer(document)
    ]


def get_cards_to_delete(document: str) -> list[int]:
    """
    Find identity stubs with no content above them.

    Such a stub sits on its own line right after a blank line (or at the
    very top of the document): the card it belonged to was deleted but
    the ID stayed behind, so the Anki note should go too.
    """
    orphans = []
    previous_blank = True
    for _, line, _ in iter_lines(document):
        if previous_blank:
            match = BARE_STUB_RE.fullmatch(line)
            if match:
                orphans.append(int(match.group(1)))
        previous_blank = not line.strip()
    return orphans


def _check_id(note_id: int) -> None:
    if not isinstance(note_id, int) or len(str(note_id)) != ID_DIGITS:
        raise ValueError(f"Anki note IDs must have {ID_DIGITS} digits, got {note_id!r}")


def write_ids(document: str, flashcards: list, ids: dict[int, int]) -> str:
    """
    Insert a ^ID line after every new card that was given an ID.

    *ids* maps a card's index in *flashcards* to its new Anki note ID.
    Cards already carrying an ID are left alone. Returns the new text.
    """
    insertions = []
    for index, note_id in ids.items():
        card = flashcards[index]
        if card.inserted:
            continue
        _check_id(note_id)
        insertions.append((card.end_position, note_id))

    # Back to front, so earlier offsets stay valid
    for position, note_id in sorted(insertions, reverse=True):
        if position == 0 or document[position - 1] == "\n":
            stub = f"^{note_id}\n"
        else:
            # Answer on the unterminated last line
            stub = f"\n^{note_id}"
        document = document[:position] + stub + document[position:]

    return document
