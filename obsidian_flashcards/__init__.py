"""
Obsidian Flashcards
===================
Finds #flashcard and #flashcard-reverse cards written inline in your
Obsidian notes, resolves the headings they sit under, renders question
and answer to Anki-ready HTML (with MathJax math and image embeds), and
tells apart new cards from ones already sent to Anki via their ^ID
block references.

Reads notes, never writes them: sending cards to Anki is left to the
caller.
"""

__version__ = "1.0.0"
