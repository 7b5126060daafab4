"""Tests for obsidian_flashcards.headings."""

from obsidian_flashcards.headings import (
    HeadingEntry,
    build_heading_index,
    heading_prefix,
    iter_lines,
    resolve_context,
)


# ── iter_lines ───────────────────────────────────────────────────────────

class TestIterLines:
    def test_offsets_and_termination(self):
        assert list(iter_lines("ab\ncd")) == [(0, "ab", True), (3, "cd", False)]

    def test_trailing_newline(self):
        assert list(iter_lines("ab\n")) == [(0, "ab", True)]

    def test_blank_lines_kept(self):
        assert list(iter_lines("a\n\nb\n")) == [(0, "a", True), (2, "", True), (3, "b", True)]

    def test_empty_text(self):
        assert list(iter_lines("")) == []


# ── heading_prefix ───────────────────────────────────────────────────────

class TestHeadingPrefix:
    def test_level_one(self):
        assert heading_prefix("# Title") == (1, 2)

    def test_indented_level_three(self):
        assert heading_prefix("   ### Title") == (3, 7)

    def test_several_spaces_after_hashes(self):
        assert heading_prefix("##   Title") == (2, 5)

    def test_four_spaces_is_not_heading(self):
        assert heading_prefix("    # Title") == (-1, 0)

    def test_seven_hashes_is_not_heading(self):
        assert heading_prefix("####### Title") == (-1, 0)

    def test_tag_is_not_heading(self):
        assert heading_prefix("#tag text") == (-1, 0)

    def test_plain_text(self):
        assert heading_prefix("Just text") == (-1, 0)


# ── build_heading_index ──────────────────────────────────────────────────

class TestBuildHeadingIndex:
    def test_document_order_with_positions(self):
        doc = "# A\ntext\n## B\n"
        assert build_heading_index(doc) == [
            HeadingEntry(position=0, level=1, title="A"),
            HeadingEntry(position=9, level=2, title="B"),
        ]

    def test_titles_are_trimmed(self):
        [entry] = build_heading_index("##   Spaced out   \n")
        assert entry.title == "Spaced out"

    def test_trailing_tags_dropped(self):
        [entry] = build_heading_index("## Title #tag1 #tag2\n")
        assert entry.title == "Title"

    def test_tag_glued_to_title_dropped(self):
        [entry] = build_heading_index("## Title#tag\n")
        assert entry.title == "Title"

    def test_flashcard_marker_dropped_from_title(self):
        [entry] = build_heading_index("### What is X? #flashcard\n")
        assert entry.title == "What is X?"
        assert entry.level == 3

    def test_hash_inside_title_kept(self):
        [entry] = build_heading_index("## C# language\n")
        assert entry.title == "C# language"

    def test_heading_of_only_tags_keeps_them(self):
        [entry] = build_heading_index("# #only\n")
        assert entry.title == "#only"

    def test_empty_heading_skipped(self):
        assert build_heading_index("#   \n") == []

    def test_no_headings(self):
        assert build_heading_index("Plain text\nmore text\n") == []

    def test_all_levels(self):
        doc = "".join(f"{'#' * n} H{n}\n" for n in range(1, 7))
        assert [h.level for h in build_heading_index(doc)] == [1, 2, 3, 4, 5, 6]


# ── resolve_context ──────────────────────────────────────────────────────

HEADINGS = [
    HeadingEntry(position=0, level=1, title="A"),
    HeadingEntry(position=10, level=2, title="B"),
    HeadingEntry(position=20, level=3, title="C"),
    HeadingEntry(position=30, level=2, title="D"),
]


class TestResolveContext:
    def test_full_chain_outermost_first(self):
        assert resolve_context(HEADINGS, 25) == ["A", "B", "C"]

    def test_sibling_section(self):
        assert resolve_context(HEADINGS, 35) == ["A", "D"]

    def test_only_headings_before_position(self):
        assert resolve_context(HEADINGS, 15) == ["A", "B"]

    def test_card_in_heading_skips_own_level(self):
        # A level-3 card heading right after D
        assert resolve_context(HEADINGS, 35, heading_level=3) == ["A", "D"]

    def test_card_in_level_two_heading(self):
        assert resolve_context(HEADINGS, 25, heading_level=2) == ["A"]

    def test_card_in_top_level_heading(self):
        assert resolve_context(HEADINGS, 35, heading_level=1) == []

    def test_no_heading_before_position(self):
        assert resolve_context(HEADINGS, 0) == []

    def test_empty_index(self):
        assert resolve_context([], 100) == []

    def test_missing_intermediate_level_stops_chain(self):
        headings = [
            HeadingEntry(position=0, level=1, title="Top"),
            HeadingEntry(position=10, level=3, title="Deep"),
        ]
        assert resolve_context(headings, 20) == ["Deep"]

    def test_nearest_matching_ancestor_wins(self):
        headings = [
            HeadingEntry(position=0, level=1, title="First"),
            HeadingEntry(position=10, level=1, title="Second"),
            HeadingEntry(position=20, level=2, title="Child"),
        ]
        assert resolve_context(headings, 30) == ["Second", "Child"]
