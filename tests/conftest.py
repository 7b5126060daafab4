"""Shared fixtures for obsidian_flashcards tests."""

import pytest

import obsidian_flashcards.config as config_mod


class EchoRenderer:
    """Stands in for MarkdownRenderer: returns its input and remembers it."""

    def __init__(self):
        self.calls = []

    def render(self, text: str) -> str:
        self.calls.append(text)
        return text


@pytest.fixture(autouse=True)
def _isolated_config(tmp_path, monkeypatch):
    """Never touch the real config.json."""
    monkeypatch.setattr(config_mod, "CONFIG_FILE", tmp_path / "config.json")


@pytest.fixture
def echo_renderer():
    return EchoRenderer()


# ---------------------------------------------------------------------------
# Vault / filesystem fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def tmp_vault(tmp_path):
    """Create a minimal Obsidian vault structure with sample files."""
    vault = tmp_path / "vault"
    vault.mkdir()
    (vault / ".obsidian").mkdir()
    (vault / "notes").mkdir()
    (vault / "images").mkdir()

    img = vault / "images" / "diagram.png"
    img.write_bytes(b"\x89PNG fake image data")

    md = vault / "notes" / "biology.md"
    md.write_text(
        "---\ncards-deck: Science::Biology\ntags: [bio, exam]\n---\n\n"
        "# Biology\n\n"
        "## Genetics\n\n"
        "What is DNA? #flashcard\n"
        "Deoxyribonucleic acid\n"
        "^1681234567890\n\n"
        "What is RNA? #flashcard-reverse #molecules\n"
        "Ribonucleic acid ![[diagram.png]]\n\n"
        "^1681234567891\n",
        encoding="utf-8",
    )

    return vault


# ---------------------------------------------------------------------------
# Markdown content fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def sample_nested_md():
    return (
        "# Chemistry\n"
        "\n"
        "## Organic\n"
        "\n"
        "### Alkanes\n"
        "\n"
        "What is methane? #flashcard\n"
        "CH4\n"
        "\n"
        "## Inorganic\n"
        "\n"
        "What is water? #flashcard\n"
        "H2O\n"
    )
