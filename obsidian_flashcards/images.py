"""
Image handling.

Detects image embeds in card content (both Obsidian wiki-links and
standard markdown), lists the referenced filenames, rewrites the embeds
as <img> tags, and resolves references to files inside the vault.
"""

import os
import re
from pathlib import Path
from urllib.parse import unquote

# Supported images: https://publish.obsidian.md/help/How+to/Embed+files
IMAGE_EXTENSIONS = r'(?:png|jpg|jpeg|gif|bmp|svg|tiff)'

OBSIDIAN_IMAGE_RE = re.compile(
    rf'!\[\[([^\]\n]+\.{IMAGE_EXTENSIONS})\]\]', re.IGNORECASE
)
MARKDOWN_IMAGE_RE = re.compile(
    rf'!\[[^\]\n]*\]\(([^)\n]+\.{IMAGE_EXTENSIONS})\)', re.IGNORECASE
)


def extract_media(text: str) -> list[str]:
    """
    Return the image filenames embedded in *text*.

    Supports:
        - ![[image.png]]         (Obsidian wiki-link, used verbatim)
        - ![](path/my%20img.png) (standard markdown, percent-decoded)

    All wiki-links come first, then all markdown links, each group in
    order of appearance.
    """
    media = [m.group(1) for m in OBSIDIAN_IMAGE_RE.finditer(text)]
    media.extend(unquote(m.group(1)) for m in MARKDOWN_IMAGE_RE.finditer(text))
    return media


def substitute_image_links(text: str) -> str:
    """
    Replace image embeds with an <img> tag pointing at the filename.

    ![[image.png]]     → <img src='image.png'>
    ![](my%20img.png)  → <img src='my img.png'>
    """
    text = OBSIDIAN_IMAGE_RE.sub(lambda m: f"<img src='{m.group(1)}'>", text)
    text = MARKDOWN_IMAGE_RE.sub(lambda m: f"<img src='{unquote(m.group(1))}'>", text)
    return text


def resolve_path(image_ref: str, md_file_path: Path, vault_root: Path) -> Path | None:
    """
    Resolve an image reference to an absolute file path.

    Search order:
    1. Relative to the markdown file's directory
    2. Relative to the vault root
    3. Search the entire vault by filename (how Obsidian resolves wiki-links)
    """
    md_dir = md_file_path.resolve().parent

    candidate = md_dir / image_ref
    if candidate.exists():
        print(f"[images] Resolved '{image_ref}' → {candidate} (relative to note)")
        return candidate

    candidate = vault_root / image_ref
    if candidate.exists():
        print(f"[images] Resolved '{image_ref}' → {candidate} (relative to vault)")
        return candidate

    filename = Path(image_ref).name
    for root, dirs, files in os.walk(vault_root):
        dirs[:] = [d for d in dirs if not d.startswith(".")]
        if filename in files:
            found = Path(root) / filename
            print(f"[images] Resolved '{image_ref}' → {found} (vault search)")
            return found

    print(f"[images] WARNING: Could not resolve '{image_ref}' — file not found in vault")
    return None


def find_missing(media: list[str], md_file_path: Path, vault_root: Path) -> list[str]:
    """Return the references in *media* that don't resolve to a vault file."""
    missing = []
    for ref in dict.fromkeys(media):
        if resolve_path(ref, md_file_path, vault_root) is None:
            missing.append(ref)
    return missing
