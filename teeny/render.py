from __future__ import annotations

import shutil
import sys
from pathlib import Path

import markdown
from bs4 import BeautifulSoup, Doctype

MD_EXTENSIONS = ["fenced_code", "tables", "codehilite"]
MD_EXTENSION_CONFIGS = {"codehilite": {"guess_lang": False}}


def render_markdown(text: str, breaks: bool = False) -> str:
    extensions = list(MD_EXTENSIONS)
    if breaks:
        extensions.append("nl2br")
    md = markdown.Markdown(extensions=extensions, extension_configs=MD_EXTENSION_CONFIGS)
    return md.convert(text)


def render_template(template: str, **context: str) -> str:
    output = template
    for key, value in context.items():
        output = output.replace(f"{{{{{key}}}}}", value)
    return output


def doctype_name(soup: BeautifulSoup) -> str:
    for node in soup.contents:
        if isinstance(node, Doctype):
            parts = str(node).split()
            if parts:
                return parts[0]
    return "html"


def serialize_document(soup: BeautifulSoup) -> str:
    return f"<!DOCTYPE {doctype_name(soup)}>\n{soup.html}"


def write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def copy_assets(source_dir: Path, output_dir: Path, exclude_suffixes: tuple[str, ...] = ()) -> None:
    """Mirror ``source_dir`` into ``output_dir`` without dotfiles or source files.

    Copying is advisory: a missing source is reported and skipped, and errors
    on individual files are ignored.
    """
    if not source_dir.is_dir():
        print(f"Asset directory not found, skipping: {source_dir}", file=sys.stderr)
        return

    def ignore(directory: str, names: list[str]) -> set[str]:
        skipped = set()
        for name in names:
            if name.startswith("."):
                skipped.add(name)
            elif name.lower().endswith(exclude_suffixes) and not Path(directory, name).is_dir():
                skipped.add(name)
        return skipped

    try:
        shutil.copytree(source_dir, output_dir, ignore=ignore, dirs_exist_ok=True)
    except shutil.Error:
        # copytree finishes the tree and reports per-file failures at the end.
        pass
