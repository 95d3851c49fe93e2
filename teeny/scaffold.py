from __future__ import annotations

from pathlib import Path

SEED_DIRECTORIES = ("pages", "static", "templates")
SEED_FILES = {
    "pages/index.md": "---\ntemplate: homepage\n---\n# Hello World\n",
    "templates/homepage.html": (
        "<!DOCTYPE html>\n<html><head></head><body><p>My first Teeny page</p>"
        "<div id='page-content'></div>"
        "<script type=\"text/javascript\" src='main.js'></script></body></html>\n"
    ),
    "templates/default.html": "<!DOCTYPE html>\n<html><head></head><body><div id='page-content'></div></body></html>\n",
    "static/main.js": "console.log('hello world')\n",
}


def init_project(root: Path) -> list[Path]:
    """Create the input directories and seed files that do not exist yet."""
    for name in SEED_DIRECTORIES:
        root.joinpath(name).mkdir(parents=True, exist_ok=True)
    created = []
    for rel, text in SEED_FILES.items():
        path = root / rel
        if path.exists():
            continue
        path.write_text(text, encoding="utf-8")
        created.append(path)
    return created
