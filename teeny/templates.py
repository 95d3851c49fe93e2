from __future__ import annotations

from pathlib import Path

from bs4 import BeautifulSoup

from .errors import ConfigurationError, TemplateNotFound

DEFAULT_TEMPLATE = "default"
HEAD_COMPONENT = "component_head.html"
COMMENT_FORM_COMPONENT = "component_comment_form.html"


def resolve_template(meta: dict, templates_dir: Path) -> Path:
    name = str(meta.get("template") or "").strip() or DEFAULT_TEMPLATE
    if name.endswith(".html"):
        name = name[: -len(".html")]
    return templates_dir / f"{name}.html"


def load_template(path: Path) -> BeautifulSoup:
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise TemplateNotFound(path) from exc
    return BeautifulSoup(text, "html.parser")


def require_root(soup: BeautifulSoup, path: Path) -> None:
    if soup.find("html") is None:
        raise ConfigurationError(f"Templates should contain the 'html' tag: {path}")


def read_component(templates_dir: Path, name: str) -> str:
    path = templates_dir / name
    if not path.is_file():
        return ""
    return path.read_text(encoding="utf-8")


def parse_fragment(markup: str) -> BeautifulSoup:
    return BeautifulSoup(markup, "html.parser")


def replace_contents(element, markup: str) -> None:
    element.clear()
    element.append(parse_fragment(markup))
