from __future__ import annotations

import html
import sys
from enum import Enum
from pathlib import Path

from bs4 import BeautifulSoup

from .content import (
    cover_figure_html,
    format_date,
    is_published,
    parse_front_matter,
    prepend_html,
    replace_read_more,
    title_heading_html,
)
from .render import render_markdown, serialize_document, write_text
from .templates import (
    HEAD_COMPONENT,
    load_template,
    parse_fragment,
    read_component,
    replace_contents,
    require_root,
    resolve_template,
)

CONTENT_ID = "page-content"
GALLERY_DETAIL_KEYS = (("film", "Film"), ("camera", "Camera"), ("dates", "Dates"))
RESERVED_PREFIXES = ("_", ".")


class PageKind(Enum):
    STANDALONE = "standalone"
    COLLECTED = "collected"
    GALLERY = "gallery"


def classify(target_dir: str, args: object) -> PageKind:
    if target_dir in getattr(args, "collected_dirs", []):
        return PageKind.COLLECTED
    if target_dir in getattr(args, "gallery_dirs", []):
        return PageKind.GALLERY
    return PageKind.STANDALONE


def page_location(page_path: Path, pages_dir: Path) -> tuple[str, str]:
    rel = page_path.relative_to(pages_dir)
    target_dir = "" if rel.parent == Path(".") else rel.parent.as_posix()
    return target_dir, rel.name.split(".md")[0]


def is_content_file(path: Path) -> bool:
    return path.suffix.lower() == ".md" and not path.name.startswith(RESERVED_PREFIXES)


def ensure_head(soup: BeautifulSoup):
    if soup.head is not None:
        return soup.head
    head = soup.new_tag("head")
    soup.html.insert(0, head)
    return head


def set_title(soup: BeautifulSoup, title: str) -> None:
    if soup.title is None:
        ensure_head(soup).append(soup.new_tag("title"))
    soup.title.string = title


def set_meta(soup: BeautifulSoup, name: str, value: str, append: bool = False) -> None:
    tag = soup.find("meta", attrs={"name": name})
    if tag is None:
        tag = soup.new_tag("meta", attrs={"name": name, "content": ""})
        ensure_head(soup).append(tag)
    existing = (tag.get("content") or "").strip()
    if append and existing:
        tag["content"] = f"{existing}, {value}"
    else:
        tag["content"] = value


def meta_text(value: object) -> str:
    if isinstance(value, (list, tuple)):
        return ", ".join(str(item) for item in value)
    return str(value)


def apply_head(soup: BeautifulSoup, meta: dict, templates_dir: Path) -> None:
    component = read_component(templates_dir, HEAD_COMPONENT)
    if component:
        ensure_head(soup).append(parse_fragment(component))
    if meta.get("keywords"):
        set_meta(soup, "keywords", meta_text(meta["keywords"]), append=True)
    if meta.get("description"):
        set_meta(soup, "description", meta_text(meta["description"]))


def gallery_siblings(page_path: Path) -> list[str]:
    """Names of the published entries next to ``page_path``, newest first."""
    names = []
    for path in page_path.parent.iterdir():
        if not is_content_file(path):
            continue
        meta, _ = parse_front_matter(path.read_text(encoding="utf-8"))
        if is_published(meta):
            names.append(path.name.split(".md")[0])
    return sorted(names, reverse=True)


def gallery_header_html(meta: dict, title: str, target_dir: str, page_name: str, siblings: list[str]) -> str:
    options = []
    directory = html.escape(target_dir)
    for name in siblings:
        selected = " selected" if name == page_name else ""
        options.append(f'<option value="/{directory}/{html.escape(name)}"{selected}>{html.escape(name)}</option>')
    details = []
    for key, label in GALLERY_DETAIL_KEYS:
        if meta.get(key):
            details.append(f'<li><span class="muted">{label}</span> {html.escape(meta_text(meta[key]))}</li>')
    details_html = f'<ul class="roll-details">{"".join(details)}</ul>' if details else ""
    return (
        '<div class="roll-header">'
        f"{title_heading_html(title)}"
        '<select class="roll-select" onchange="window.location.href=this.value">'
        f'{"".join(options)}'
        "</select>"
        f"{details_html}"
        "</div>"
    )


def add_preload(soup: BeautifulSoup, content) -> None:
    image = content.find("img", src=True)
    if image is None:
        return
    link = soup.new_tag("link", attrs={"rel": "preload", "as": "image", "href": image["src"]})
    ensure_head(soup).append(link)


def insert_date(soup: BeautifulSoup, value: object, page_path: Path) -> None:
    text = format_date(value)
    if text is None:
        print(f"Ignoring invalid date {value!r} in {page_path}.", file=sys.stderr)
        return
    heading = soup.find("h2")
    if heading is None:
        return
    span = soup.new_tag("span", attrs={"class": "muted date"})
    span.string = text
    heading.insert_after(span)


def highlight_nav(soup: BeautifulSoup, page_name: str, target_dir: str) -> None:
    nav = soup.find(id="nav") or soup.find("nav")
    if nav is None:
        return
    for link in nav.find_all("a", href=True):
        href = link["href"]
        if page_name in href or (target_dir and target_dir in href):
            item = link.find_parent("li")
            if item is not None and "active" not in item.get("class", []):
                item["class"] = item.get("class", []) + ["active"]


def process_page(page_path: Path, args: object, order: int = 0) -> dict | None:
    """Render one content file.

    Standalone and gallery pages are written straight to the output root.
    Collected pages are returned for aggregation and nothing is written.
    """
    pages_dir = Path(args.pages)
    templates_dir = Path(args.templates)
    output_dir = Path(args.output)

    meta, body = parse_front_matter(page_path.read_text(encoding="utf-8"))
    if not is_published(meta):
        return None

    target_dir, page_name = page_location(page_path, pages_dir)
    kind = classify(target_dir, args)
    template_path = resolve_template(meta, templates_dir)
    soup = load_template(template_path)
    require_root(soup, template_path)

    apply_head(soup, meta, templates_dir)
    body = prepend_html(body, cover_figure_html(meta))

    siblings = gallery_siblings(page_path) if kind is PageKind.GALLERY else []
    title = str(meta["title"]) if meta.get("title") else ""
    if title:
        set_title(soup, title)
        if kind is PageKind.GALLERY:
            header = gallery_header_html(meta, title, target_dir, page_name, siblings)
        else:
            header = title_heading_html(title)
        body = prepend_html(body, header)

    body = replace_read_more(body)
    content = soup.find(id=CONTENT_ID)
    if content is not None:
        replace_contents(content, render_markdown(body))
    else:
        print(
            f"Could not find element with id '{CONTENT_ID}' in template {template_path}. "
            "Generating page without markdown content.",
            file=sys.stderr,
        )

    if not title:
        first_heading = soup.find("h1")
        if first_heading is not None:
            set_title(soup, first_heading.get_text())

    if kind is PageKind.GALLERY and content is not None:
        add_preload(soup, content)

    if meta.get("date"):
        insert_date(soup, meta["date"], page_path)

    highlight_nav(soup, page_name, target_dir)

    if kind is PageKind.COLLECTED:
        return {
            "meta": meta,
            "soup": soup,
            "name": page_name,
            "dir": target_dir,
            "slug": page_name,
            "permalink": f"/{target_dir}/{page_name}",
            "order": order,
        }

    html_doc = serialize_document(soup)
    write_text(output_dir / target_dir / f"{page_name}.html", html_doc)
    if kind is PageKind.GALLERY and siblings and siblings[0] == page_name:
        write_text(output_dir / f"{Path(target_dir).name}.html", html_doc)
    return None
