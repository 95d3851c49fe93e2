from __future__ import annotations

import copy
import html
import math
import sys
from pathlib import Path

from bs4 import BeautifulSoup

from .comments import load_comments, render_thread
from .content import date_key, parse_front_matter
from .pages import CONTENT_ID, apply_head, set_title
from .render import render_markdown, render_template, serialize_document, write_text
from .templates import (
    COMMENT_FORM_COMPONENT,
    load_template,
    parse_fragment,
    read_component,
    replace_contents,
    require_root,
    resolve_template,
)

PAGINATION_CONTROLS = (("begin", "Begin"), ("back", "Back"), ("forward", "Forward"), ("end", "End"))
DEFAULT_COMMENT_FORM = (
    '<form class="comment-form" method="post" action="/comments">'
    '<input type="hidden" name="options[slug]" value="{{slug}}">'
    '<input type="hidden" name="options[redirect]" value="{{permalink}}">'
    '<input type="hidden" name="fields[replying_to_uid]" value="">'
    '<label>Name <input type="text" name="fields[name]" required></label>'
    '<label>Comment <textarea name="fields[message]" rows="5" required></textarea></label>'
    '<button type="submit">Post comment</button>'
    "</form>"
)


def sort_posts(posts: list[dict]) -> list[dict]:
    return sorted(posts, key=lambda post: (-date_key(post["meta"]), post["order"]))


def blog_dir(args: object) -> str:
    dirs = getattr(args, "collected_dirs", None) or ["blog"]
    return dirs[0]


def page_url(page: int, directory: str) -> str:
    if page == 1:
        return "/"
    return f"/{directory}/{page}"


def page_output_path(output_dir: Path, page: int, directory: str) -> Path:
    if page == 1:
        return output_dir / "index.html"
    return output_dir / directory / f"{page}.html"


def pagination_state(page: int, total_pages: int, total_posts: int, directory: str) -> dict:
    has_prev = page > 1
    has_next = page < total_pages
    return {
        "page": page,
        "total_pages": total_pages,
        "total_posts": total_posts,
        "begin": page_url(1, directory) if has_prev else None,
        "back": page_url(page - 1, directory) if has_prev else None,
        "forward": page_url(page + 1, directory) if has_next else None,
        "end": page_url(total_pages, directory) if has_next else None,
    }


def pagination_html() -> str:
    links = [f'<a id="pagination-{key}">{label}</a>' for key, label in PAGINATION_CONTROLS]
    return (
        '<nav class="pagination">'
        f"{links[0]}{links[1]}"
        '<span id="pagination-status"></span>'
        f"{links[2]}{links[3]}"
        "</nav>"
    )


def apply_pagination(soup: BeautifulSoup, container, state: dict) -> None:
    ids = [f"pagination-{key}" for key, _ in PAGINATION_CONTROLS] + ["pagination-status"]
    if not any(soup.find(id=control_id) for control_id in ids):
        container.append(parse_fragment(pagination_html()))
    for key, _ in PAGINATION_CONTROLS:
        control = soup.find(id=f"pagination-{key}")
        if control is None:
            continue
        classes = [name for name in control.get("class", []) if name != "muted"]
        url = state[key]
        if url:
            control["href"] = url
        else:
            if control.has_attr("href"):
                del control["href"]
            classes.append("muted")
        if classes:
            control["class"] = classes
        elif control.has_attr("class"):
            del control["class"]
    status = soup.find(id="pagination-status")
    if status is not None:
        status.string = f"{state['page']} of {state['total_pages']}"


def read_more_block(content):
    marker = content.find("a", class_="readmore")
    if marker is None:
        return None, None
    block = marker
    while block.parent is not None and block.parent is not content:
        block = block.parent
    return marker, block


def build_excerpt(post: dict) -> str:
    clone = copy.copy(post["soup"])
    content = clone.find(id=CONTENT_ID)
    if content is None:
        return ""
    permalink = post["permalink"]
    heading = content.find("h2")
    if heading is not None:
        link = clone.new_tag("a", href=permalink)
        for child in list(heading.contents):
            link.append(child)
        heading.append(link)
    cover = content.select_one("figure.cover img")
    if cover is not None:
        cover.wrap(clone.new_tag("a", href=permalink))
    marker, block = read_more_block(content)
    if block is not None:
        while block.next_sibling is not None:
            block.next_sibling.extract()
        marker["href"] = permalink
    return f'<article class="excerpt">{content.decode_contents()}</article>'


def remove_read_more(content) -> None:
    marker, _ = read_more_block(content)
    if marker is None:
        return
    parent = marker.parent
    marker.decompose()
    if parent is not content and parent.name == "p" and not parent.get_text(strip=True) and parent.find(True) is None:
        parent.decompose()


def post_title(post: dict) -> str:
    return str(post["meta"].get("title") or post["name"])


def post_nav_html(newer: dict | None, older: dict | None) -> str:
    links = []
    if newer is not None:
        links.append(f'<a class="newer" href="{newer["permalink"]}">Newer: {html.escape(post_title(newer))}</a>')
    if older is not None:
        links.append(f'<a class="older" href="{older["permalink"]}">Older: {html.escape(post_title(older))}</a>')
    return f'<nav class="post-nav">{"".join(links)}</nav>'


def comments_html(post: dict, args: object) -> str:
    thread = render_thread(load_comments(Path(args.comments) / post["slug"]))
    form = read_component(Path(args.templates), COMMENT_FORM_COMPONENT) or DEFAULT_COMMENT_FORM
    form = render_template(form, permalink=html.escape(post["permalink"]), slug=html.escape(post["slug"]))
    return f'<section class="comments" id="comments"><h3>Comments</h3>{thread}{form}</section>'


def build_post_page(post: dict, newer: dict | None, older: dict | None, args: object) -> str:
    soup = post["soup"]
    content = soup.find(id=CONTENT_ID)
    if content is not None:
        remove_read_more(content)
        article = soup.new_tag("article", attrs={"class": "post"})
        for child in list(content.contents):
            article.append(child)
        content.append(article)
        container = content
    else:
        container = soup.body or soup.html
    container.append(parse_fragment(post_nav_html(newer, older)))
    container.append(parse_fragment(comments_html(post, args)))
    return serialize_document(soup)


def load_index_page(args: object) -> tuple[dict, str]:
    path = Path(args.pages) / getattr(args, "index_page", "index.md")
    if not path.is_file():
        return {}, ""
    return parse_front_matter(path.read_text(encoding="utf-8"))


def build_index_page(excerpts: str, state: dict, index_meta: dict, index_body: str, args: object) -> str:
    templates_dir = Path(args.templates)
    template_path = resolve_template(index_meta, templates_dir)
    soup = load_template(template_path)
    require_root(soup, template_path)
    apply_head(soup, index_meta, templates_dir)
    if index_meta.get("title"):
        title = str(index_meta["title"])
        if state["page"] > 1:
            title = f"{title} | Page {state['page']}"
        set_title(soup, title)
    intro = render_markdown(index_body) if state["page"] == 1 and index_body.strip() else ""
    content = soup.find(id=CONTENT_ID)
    if content is not None:
        replace_contents(content, f"{intro}{excerpts}")
        container = content
    else:
        print(f"Could not find element with id '{CONTENT_ID}' in template {template_path}.", file=sys.stderr)
        container = soup.body or soup.html
    apply_pagination(soup, container, state)
    return serialize_document(soup)


def build_blog(collected: list[dict], args: object) -> int:
    """Write the paginated index and one page per collected post.

    Returns the number of index pages.
    """
    output_dir = Path(args.output)
    directory = blog_dir(args)
    per_page = max(1, int(getattr(args, "posts_per_page", 6)))
    latest_alias = (getattr(args, "latest_alias", "") or "").strip()
    index_meta, index_body = load_index_page(args)

    posts = sort_posts(collected)
    total_pages = max(1, math.ceil(len(posts) / per_page))

    for page in range(1, total_pages + 1):
        start = (page - 1) * per_page
        excerpts = []
        for offset, post in enumerate(posts[start : start + per_page]):
            position = start + offset
            excerpts.append(build_excerpt(post))
            newer = posts[position - 1] if position > 0 else None
            older = posts[position + 1] if position + 1 < len(posts) else None
            html_doc = build_post_page(post, newer, older, args)
            write_text(output_dir / post["dir"] / f"{post['name']}.html", html_doc)
            if position == 0 and latest_alias:
                write_text(output_dir / latest_alias, html_doc)
        state = pagination_state(page, total_pages, len(posts), directory)
        html_doc = build_index_page("".join(excerpts), state, index_meta, index_body, args)
        write_text(page_output_path(output_dir, page, directory), html_doc)

    return total_pages
