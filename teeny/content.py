from __future__ import annotations

import datetime as dt
import html
import re

import yaml

MONTHS = [
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
]
READ_MORE_TOKEN = "[READ MORE]"
READ_MORE_HTML = '<a class="readmore" href="/">Read more</a>'
DATE_RE = re.compile(r"^(?P<year>\d{4})(?P<month>\d{2})(?P<day>\d{2})$")


def parse_front_matter(text: str) -> tuple[dict, str]:
    """Split a leading ``---`` YAML block from the Markdown body.

    Malformed or non-mapping blocks are dropped and give empty metadata.
    """
    clean_text = text.lstrip("\ufeff")
    lines = clean_text.splitlines()
    if not lines or lines[0].strip() != "---":
        return {}, clean_text

    end = None
    for i in range(1, len(lines)):
        if lines[i].strip() in {"---", "..."}:
            end = i
            break
    if end is None:
        return {}, clean_text

    body = "\n".join(lines[end + 1 :])
    try:
        meta = yaml.safe_load("\n".join(lines[1:end]))
    except yaml.YAMLError:
        return {}, body
    if not isinstance(meta, dict):
        return {}, body
    return {str(key): value for key, value in meta.items()}, body


def is_published(meta: dict) -> bool:
    # YAML reads a bare `no` as False.
    value = meta.get("publish")
    if value is False:
        return False
    return str(value).strip().lower() != "no"


def date_key(meta: dict) -> int:
    value = meta.get("date")
    if value is None:
        return 0
    match = DATE_RE.match(str(value).strip())
    return int(match.group(0)) if match else 0


def format_date(value: object) -> str | None:
    match = DATE_RE.match(str(value).strip())
    if not match:
        return None
    try:
        when = dt.date(int(match.group("year")), int(match.group("month")), int(match.group("day")))
    except ValueError:
        return None
    return f"{MONTHS[when.month - 1]} {when.day}, {match.group('year')}"


def cover_figure_html(meta: dict) -> str:
    image = meta.get("image")
    if not image:
        return ""
    alt = html.escape(str(meta.get("imageAlt") or ""))
    parts = ['<figure class="cover">', f'<img src="{html.escape(str(image))}" alt="{alt}">']
    caption = meta.get("imageCaption")
    if caption:
        parts.append(f"<figcaption>{html.escape(str(caption))}</figcaption>")
    parts.append("</figure>")
    return "".join(parts)


def title_heading_html(title: str) -> str:
    return f"<h2>{html.escape(title)}</h2>"


def replace_read_more(body: str) -> str:
    return body.replace(READ_MORE_TOKEN, READ_MORE_HTML)


def prepend_html(body: str, block: str) -> str:
    # Raw HTML blocks need a blank line before the Markdown that follows.
    if not block:
        return body
    return f"{block}\n\n{body}"
