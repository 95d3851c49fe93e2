from __future__ import annotations

import datetime as dt
import html
import sys
from pathlib import Path

import yaml
from bs4 import BeautifulSoup

from .content import format_date
from .render import render_markdown

COMMENT_SUFFIXES = (".yml", ".yaml", ".json")
BLOCKED_TAGS = ["script", "style", "iframe", "object", "embed"]
# Epoch values above this are milliseconds.
MILLISECOND_THRESHOLD = 100_000_000_000


def load_comments(directory: Path) -> list[dict]:
    if not directory.is_dir():
        return []
    comments = []
    for path in sorted(directory.iterdir(), key=lambda p: p.name):
        if not path.is_file() or path.name.startswith(".") or path.suffix.lower() not in COMMENT_SUFFIXES:
            continue
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, yaml.YAMLError) as exc:
            print(f"Skipping unreadable comment {path}: {exc}", file=sys.stderr)
            continue
        if not isinstance(data, dict):
            print(f"Skipping comment {path}: expected a mapping.", file=sys.stderr)
            continue
        comments.append(data)
    return comments


def comment_id(comment: dict) -> str:
    return str(comment.get("_id") or comment.get("id") or "").strip()


def parent_id(comment: dict) -> str:
    return str(comment.get("replying_to_uid") or "").strip()


def format_timestamp(value: object) -> str:
    if value is None or value == "":
        return ""
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, (int, float)):
        seconds = value / 1000 if abs(value) > MILLISECOND_THRESHOLD else value
        try:
            when = dt.datetime.fromtimestamp(seconds, tz=dt.timezone.utc)
        except (ValueError, OverflowError, OSError):
            return str(value)
    elif isinstance(value, (dt.date, dt.datetime)):
        when = value
    else:
        text = str(value).strip()
        if text.isdigit():
            return format_timestamp(int(text))
        try:
            when = dt.datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            return text
    return format_date(when.strftime("%Y%m%d")) or ""


def sanitize_html(markup: str) -> str:
    fragment = BeautifulSoup(markup, "html.parser")
    for tag in fragment.find_all(BLOCKED_TAGS):
        tag.decompose()
    for tag in fragment.find_all(True):
        for attr in [name for name in tag.attrs if name.lower().startswith("on")]:
            del tag[attr]
    return str(fragment)


def comment_html(comment: dict) -> str:
    uid = comment_id(comment)
    id_attr = f' id="comment-{html.escape(uid)}"' if uid else ""
    author = html.escape(str(comment.get("name") or "Anonymous"))
    when = format_timestamp(comment.get("date"))
    date_html = f' <span class="muted comment-date">{html.escape(when)}</span>' if when else ""
    body = sanitize_html(render_markdown(str(comment.get("message") or ""), breaks=True))
    return (
        f'<li class="comment"{id_attr}>'
        f'<div class="comment-meta"><span class="comment-author">{author}</span>{date_html}</div>'
        f'<div class="comment-body">{body}</div>'
        "</li>"
    )


def render_thread(comments: list[dict]) -> str:
    """Render comments as nested lists in file order.

    A reply is nested under its parent only when the parent was listed
    before it; otherwise it is shown at the top level.
    """
    thread = BeautifulSoup('<ol class="comment-list"></ol>', "html.parser")
    root = thread.ol
    rendered = {}
    for comment in comments:
        node = BeautifulSoup(comment_html(comment), "html.parser").li
        reply_to = parent_id(comment)
        parent = rendered.get(reply_to) if reply_to else None
        if parent is not None:
            replies = parent.find("ol", class_="replies", recursive=False)
            if replies is None:
                replies = thread.new_tag("ol", attrs={"class": "replies"})
                parent.append(replies)
            replies.append(node)
        else:
            if reply_to:
                print(
                    f"Comment {comment_id(comment) or '?'} replies to unknown comment {reply_to}; "
                    "showing it at the top level.",
                    file=sys.stderr,
                )
            root.append(node)
        uid = comment_id(comment)
        if uid:
            rendered[uid] = node
    return str(thread)
