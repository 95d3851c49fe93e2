from pathlib import Path

import pytest

from teeny.cli import build_parser

DEFAULT_TEMPLATE = (
    "<!DOCTYPE html>\n"
    '<html><head><title>Site</title><meta name="keywords" content="site"></head>'
    '<body><div id="page-content"></div></body></html>\n'
)


def write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def site(tmp_path, monkeypatch):
    """A minimal site checkout used as the working directory."""
    monkeypatch.chdir(tmp_path)
    write(tmp_path / "templates" / "default.html", DEFAULT_TEMPLATE)
    (tmp_path / "pages").mkdir()
    return tmp_path


@pytest.fixture
def make_args(site):
    def factory(*extra, config=None):
        return build_parser(config or {}).parse_args(["build", "--build-workers", "4", *extra])

    return factory


@pytest.fixture
def post(site):
    def factory(name, date, body="Body", title=None, directory="blog"):
        lines = ["---", f"date: {date}", f"title: {title or name}", "---", body]
        return write(site / "pages" / directory / f"{name}.md", "\n".join(lines) + "\n")

    return factory
