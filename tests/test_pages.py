import pytest
from bs4 import BeautifulSoup

from conftest import write
from teeny.errors import ConfigurationError, TemplateNotFound
from teeny.pages import PageKind, classify, gallery_header_html, process_page
from teeny.render import render_markdown

NAV_TEMPLATE = (
    "<!DOCTYPE html>\n<html><head></head><body>"
    '<nav id="nav"><ul><li><a href="/about">About</a></li><li class="item"><a href="/docs">Docs</a></li></ul></nav>'
    '<div id="page-content"></div></body></html>'
)


def read_output(site, rel):
    return BeautifulSoup((site / "public" / rel).read_text(encoding="utf-8"), "html.parser")


def test_plain_page_round_trip(site, make_args):
    """Content of the insertion point is exactly the rendered Markdown."""
    write(site / "templates" / "bare.html", '<html><body><div id="page-content"></div></body></html>')
    page = write(site / "pages" / "plain.md", "---\ntemplate: bare\n---\nX")

    assert process_page(page, make_args()) is None

    soup = read_output(site, "plain.html")
    content = soup.find(id="page-content")
    assert content.decode_contents() == render_markdown("X")
    assert soup.find("h2") is None
    assert soup.find("span", class_="date") is None


def test_output_starts_with_doctype(site, make_args):
    page = write(site / "pages" / "about.md", "Hello")
    process_page(page, make_args())
    text = (site / "public" / "about.html").read_text(encoding="utf-8")
    assert text.startswith("<!DOCTYPE html>\n<html>")


def test_unpublished_page_is_not_written(site, make_args):
    page = write(site / "pages" / "secret.md", "---\npublish: no\n---\nHidden")
    assert process_page(page, make_args()) is None
    assert not (site / "public" / "secret.html").exists()


def test_title_and_date(site, make_args):
    page = write(site / "pages" / "hello.md", "---\ntitle: Hello\ndate: 20230105\n---\nBody")
    process_page(page, make_args())

    soup = read_output(site, "hello.html")
    assert soup.title.string == "Hello"
    heading = soup.find("h2")
    assert heading.get_text() == "Hello"
    date = heading.find_next_sibling("span")
    assert date.get_text() == "January 5, 2023"
    assert "muted" in date["class"]


def test_title_falls_back_to_first_h1(site, make_args):
    page = write(site / "pages" / "doc.md", "# Getting started\n\nText")
    process_page(page, make_args())
    soup = read_output(site, "doc.html")
    assert soup.title.string == "Getting started"
    assert soup.find("h2") is None


def test_subdirectory_pages_mirror_their_path(site, make_args):
    page = write(site / "pages" / "docs" / "guide.md", "Guide")
    process_page(page, make_args())
    assert (site / "public" / "docs" / "guide.html").exists()


def test_missing_insertion_point_still_writes_page(site, make_args, capsys):
    write(site / "templates" / "empty.html", "<html><head></head><body><p>Static</p></body></html>")
    page = write(site / "pages" / "empty.md", "---\ntemplate: empty\ntitle: Empty\n---\nLost content")

    process_page(page, make_args())

    text = (site / "public" / "empty.html").read_text(encoding="utf-8")
    assert "Static" in text
    assert "Lost content" not in text
    assert "Could not find element with id 'page-content'" in capsys.readouterr().err


def test_missing_template_raises(site, make_args):
    page = write(site / "pages" / "broken.md", "---\ntemplate: nope\n---\nBody")
    with pytest.raises(TemplateNotFound):
        process_page(page, make_args())


def test_template_without_html_is_configuration_error(site, make_args):
    write(site / "templates" / "fragment.html", '<div id="page-content"></div>')
    page = write(site / "pages" / "frag.md", "---\ntemplate: fragment\n---\nBody")
    with pytest.raises(ConfigurationError):
        process_page(page, make_args())


def test_head_component_keywords_and_description(site, make_args):
    write(site / "templates" / "component_head.html", '<link rel="stylesheet" href="/main.css">')
    page = write(
        site / "pages" / "pets.md",
        "---\nkeywords: cats, dogs\ndescription: All about pets\n---\nBody",
    )
    process_page(page, make_args())

    soup = read_output(site, "pets.html")
    assert soup.head.find("link", href="/main.css") is not None
    assert soup.find("meta", attrs={"name": "keywords"})["content"] == "site, cats, dogs"
    assert soup.find("meta", attrs={"name": "description"})["content"] == "All about pets"


def test_cover_image_is_rendered_before_body(site, make_args):
    page = write(
        site / "pages" / "cover.md",
        "---\ntitle: Cover\nimage: /img/a.jpg\nimageAlt: A\nimageCaption: Garden\n---\nBody",
    )
    process_page(page, make_args())

    content = read_output(site, "cover.html").find(id="page-content")
    figure = content.find("figure", class_="cover")
    assert figure.img["src"] == "/img/a.jpg"
    assert figure.figcaption.get_text() == "Garden"
    assert content.find("h2").find_next("figure") is figure


def test_navigation_highlighting(site, make_args):
    write(site / "templates" / "nav.html", NAV_TEMPLATE)
    page = write(site / "pages" / "about.md", "---\ntemplate: nav\n---\nAbout us")
    process_page(page, make_args())

    items = read_output(site, "about.html").find(id="nav").find_all("li")
    assert items[0]["class"] == ["active"]
    assert items[1]["class"] == ["item"]


def test_navigation_matches_target_directory(site, make_args):
    write(site / "templates" / "nav.html", NAV_TEMPLATE)
    page = write(site / "pages" / "docs" / "guide.md", "---\ntemplate: nav\n---\nGuide")
    process_page(page, make_args())

    items = read_output(site, "docs/guide.html").find(id="nav").find_all("li")
    assert "active" not in items[0].get("class", [])
    assert items[1]["class"] == ["item", "active"]


def test_collected_page_is_deferred(site, make_args):
    page = write(site / "pages" / "blog" / "first.md", "---\ntitle: First\ndate: 20230101\n---\nHello")

    result = process_page(page, make_args(), order=7)

    assert result["name"] == "first"
    assert result["dir"] == "blog"
    assert result["permalink"] == "/blog/first"
    assert result["order"] == 7
    assert result["meta"]["date"] == 20230101
    assert result["soup"].find(id="page-content").find("h2").get_text() == "First"
    assert not (site / "public" / "blog" / "first.html").exists()


def test_classification(make_args):
    args = make_args()
    assert classify("blog", args) is PageKind.COLLECTED
    assert classify("photo", args) is PageKind.GALLERY
    assert classify("", args) is PageKind.STANDALONE
    assert classify("docs", args) is PageKind.STANDALONE


def test_gallery_roll_selector_and_alias(site, make_args):
    write(site / "pages" / "photo" / "roll-01.md", "---\ntitle: Roll one\n---\n![a](/img/one.jpg)")
    latest = write(
        site / "pages" / "photo" / "roll-02.md",
        "---\ntitle: Roll two\nfilm: Portra 400\ncamera: Pentax\n---\n![b](/img/two.jpg)",
    )
    args = make_args()

    process_page(latest, args)

    soup = read_output(site, "photo/roll-02.html")
    options = soup.find("select", class_="roll-select").find_all("option")
    assert [option["value"] for option in options] == ["/photo/roll-02", "/photo/roll-01"]
    assert options[0].has_attr("selected")
    assert not options[1].has_attr("selected")
    details = soup.find("ul", class_="roll-details").get_text(" ")
    assert "Portra 400" in details
    assert "Pentax" in details
    preload = soup.head.find("link", attrs={"rel": "preload"})
    assert preload["href"] == "/img/two.jpg"
    assert (site / "public" / "photo.html").read_text(encoding="utf-8") == (
        site / "public" / "photo" / "roll-02.html"
    ).read_text(encoding="utf-8")


def test_older_gallery_entry_is_not_aliased(site, make_args):
    older = write(site / "pages" / "photo" / "roll-01.md", "---\ntitle: Roll one\n---\nOne")
    write(site / "pages" / "photo" / "roll-02.md", "---\ntitle: Roll two\n---\nTwo")

    process_page(older, make_args())

    assert (site / "public" / "photo" / "roll-01.html").exists()
    assert not (site / "public" / "photo.html").exists()


def test_unpublished_rolls_are_left_out_of_the_gallery(site, make_args):
    older = write(site / "pages" / "photo" / "roll-01.md", "---\ntitle: Roll one\n---\nOne")
    write(site / "pages" / "photo" / "roll-02.md", "---\ntitle: Roll two\npublish: no\n---\nTwo")

    process_page(older, make_args())

    soup = read_output(site, "photo/roll-01.html")
    options = soup.find("select", class_="roll-select").find_all("option")
    assert [option["value"] for option in options] == ["/photo/roll-01"]
    assert (site / "public" / "photo.html").exists()


def test_roll_selector_escapes_directory():
    header = BeautifulSoup(gallery_header_html({}, "Roll", 'a"b&c', "roll-01", ["roll-01"]), "html.parser")
    assert header.find("option")["value"] == '/a"b&c/roll-01'
    assert "&amp;c" in gallery_header_html({}, "Roll", "a&c", "roll-01", ["roll-01"])
