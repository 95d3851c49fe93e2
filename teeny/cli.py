from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

from .blog import build_blog
from .config import DEFAULTS, load_config
from .errors import ConfigurationError, SiteError
from .render import copy_assets
from .scaffold import init_project
from .server import develop
from .utils import clean_output_dir, parse_bool, parse_int, parse_list, write_cname, write_nojekyll
from .walker import walk_pages


def build_site(args: argparse.Namespace) -> int:
    """Run one full build and return the number of pages that failed."""
    pages_dir = Path(args.pages)
    templates_dir = Path(args.templates)
    static_dir = Path(args.static)
    output_dir = Path(args.output)
    project_root = Path.cwd()

    if not pages_dir.is_dir():
        raise ConfigurationError(f"Pages directory not found: {pages_dir}")

    clean_output_dir(output_dir, project_root)
    output_dir.mkdir(parents=True, exist_ok=True)

    copy_assets(templates_dir, output_dir, (".html",))
    copy_assets(pages_dir, output_dir, (".md",))
    copy_assets(static_dir, output_dir)

    collected, failures = walk_pages(args)
    build_blog(collected, args)

    custom_domain = (args.custom_domain or "").strip()
    if custom_domain:
        write_cname(output_dir, custom_domain)
    if args.write_nojekyll:
        write_nojekyll(output_dir)

    for path in failures:
        print(f"Failed to build page: {path}", file=sys.stderr)
    return len(failures)


def build_parser(config: dict) -> argparse.ArgumentParser:
    def cfg_value(key: str) -> object:
        value = config.get(key)
        return DEFAULTS[key] if value is None else value

    def cfg_str(key: str) -> str:
        return str(cfg_value(key))

    def cfg_int(key: str) -> int:
        return parse_int(cfg_value(key), DEFAULTS[key])

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--config", default="site.toml", help="Path to site config file (TOML/YAML/JSON).")
    common.add_argument("--pages", default=cfg_str("pages"), help="Directory containing Markdown pages.")
    common.add_argument("--templates", default=cfg_str("templates"), help="Directory containing HTML templates.")
    common.add_argument("--static", default=cfg_str("static"), help="Directory containing static assets.")
    common.add_argument("--comments", default=cfg_str("comments"), help="Directory containing post comments.")
    common.add_argument("--output", default=cfg_str("output"), help="Output directory for the site.")
    common.add_argument(
        "--posts-per-page",
        default=cfg_int("posts_per_page"),
        type=int,
        help="Number of posts on each blog index page.",
    )
    common.add_argument(
        "--build-workers",
        default=cfg_int("build_workers"),
        type=int,
        help="Number of worker threads for page rendering (0 = auto).",
    )
    common.add_argument(
        "--custom-domain",
        default=cfg_str("custom_domain"),
        help="Custom domain to write into CNAME.",
    )
    common.add_argument(
        "--write-nojekyll",
        action=argparse.BooleanOptionalAction,
        default=parse_bool(cfg_value("write_nojekyll")),
        help="Write .nojekyll in the output directory.",
    )

    parser = argparse.ArgumentParser(prog="teeny", description="Tiny opinionated static site builder.")
    subparsers = parser.add_subparsers(dest="command", required=True, metavar="command")
    subparsers.add_parser("init", parents=[common], help="Create the pages, static and templates directories.")
    subparsers.add_parser("build", parents=[common], help="Build the site into the output directory.")
    develop_parser = subparsers.add_parser(
        "develop", parents=[common], help="Build, serve and rebuild on change."
    )
    develop_parser.add_argument("port", nargs="?", type=int, default=cfg_int("port"), help="Port to serve on.")
    parser.set_defaults(
        collected_dirs=parse_list(cfg_value("collected_dirs")),
        gallery_dirs=parse_list(cfg_value("gallery_dirs")),
        latest_alias=cfg_str("latest_alias"),
        index_page=cfg_str("index_page"),
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    pre_parser = argparse.ArgumentParser(add_help=False)
    pre_parser.add_argument("--config", default="site.toml")
    pre_args, _ = pre_parser.parse_known_args(argv)
    try:
        config = load_config(Path(pre_args.config))
    except ConfigurationError as exc:
        print(exc, file=sys.stderr)
        return 1

    args = build_parser(config).parse_args(argv)

    if args.command == "init":
        for path in init_project(Path.cwd()):
            print(f"Created {path}")
        return 0

    if args.command == "develop":
        develop(args, build_site)
        return 0

    start = time.perf_counter()
    try:
        failed = build_site(args)
    except SiteError as exc:
        print(exc, file=sys.stderr)
        return 1
    elapsed = time.perf_counter() - start
    print(f"Build completed in {elapsed:.2f}s.")
    if failed:
        print(f"{failed} page(s) failed to build.", file=sys.stderr)
        return 1
    print(f"Site generated in: {args.output}")
    return 0
