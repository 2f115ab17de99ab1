from __future__ import annotations

import argparse
import logging
import os
import sys
import time
from pathlib import Path
from typing import Optional, Sequence

from .config import load_config, resolve_about_html, resolve_excluded_languages
from .content import ContentError, load_content
from .github import DEFAULT_API_BASE, GitHubClient
from .pages import (
    build_404,
    build_about,
    build_categories,
    build_highlight_css,
    build_index,
    build_posts,
    build_rss,
    build_sitemap,
    group_by_category,
    sort_by_date,
)
from .render import DEFAULT_STATIC_DIR, copy_static, read_template
from .server import create_app
from .utils import clean_output_dir, parse_bool, parse_int

FEED_LIMIT = 20


def build_site(args: argparse.Namespace) -> int:
    """Generate the static site and return the number of posts written."""
    contents_dir = Path(args.contents)
    output_dir = Path(args.output)
    templates_dir = Path(args.templates)
    project_root = Path.cwd()

    try:
        posts = load_content(contents_dir)
    except (ContentError, OSError, UnicodeDecodeError) as exc:
        print(f"Failed to load content: {exc}", file=sys.stderr)
        sys.exit(1)

    about_html = resolve_about_html(args)

    if args.clean:
        clean_output_dir(output_dir, project_root)
    output_dir.mkdir(parents=True, exist_ok=True)

    copy_static(DEFAULT_STATIC_DIR, output_dir)
    static_dir = Path(args.static) if args.static else None
    if static_dir is not None and static_dir.exists():
        copy_static(static_dir, output_dir)
    build_highlight_css(output_dir, args.code_style, args.code_style_dark)

    base_template = read_template(templates_dir, "base.html")
    items = sort_by_date(post.metadata for post in posts)
    category_map = group_by_category(items)
    site_url = (args.site_url or "").strip()

    build_index(base_template, output_dir, items, args)
    build_posts(base_template, output_dir, posts, args)
    build_categories(base_template, output_dir, category_map, args)
    build_about(base_template, output_dir, args, about_html)
    if args.enable_404:
        build_404(base_template, output_dir, args)
    if args.enable_rss:
        build_rss(output_dir, items, site_url, args, args.feed_limit)
    if args.enable_sitemap:
        build_sitemap(output_dir, items, category_map, site_url)
    return len(posts)


def make_client(args: argparse.Namespace) -> GitHubClient:
    username = (args.github_username or "").strip()
    if not username:
        print("A GitHub username is required (--github-username or github_username).", file=sys.stderr)
        sys.exit(1)
    return GitHubClient(username, api_base=args.github_api, token=os.environ.get("GITHUB_TOKEN") or None)


def serve_site(args: argparse.Namespace) -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    client = make_client(args)
    site_dir: Optional[Path] = Path(args.output) if args.serve_site else None
    if site_dir is not None and not site_dir.exists():
        print(f"Output directory not found: {site_dir}. Run the build command first.", file=sys.stderr)
        sys.exit(1)
    app = create_app(client, resolve_excluded_languages(args.excluded_languages), site_dir)
    app.run(host=args.host, port=args.port)


def main(argv: Optional[Sequence[str]] = None) -> None:
    argv = list(sys.argv[1:] if argv is None else argv)
    pre_parser = argparse.ArgumentParser(add_help=False)
    pre_parser.add_argument(
        "--config",
        default="site.toml",
        help="Path to site config file (TOML/YAML/JSON).",
    )
    pre_args, _ = pre_parser.parse_known_args(argv)
    config = load_config(Path(pre_args.config))

    def cfg_value(key: str, default: object) -> object:
        value = config.get(key)
        return default if value is None else value

    def cfg_str(key: str, default: str) -> str:
        value = cfg_value(key, default)
        return default if value is None else str(value)

    def cfg_bool(key: str, default: bool) -> bool:
        value = cfg_value(key, default)
        return parse_bool(value) if value is not None else default

    def cfg_int(key: str, default: int) -> int:
        value = cfg_value(key, default)
        return parse_int(value, default)

    parser = argparse.ArgumentParser(description="Markdown blog generator with GitHub stats.")
    parser.add_argument("--config", default=pre_args.config, help="Path to site config file (TOML/YAML/JSON).")
    subparsers = parser.add_subparsers(dest="command", required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--output", default=cfg_str("output", "dist"), help="Output directory for the site.")
    common.add_argument(
        "--github-username",
        default=cfg_str("github_username", ""),
        help="GitHub account whose profile and repositories feed the stats.",
    )

    build_parser = subparsers.add_parser("build", parents=[common], help="Generate the static site.")
    build_parser.add_argument(
        "--contents", default=cfg_str("contents", "contents"), help="Directory containing Markdown content."
    )
    build_parser.add_argument(
        "--static", default=cfg_str("static", "static"), help="Directory of extra static assets to copy."
    )
    build_parser.add_argument(
        "--templates", default=cfg_str("templates", "templates"), help="Directory overriding base.html."
    )
    build_parser.add_argument("--site-name", default=cfg_str("site_name", "blogsite"), help="Site title.")
    build_parser.add_argument(
        "--site-description",
        default=cfg_str("site_description", "Notes on software engineering."),
        help="Site description.",
    )
    build_parser.add_argument(
        "--site-url",
        default=cfg_str("site_url", ""),
        help="Public site URL used for RSS and sitemap.",
    )
    build_parser.add_argument("--author", default=cfg_str("author", ""), help="Author name shown on user cards.")
    build_parser.add_argument("--lang", default=cfg_str("lang", "en"), help="Value of the html lang attribute.")
    build_parser.add_argument(
        "--linkedin-username",
        default=cfg_str("linkedin_username", ""),
        help="LinkedIn handle linked from the footer and about page.",
    )
    build_parser.add_argument(
        "--stats-api",
        default=cfg_str("stats_api", ""),
        help="Base URL of the stats API (empty = same origin).",
    )
    build_parser.add_argument(
        "--about-file",
        default=cfg_str("about_file", ""),
        help="Markdown, HTML or text file used for the about page.",
    )
    build_parser.add_argument(
        "--code-style", default=cfg_str("code_style", "friendly"), help="Pygments style for code blocks."
    )
    build_parser.add_argument(
        "--code-style-dark",
        default=cfg_str("code_style_dark", "monokai"),
        help="Pygments style for code blocks in dark mode.",
    )
    build_parser.add_argument(
        "--clean",
        action=argparse.BooleanOptionalAction,
        default=cfg_bool("clean", True),
        help="Clean output directory before build.",
    )
    build_parser.add_argument(
        "--feed-limit",
        default=cfg_int("feed_limit", FEED_LIMIT),
        type=int,
        help="Maximum number of posts in the RSS feed.",
    )
    build_parser.add_argument(
        "--enable-rss",
        action=argparse.BooleanOptionalAction,
        default=cfg_bool("enable_rss", True),
        help="Generate rss.xml.",
    )
    build_parser.add_argument(
        "--enable-sitemap",
        action=argparse.BooleanOptionalAction,
        default=cfg_bool("enable_sitemap", True),
        help="Generate sitemap.xml.",
    )
    build_parser.add_argument(
        "--enable-404",
        action=argparse.BooleanOptionalAction,
        default=cfg_bool("enable_404", True),
        help="Generate 404.html.",
    )

    serve_parser = subparsers.add_parser("serve", parents=[common], help="Run the GitHub stats API.")
    serve_parser.add_argument("--host", default=cfg_str("host", "127.0.0.1"), help="Interface to bind.")
    serve_parser.add_argument("--port", default=cfg_int("port", 8000), type=int, help="Port to listen on.")
    serve_parser.add_argument(
        "--github-api", default=cfg_str("github_api", DEFAULT_API_BASE), help="GitHub REST API base URL."
    )
    serve_parser.add_argument(
        "--excluded-languages",
        default=cfg_value("excluded_languages", None),
        help="Comma separated languages left out of the language stats.",
    )
    serve_parser.add_argument(
        "--serve-site",
        action=argparse.BooleanOptionalAction,
        default=cfg_bool("serve_site", True),
        help="Also serve the generated site from the output directory.",
    )

    args = parser.parse_args(argv)
    if args.command == "serve":
        serve_site(args)
        return

    start = time.perf_counter()
    count = build_site(args)
    elapsed = time.perf_counter() - start
    print(f"Built {count} posts in {elapsed:.2f}s.")
    print(f"Site generated in: {args.output}")
