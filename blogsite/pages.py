from __future__ import annotations

import datetime as dt
import html
import sys
from pathlib import Path
from typing import Iterable, Optional

from pygments.formatters import HtmlFormatter
from pygments.util import ClassNotFound

from .content import slugify
from .models import ContentMetadata, ParsedMarkdown
from .render import fix_relative_img_src, render_template, write_text
from .utils import join_url, parse_date, rfc822_date

KATEX_VERSION = "0.16.9"
KATEX_HEAD = (
    f'<link rel="stylesheet" href="https://cdn.jsdelivr.net/npm/katex@{KATEX_VERSION}/dist/katex.min.css">'
    f'<script src="https://cdn.jsdelivr.net/npm/katex@{KATEX_VERSION}/dist/katex.min.js" defer></script>'
    f'<script src="https://cdn.jsdelivr.net/npm/katex@{KATEX_VERSION}/dist/contrib/auto-render.min.js" defer></script>'
    '<script src="{root}/js/math.js" defer></script>'
)
GITHUB_URL = "https://github.com/{}"
LINKEDIN_URL = "https://linkedin.com/in/{}"


def sort_by_date(items: Iterable[ContentMetadata]) -> list[ContentMetadata]:
    """Newest ``dateCreated`` first; undated items last, ties by slug."""
    dated = []
    undated = []
    for item in items:
        created = parse_date(item.date_created)
        if created is None:
            undated.append(item)
        else:
            dated.append((created, item))
    dated.sort(key=lambda pair: pair[1].slug)
    dated.sort(key=lambda pair: pair[0], reverse=True)
    undated.sort(key=lambda item: item.slug)
    return [item for _, item in dated] + undated


def group_by_category(items: Iterable[ContentMetadata]) -> dict[str, tuple[str, list[ContentMetadata]]]:
    """Map each category page slug to its display name and posts.

    Names that slugify alike ("Go" and "go", "C" and "C++") share one page,
    titled by the first name seen.
    """
    category_map: dict[str, tuple[str, list[ContentMetadata]]] = {}
    for item in items:
        for category in item.categories:
            _, posts = category_map.setdefault(slugify(category), (category, []))
            if not posts or posts[-1] is not item:
                posts.append(item)
    return category_map


def display_title(metadata: ContentMetadata) -> str:
    return metadata.title or metadata.slug


def build_navbar(root: str, site_name: str) -> str:
    return (
        '<nav class="navbar"><div class="navbar-inner">'
        f'<a class="brand" href="{root}/index.html">'
        f'<span class="brand-prompt">&gt;</span>{html.escape(site_name)}'
        '<span class="brand-cursor"></span></a>'
        '<div class="nav-links">'
        f'<a class="nav-link" href="{root}/index.html">Posts</a>'
        f'<a class="nav-link" href="{root}/about.html">About</a>'
        '<button class="theme-toggle" type="button" aria-label="Toggle color theme" data-theme-toggle>'
        "&#9790;</button>"
        "</div></div></nav>"
    )


def build_social_links(args: object, css_class: str) -> str:
    links = []
    github_username = (getattr(args, "github_username", "") or "").strip()
    linkedin_username = (getattr(args, "linkedin_username", "") or "").strip()
    if github_username:
        url = GITHUB_URL.format(github_username)
        links.append(f'<a class="{css_class}" href="{url}" rel="noopener" target="_blank">Github</a>')
    if linkedin_username:
        url = LINKEDIN_URL.format(linkedin_username)
        links.append(f'<a class="{css_class}" href="{url}" rel="noopener" target="_blank">Linkedin</a>')
    return "".join(links)


def build_footer(root: str, args: object) -> str:
    year = dt.datetime.now().year
    return (
        '<footer class="footer"><hr>'
        f'<div class="footer-links">{build_social_links(args, "footer-link")}</div>'
        f'<p class="copyright">Copyright {year} &#169; '
        f'<a href="{root}/index.html">{html.escape(args.site_name)}</a></p>'
        "</footer>"
    )


def build_user_card(args: object) -> str:
    author = html.escape(getattr(args, "author", "") or args.site_name)
    return (
        '<div class="user-card" data-github-user>'
        '<div class="avatar"><img class="avatar-image" alt="" src="" hidden></div>'
        f'<div class="user-info"><span class="user-name">{author}</span>'
        '<span class="user-bio"></span></div>'
        "</div>"
    )


def build_github_stats() -> str:
    return (
        '<div class="stat-card" data-github-stats>'
        '<h3 class="stat-label">Github Account</h3>'
        '<div class="stat-row">'
        '<div class="stat"><span class="stat-name">Followers</span>'
        '<span class="stat-number" data-stat="followers">-</span></div>'
        '<div class="stat"><span class="stat-name">Stars</span>'
        '<span class="stat-number" data-stat="stars">-</span></div>'
        "</div></div>"
    )


def build_language_stats() -> str:
    return (
        '<div class="stat-card language-stats" data-language-stats>'
        '<h3 class="stat-label">Most used languages</h3>'
        '<ul class="language-list"><li class="language-loading">Loading...</li></ul>'
        "</div>"
    )


def build_category_chips(categories: Iterable[str], root: str) -> str:
    return " ".join(
        f'<a class="chip" href="{root}/categories/{slugify(cat)}.html">{html.escape(cat)}</a>'
        for cat in categories
    )


def build_content_card(metadata: ContentMetadata, root: str) -> str:
    url = f"{root}/posts/{metadata.slug}.html"
    date_html = html.escape(metadata.date_created or "")
    separator = " &bull; " if date_html else ""
    return (
        '<article class="content-card">'
        f'<h2 class="content-title"><a href="{url}">{html.escape(display_title(metadata))}</a></h2>'
        f'<p class="content-intro">{html.escape(metadata.intro or "")}</p>'
        f'<p class="content-meta">{date_html}{separator}{html.escape(metadata.read_time)}</p>'
        f'<div class="content-tags">{build_category_chips(metadata.categories, root)}</div>'
        "</article>"
    )


def render_page(
    base_template: str,
    args: object,
    root: str,
    title: str,
    content: str,
    extra_head: str = "",
) -> str:
    if getattr(args, "enable_rss", False) and (getattr(args, "site_url", "") or "").strip():
        feed_link = (
            f'<link rel="alternate" type="application/rss+xml" '
            f'title="{html.escape(args.site_name)}" href="{root}/rss.xml">'
        )
        extra_head = feed_link + extra_head
    return render_template(
        base_template,
        title=html.escape(title),
        root=root,
        lang=html.escape(getattr(args, "lang", "en") or "en"),
        site_name=html.escape(args.site_name),
        site_description=html.escape(args.site_description),
        stats_api=html.escape(getattr(args, "stats_api", "") or ""),
        extra_head=extra_head,
        navbar=build_navbar(root, args.site_name),
        footer=build_footer(root, args),
        content=content,
    )


def build_index(base_template: str, output_dir: Path, items: list[ContentMetadata], args: object) -> None:
    root = "."
    cards = "\n".join(build_content_card(item, root) for item in items)
    if not cards:
        cards = '<p class="empty">No posts yet.</p>'
    content = f'<section class="content-list">{cards}</section>'
    html_doc = render_page(base_template, args, root, f"{args.site_name} | Posts", content)
    write_text(output_dir / "index.html", html_doc)


def build_post_page(base_template: str, post: ParsedMarkdown, args: object) -> str:
    root = ".."
    metadata = post.metadata
    title = display_title(metadata)
    date_html = (
        f'<span class="post-date">{html.escape(metadata.date_created)}</span>' if metadata.date_created else ""
    )
    content = (
        '<article class="post">'
        '<header class="post-head">'
        f'<h1 class="post-title">{html.escape(title)}</h1>'
        '<div class="post-meta">'
        f"{build_user_card(args)}"
        f'<div class="post-times">{date_html}'
        f'<span class="post-read-time">{html.escape(metadata.read_time)}</span></div>'
        "</div>"
        f'<div class="post-tags">{build_category_chips(metadata.categories, root)}</div>'
        "</header>"
        f'<div class="markdown-body" id="markdown-view">{fix_relative_img_src(post.html_string, root)}</div>'
        f'<div class="post-footer"><a href="{root}/index.html">Back to posts</a></div>'
        "</article>"
    )
    extra_head = KATEX_HEAD.replace("{root}", root) if metadata.use_latex else ""
    return render_page(base_template, args, root, f"{title} | {args.site_name}", content, extra_head)


def build_posts(base_template: str, output_dir: Path, posts: list[ParsedMarkdown], args: object) -> None:
    for post in posts:
        html_doc = build_post_page(base_template, post, args)
        write_text(output_dir / "posts" / f"{post.metadata.slug}.html", html_doc)


def build_categories(
    base_template: str,
    output_dir: Path,
    category_map: dict[str, tuple[str, list[ContentMetadata]]],
    args: object,
) -> None:
    root = ".."
    for slug, (category, items) in sorted(category_map.items(), key=lambda x: x[1][0].lower()):
        cards = "\n".join(build_content_card(item, root) for item in items)
        content = (
            '<div class="section-head">'
            f"<h2>{html.escape(category)}</h2>"
            f"<p>{len(items)} post{'s' if len(items) != 1 else ''} in this category.</p>"
            "</div>"
            f'<section class="content-list">{cards}</section>'
        )
        html_doc = render_page(base_template, args, root, f"{category} | {args.site_name}", content)
        write_text(output_dir / "categories" / f"{slug}.html", html_doc)


def build_about(base_template: str, output_dir: Path, args: object, about_html: str) -> None:
    root = "."
    content = (
        '<section class="about-intro">'
        f"{build_user_card(args)}"
        f'<div class="about-body">{about_html}</div>'
        f'<div class="about-links">{build_social_links(args, "about-link")}</div>'
        "</section>"
        '<section class="about-stats">'
        f"{build_github_stats()}"
        f"{build_language_stats()}"
        "</section>"
    )
    html_doc = render_page(base_template, args, root, f"About | {args.site_name}", content)
    write_text(output_dir / "about.html", html_doc)


def build_404(base_template: str, output_dir: Path, args: object) -> None:
    root = "."
    content = (
        '<div class="section-head">'
        "<h2>404</h2>"
        "<p>The page you requested does not exist.</p>"
        "</div>"
        f'<a class="post-more" href="{root}/index.html">Back to posts</a>'
    )
    html_doc = render_page(base_template, args, root, f"404 | {args.site_name}", content)
    write_text(output_dir / "404.html", html_doc)


def build_rss(
    output_dir: Path, items: list[ContentMetadata], site_url: str, args: object, feed_limit: int
) -> None:
    if not site_url:
        return
    site_url = site_url.rstrip("/")
    entries = []
    latest: Optional[dt.datetime] = None
    for item in items[:feed_limit]:
        link = join_url(site_url, f"posts/{item.slug}.html")
        lines = [
            "<item>",
            f"<title>{html.escape(display_title(item))}</title>",
            f"<link>{link}</link>",
            f"<guid>{link}</guid>",
        ]
        created = parse_date(item.date_created)
        if created is not None:
            lines.append(f"<pubDate>{rfc822_date(created)}</pubDate>")
            latest = created if latest is None else max(latest, created)
        for category in item.categories:
            lines.append(f"<category>{html.escape(category)}</category>")
        lines.append(f"<description>{html.escape(item.intro or '')}</description>")
        lines.append("</item>")
        entries.append("\n".join(lines))
    last_build = rfc822_date(latest or dt.datetime.now(dt.timezone.utc))
    rss = "\n".join(
        [
            '<?xml version="1.0" encoding="UTF-8"?>',
            '<rss version="2.0">',
            "<channel>",
            f"<title>{html.escape(args.site_name)}</title>",
            f"<link>{site_url}/</link>",
            f"<description>{html.escape(args.site_description)}</description>",
            f"<lastBuildDate>{last_build}</lastBuildDate>",
            "\n".join(entries),
            "</channel>",
            "</rss>",
        ]
    )
    write_text(output_dir / "rss.xml", rss)


def build_sitemap(
    output_dir: Path, items: list[ContentMetadata], category_map: dict, site_url: str
) -> None:
    if not site_url:
        return
    site_url = site_url.rstrip("/")
    urls: list[tuple[str, Optional[dt.datetime]]] = [
        (site_url + "/", None),
        (join_url(site_url, "about.html"), None),
    ]
    for item in items:
        urls.append((join_url(site_url, f"posts/{item.slug}.html"), parse_date(item.date_created)))
    for slug in sorted(category_map):
        urls.append((join_url(site_url, f"categories/{slug}.html"), None))
    rows = []
    for url, lastmod in urls:
        if lastmod:
            rows.append(f"<url>\n<loc>{url}</loc>\n<lastmod>{lastmod.date().isoformat()}</lastmod>\n</url>")
        else:
            rows.append(f"<url>\n<loc>{url}</loc>\n</url>")
    sitemap = "\n".join(
        [
            '<?xml version="1.0" encoding="UTF-8"?>',
            '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">',
            "\n".join(rows),
            "</urlset>",
        ]
    )
    write_text(output_dir / "sitemap.xml", sitemap)


def build_highlight_css(output_dir: Path, light_style: str, dark_style: str) -> None:
    try:
        css = "\n".join(
            [
                HtmlFormatter(style=light_style).get_style_defs(".highlight"),
                HtmlFormatter(style=dark_style).get_style_defs('[data-theme="dark"] .highlight'),
            ]
        )
    except ClassNotFound as exc:
        print(f"Unknown code style: {exc}", file=sys.stderr)
        sys.exit(1)
    write_text(output_dir / "css" / "highlight.css", css)
