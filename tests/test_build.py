from __future__ import annotations

from pathlib import Path

import pytest

from blogsite.cli import main
from blogsite.models import ContentMetadata
from blogsite.pages import group_by_category, sort_by_date

from conftest import write_file


def run_build(tmp_path: Path, content_dir: Path, *extra: str) -> Path:
    output = tmp_path / "dist"
    main(
        [
            "--config",
            str(tmp_path / "missing.toml"),
            "build",
            "--contents",
            str(content_dir),
            "--output",
            str(output),
            "--static",
            str(tmp_path / "static"),
            "--templates",
            str(tmp_path / "templates"),
            "--no-clean",
            "--site-name",
            "Test Blog",
            "--github-username",
            "octocat",
            *extra,
        ]
    )
    return output


def metadata(slug: str, date_created) -> ContentMetadata:
    return ContentMetadata(
        title=slug.title(),
        slug=slug,
        read_time="1 min read",
        date_created=date_created,
        categories=("go",) if slug != "c" else ("go", "math"),
        intro=None,
        use_latex=False,
    )


def test_sort_by_date_newest_first_undated_last() -> None:
    items = [
        metadata("a", None),
        metadata("b", "2020-01-01"),
        metadata("c", "2021-06-01"),
        metadata("d", "not a date"),
        metadata("e", "2021-06-01T00:00:00+00:00"),
    ]
    assert [item.slug for item in sort_by_date(items)] == ["c", "e", "b", "a", "d"]


def test_group_by_category_keeps_order() -> None:
    items = [metadata("a", None), metadata("c", None)]
    grouped = group_by_category(items)
    assert grouped["go"][0] == "go"
    assert [item.slug for item in grouped["go"][1]] == ["a", "c"]
    assert [item.slug for item in grouped["math"][1]] == ["c"]


def test_group_by_category_merges_names_with_the_same_slug() -> None:
    items = [
        ContentMetadata("A", "a", "1 min read", None, ("Go", "go"), None, False),
        ContentMetadata("B", "b", "1 min read", None, ("GO",), None, False),
    ]
    grouped = group_by_category(items)
    assert list(grouped) == ["go"]
    name, posts = grouped["go"]
    assert name == "Go"
    assert [item.slug for item in posts] == ["a", "b"]


def test_categories_sharing_a_slug_share_one_page(tmp_path: Path) -> None:
    contents = tmp_path / "contents"
    write_file(contents / "about-c.md", "---\ntitle: About C\ncategories: [C]\n---\nPointers.\n")
    write_file(contents / "about-cpp.md", "---\ntitle: About C++\ncategories: [C++]\n---\nTemplates.\n")
    output = run_build(tmp_path, contents)
    assert sorted(path.name for path in (output / "categories").iterdir()) == ["c.html"]
    page = (output / "categories" / "c.html").read_text(encoding="utf-8")
    assert "About C</a>" in page
    assert "About C++</a>" in page
    assert "2 posts in this category." in page


def test_build_writes_index_and_posts(tmp_path: Path, content_dir: Path, capsys) -> None:
    output = run_build(tmp_path, content_dir, "--site-url", "https://blog.example.com")
    assert "Built 3 posts" in capsys.readouterr().out

    index = (output / "index.html").read_text(encoding="utf-8")
    assert "<title>Test Blog | Posts</title>" in index
    assert index.index("Proving the XOR swap") < index.index("Growing a dynamic array")
    assert 'href="./posts/xor-swap.html"' in index
    assert "2021-02-14 &bull; 1 min read" in index
    assert 'href="https://github.com/octocat"' in index

    for slug in ("xor-swap", "dynamic-array", "notes"):
        assert (output / "posts" / f"{slug}.html").exists()


def test_post_page_contents(tmp_path: Path, content_dir: Path) -> None:
    output = run_build(tmp_path, content_dir)
    xor_page = (output / "posts" / "xor-swap.html").read_text(encoding="utf-8")
    assert '<h1 class="post-title">Proving the XOR swap</h1>' in xor_page
    assert "katex.min.css" in xor_page
    assert 'class="arithmatex"' in xor_page
    assert 'href="../css/style.css"' in xor_page

    array_page = (output / "posts" / "dynamic-array.html").read_text(encoding="utf-8")
    assert "katex" not in array_page
    assert 'src="../images/doubling.svg"' in array_page
    assert "<figcaption>Capacity doubling</figcaption>" in array_page

    notes_page = (output / "posts" / "notes.html").read_text(encoding="utf-8")
    assert "<title>notes | Test Blog</title>" in notes_page


def test_build_writes_supporting_pages(tmp_path: Path, content_dir: Path) -> None:
    output = run_build(tmp_path, content_dir, "--site-url", "https://blog.example.com/")
    assert (output / "about.html").exists()
    assert (output / "404.html").exists()
    assert (output / "css" / "style.css").exists()
    assert (output / "js" / "stats.js").exists()
    assert ".highlight" in (output / "css" / "highlight.css").read_text(encoding="utf-8")

    category = (output / "categories" / "data-structures.html").read_text(encoding="utf-8")
    assert "Growing a dynamic array" in category
    assert "Proving the XOR swap" not in category

    rss = (output / "rss.xml").read_text(encoding="utf-8")
    assert "<link>https://blog.example.com/posts/xor-swap.html</link>" in rss
    assert "<pubDate>Sun, 14 Feb 2021 00:00:00 +0000</pubDate>" in rss

    sitemap = (output / "sitemap.xml").read_text(encoding="utf-8")
    assert "<lastmod>2021-01-03</lastmod>" in sitemap
    assert "<loc>https://blog.example.com/categories/algorithms.html</loc>" in sitemap


def test_feeds_need_site_url(tmp_path: Path, content_dir: Path) -> None:
    output = run_build(tmp_path, content_dir)
    assert not (output / "rss.xml").exists()
    assert not (output / "sitemap.xml").exists()
    assert "application/rss+xml" not in (output / "index.html").read_text(encoding="utf-8")


def test_feed_link_only_when_feed_is_written(tmp_path: Path, content_dir: Path) -> None:
    output = run_build(tmp_path, content_dir, "--site-url", "https://blog.example.com")
    post = (output / "posts" / "xor-swap.html").read_text(encoding="utf-8")
    assert 'type="application/rss+xml" title="Test Blog" href="../rss.xml"' in post

    output = run_build(tmp_path, content_dir, "--site-url", "https://blog.example.com", "--no-enable-rss")
    assert "application/rss+xml" not in (output / "index.html").read_text(encoding="utf-8")


def test_unknown_code_style_is_fatal(tmp_path: Path, content_dir: Path, capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        run_build(tmp_path, content_dir, "--code-style", "no-such-style")
    assert excinfo.value.code == 1
    assert "Unknown code style" in capsys.readouterr().err


def test_about_page_from_markdown_file(tmp_path: Path, content_dir: Path) -> None:
    about = write_file(tmp_path / "about.md", "I write **Go**.\n")
    output = run_build(tmp_path, content_dir, "--about-file", str(about))
    page = (output / "about.html").read_text(encoding="utf-8")
    assert "<strong>Go</strong>" in page
    assert "data-language-stats" in page
    assert "data-github-stats" in page


def test_custom_template_overrides_default(tmp_path: Path, content_dir: Path) -> None:
    write_file(tmp_path / "templates" / "base.html", "<main>{{title}}|{{content}}</main>")
    output = run_build(tmp_path, content_dir)
    index = (output / "index.html").read_text(encoding="utf-8")
    assert index.startswith("<main>Test Blog | Posts|")


def test_missing_contents_is_fatal(tmp_path: Path, capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        run_build(tmp_path, tmp_path / "nothing-here")
    assert excinfo.value.code == 1
    assert "Content directory not found" in capsys.readouterr().err


def test_config_file_supplies_defaults(tmp_path: Path, content_dir: Path) -> None:
    config = write_file(
        tmp_path / "site.toml",
        f'contents = "{content_dir.as_posix()}"\n'
        f'output = "{(tmp_path / "out").as_posix()}"\n'
        'site_name = "From Config"\n'
        "clean = false\n"
        "enable_404 = false\n",
    )
    main(["--config", str(config), "build", "--static", str(tmp_path / "static")])
    index = (tmp_path / "out" / "index.html").read_text(encoding="utf-8")
    assert "From Config" in index
    assert not (tmp_path / "out" / "404.html").exists()
