from __future__ import annotations

import datetime as dt
import math
import re
from pathlib import Path
from typing import Optional

import yaml

from .md2html import render_markdown
from .models import ContentMetadata, ParsedMarkdown
from .utils import parse_bool

CJK_RE = re.compile(r"[\u3040-\u30ff\u3400-\u4dbf\u4e00-\u9fff\uac00-\ud7af]")
WORD_RE = re.compile(r"\w+(?:'\w+)?")
SLUG_RE = re.compile(r"[\W_]+", re.UNICODE)
WORDS_PER_MINUTE = 200
CONTENT_SUFFIX = ".md"


class ContentError(Exception):
    pass


def slugify(text: str) -> str:
    text = SLUG_RE.sub("-", text.lower()).strip("-")
    return text or "post"


def slug_from_filename(filename: str) -> str:
    name = Path(filename).name
    if name.endswith(CONTENT_SUFFIX):
        name = name[: -len(CONTENT_SUFFIX)]
    return slugify(name)


def parse_list(value: str) -> list[str]:
    value = value.strip()
    if value.startswith("[") and value.endswith("]"):
        inner = value[1:-1]
        items = [item.strip().strip("'\"") for item in inner.split(",")]
    else:
        items = [item.strip() for item in value.split(",")]
    return [item for item in items if item]


def parse_front_matter(text: str) -> tuple[dict, str]:
    """Split a content file into its YAML front-matter and markdown body.

    Files without a front-matter block return ``{}`` and the whole text.
    A block that is not a YAML mapping is dropped and also yields ``{}``.
    """
    clean_text = text.lstrip("\ufeff")
    lines = clean_text.splitlines()
    if not lines or lines[0].strip() != "---":
        return {}, clean_text

    end = None
    for i in range(1, len(lines)):
        if lines[i].strip() == "---":
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
    return meta, body


def count_words(text: str) -> int:
    cjk_count = len(CJK_RE.findall(text))
    text = CJK_RE.sub(" ", text)
    word_count = len(WORD_RE.findall(text))
    return cjk_count + word_count


def estimate_reading_time(text: str) -> str:
    minutes = count_words(text) / WORDS_PER_MINUTE
    return f"{math.ceil(round(minutes, 2))} min read"


def _text_field(value: object) -> Optional[str]:
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        return value.strip() or None
    if isinstance(value, (int, float)):
        return str(value)
    return None


def _date_field(value: object) -> Optional[str]:
    if isinstance(value, (dt.date, dt.datetime)):
        return value.isoformat()
    if isinstance(value, str):
        return value.strip() or None
    return None


def _categories_field(value: object) -> tuple[str, ...]:
    if isinstance(value, str):
        return tuple(parse_list(value))
    if isinstance(value, list):
        items = [str(item).strip() for item in value if isinstance(item, (str, int, float))]
        return tuple(item for item in items if item)
    return ()


def build_metadata(meta: dict, body: str, slug: str) -> ContentMetadata:
    return ContentMetadata(
        title=_text_field(meta.get("title")),
        slug=slug,
        read_time=estimate_reading_time(body),
        date_created=_date_field(meta.get("dateCreated")),
        categories=_categories_field(meta.get("categories")),
        intro=_text_field(meta.get("intro")),
        use_latex=parse_bool(meta.get("useLatex")),
    )


def read_content_file(path: Path) -> tuple[ContentMetadata, str]:
    raw_text = path.read_text(encoding="utf-8")
    meta, body = parse_front_matter(raw_text)
    return build_metadata(meta, body, slug_from_filename(path.name)), body


def list_content_files(directory: Path) -> list[Path]:
    if not directory.is_dir():
        raise ContentError(f"Content directory not found: {directory}")
    files = sorted(directory.glob(f"*{CONTENT_SUFFIX}"), key=lambda p: p.name)
    seen: dict[str, Path] = {}
    for path in files:
        slug = slug_from_filename(path.name)
        if slug in seen:
            raise ContentError(f"Duplicate slug '{slug}': {seen[slug].name} and {path.name}")
        seen[slug] = path
    return files


def load_metadata(directory: Path) -> list[ContentMetadata]:
    return [read_content_file(path)[0] for path in list_content_files(directory)]


def parse_content_file(path: Path) -> ParsedMarkdown:
    metadata, body = read_content_file(path)
    return ParsedMarkdown(metadata=metadata, html_string=render_markdown(body))


def load_content(directory: Path) -> list[ParsedMarkdown]:
    return [parse_content_file(path) for path in list_content_files(directory)]


def load_post(directory: Path, slug: str) -> ParsedMarkdown:
    for path in list_content_files(directory):
        if slug_from_filename(path.name) == slug:
            return parse_content_file(path)
    raise ContentError(f"No content file for slug '{slug}' in {directory}")
