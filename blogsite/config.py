from __future__ import annotations

import html
import json
import sys
import tomllib
from pathlib import Path

import yaml

from .content import parse_front_matter
from .md2html import render_markdown

DEFAULT_EXCLUDED_LANGUAGES = ["HTML", "CSS", "Jupyter Notebook"]


def load_config(path: Path) -> dict:
    if not path.exists():
        return {}
    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")
    if suffix == ".toml":
        try:
            data = tomllib.loads(text)
        except tomllib.TOMLDecodeError as exc:
            print(f"Invalid TOML in config file {path}: {exc}", file=sys.stderr)
            sys.exit(1)
        return data
    if suffix in {".yml", ".yaml"}:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            print(f"Invalid YAML in config file {path}: {exc}", file=sys.stderr)
            sys.exit(1)
        if data is None:
            return {}
        if not isinstance(data, dict):
            print(f"YAML config must be a mapping: {path}", file=sys.stderr)
            sys.exit(1)
        return data
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        print(f"Invalid JSON in config file {path}: {exc}", file=sys.stderr)
        sys.exit(1)
    if not isinstance(data, dict):
        print(f"JSON config must be an object: {path}", file=sys.stderr)
        sys.exit(1)
    return data


def resolve_config_path(args: object, value: str) -> Path:
    path = Path(value)
    if not path.is_absolute():
        config_path = Path(getattr(args, "config", "site.toml")).resolve()
        path = config_path.parent / path
    return path


def resolve_about_html(args: object) -> str:
    file_value = (getattr(args, "about_file", "") or "").strip()
    if file_value:
        path = resolve_config_path(args, file_value)
        if not path.exists():
            print(f"About file not found: {path}", file=sys.stderr)
        else:
            text = path.read_text(encoding="utf-8")
            suffix = path.suffix.lower()
            if suffix in {".html", ".htm"}:
                return text
            if suffix == ".md":
                _, body = parse_front_matter(text)
                return render_markdown(body)
            escaped = html.escape(text).replace("\n", "<br>")
            return f"<p>{escaped}</p>"

    site_description = getattr(args, "site_description", "")
    return f"<p>{html.escape(site_description)}</p>"


def resolve_excluded_languages(value: object) -> list[str]:
    if value is None:
        return list(DEFAULT_EXCLUDED_LANGUAGES)
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    if isinstance(value, list):
        return [str(item).strip() for item in value if str(item).strip()]
    return list(DEFAULT_EXCLUDED_LANGUAGES)
