from __future__ import annotations

import re
import shutil
from pathlib import Path

PACKAGE_DIR = Path(__file__).resolve().parent
DEFAULT_TEMPLATES_DIR = PACKAGE_DIR / "templates"
DEFAULT_STATIC_DIR = PACKAGE_DIR / "static"

IMG_SRC_RE = re.compile(r'<img([^>]*?)src="([^"]+)"', re.IGNORECASE)
PLACEHOLDER_RE = re.compile(r"\{\{(\w+)\}\}")
ROOTED_PREFIXES = ("http://", "https://", "data:", "#", "/", "./", "../")


def fix_relative_img_src(html_text: str, root: str) -> str:
    """Point bare image paths in post HTML at the site root."""

    def repl(match: re.Match) -> str:
        attrs, src = match.groups()
        if src.startswith(ROOTED_PREFIXES):
            return match.group(0)
        return f'<img{attrs}src="{root}/{src}"'

    return IMG_SRC_RE.sub(repl, html_text)


def render_template(template: str, **context: str) -> str:
    # Single pass: placeholders inside substituted values stay literal.
    def repl(match: re.Match) -> str:
        return context.get(match.group(1), match.group(0))

    return PLACEHOLDER_RE.sub(repl, template)


def read_template(templates_dir: Path, name: str) -> str:
    override = templates_dir / name
    source = override if override.is_file() else DEFAULT_TEMPLATES_DIR / name
    return source.read_text(encoding="utf-8")


def write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def copy_static(static_dir: Path, output_dir: Path) -> None:
    """Merge ``static_dir`` into ``output_dir``; later copies win per file."""
    shutil.copytree(static_dir, output_dir, dirs_exist_ok=True)
