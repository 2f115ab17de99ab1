from __future__ import annotations

import re

import markdown
from bs4 import BeautifulSoup, NavigableString, Tag

from .figures import FigureExtension

LIST_MARKER_RE = re.compile(r"^(?P<indent>[ \t]*)(?:[-+*]|\d+[.)])\s+")
FENCE_RE = re.compile(r"^(?P<indent>[ \t]*)(`{3,}|~{3,})")
HTML_SPACE = " \t\n\r\f"
WHITESPACE_RE = re.compile(r"[ \t\n\r\f]+")

PRESERVE_TAGS = {"pre", "code", "textarea", "script", "style"}
BLOCK_TAGS = {
    "[document]",
    "address",
    "article",
    "aside",
    "blockquote",
    "dd",
    "details",
    "div",
    "dl",
    "dt",
    "figcaption",
    "figure",
    "footer",
    "h1",
    "h2",
    "h3",
    "h4",
    "h5",
    "h6",
    "header",
    "hr",
    "li",
    "main",
    "nav",
    "ol",
    "p",
    "pre",
    "section",
    "summary",
    "table",
    "tbody",
    "td",
    "tfoot",
    "th",
    "thead",
    "tr",
    "ul",
}

MARKDOWN_EXTENSIONS = [
    "fenced_code",
    "tables",
    "pymdownx.tilde",
    "pymdownx.tasklist",
    "pymdownx.magiclink",
    "pymdownx.arithmatex",
    "codehilite",
]
MARKDOWN_EXTENSION_CONFIGS = {
    "pymdownx.tilde": {"subscript": False},
    "pymdownx.arithmatex": {"generic": True},
    "codehilite": {"guess_lang": False, "css_class": "highlight"},
}


def normalize_list_spacing(text: str) -> str:
    """Insert the blank line Python-Markdown needs before a top-level list.

    GitHub renders a list that directly follows a paragraph line; Python-Markdown
    folds it into the paragraph instead. Fenced code is copied untouched.
    """
    lines = text.splitlines()
    out: list[str] = []
    in_fence = False
    fence_marker = ""
    for line in lines:
        fence_match = FENCE_RE.match(line)
        if fence_match:
            marker = fence_match.group(2)
            if not in_fence:
                in_fence = True
                fence_marker = marker
            elif marker == fence_marker:
                in_fence = False
                fence_marker = ""
            out.append(line)
            continue
        if in_fence:
            out.append(line)
            continue
        list_match = LIST_MARKER_RE.match(line)
        if list_match and not list_match.group("indent"):
            if out and out[-1].strip() and not LIST_MARKER_RE.match(out[-1]):
                out.append("")
        out.append(line)
    return "\n".join(out)


def build_markdown() -> markdown.Markdown:
    return markdown.Markdown(
        extensions=[*MARKDOWN_EXTENSIONS, FigureExtension()],
        extension_configs=MARKDOWN_EXTENSION_CONFIGS,
    )


def _is_block(node: object) -> bool:
    return isinstance(node, Tag) and node.name in BLOCK_TAGS


def _at_block_edge(sibling: object, parent: object) -> bool:
    if sibling is None:
        return parent is None or _is_block(parent)
    return _is_block(sibling)


def collapse_whitespace(html_text: str) -> str:
    soup = BeautifulSoup(html_text, "html.parser")
    for node in list(soup.find_all(string=True)):
        if type(node) is not NavigableString:
            continue
        if any(parent.name in PRESERVE_TAGS for parent in node.parents):
            continue
        text = WHITESPACE_RE.sub(" ", str(node))
        if _at_block_edge(node.previous_sibling, node.parent):
            text = text.lstrip(HTML_SPACE)
        if _at_block_edge(node.next_sibling, node.parent):
            text = text.rstrip(HTML_SPACE)
        if text:
            node.replace_with(text)
        else:
            node.extract()
    return str(soup)


def render_markdown(text: str) -> str:
    md = build_markdown()
    html_content = md.convert(normalize_list_spacing(text))
    return collapse_whitespace(html_content)
