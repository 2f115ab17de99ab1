from __future__ import annotations

import xml.etree.ElementTree as etree

from markdown import Markdown
from markdown.extensions import Extension
from markdown.treeprocessors import Treeprocessor


class FigureTreeprocessor(Treeprocessor):
    """Turn paragraphs holding a lone image into ``<figure>`` elements.

    The image's alt text becomes the ``<figcaption>``; images without alt
    text get a bare figure. Linked images and images sharing a paragraph
    with text are left alone.
    """

    def run(self, root: etree.Element) -> None:
        for paragraph in root.iter("p"):
            if len(paragraph) != 1 or (paragraph.text or "").strip():
                continue
            image = paragraph[0]
            if image.tag != "img" or (image.tail or "").strip():
                continue
            paragraph.tag = "figure"
            paragraph.text = None
            image.tail = None
            alt = (image.get("alt") or "").strip()
            if alt:
                caption = etree.SubElement(paragraph, "figcaption")
                caption.text = alt


class FigureExtension(Extension):
    def extendMarkdown(self, md: Markdown) -> None:
        # After "inline" (20) so images are real elements, before "prettify" (10).
        md.treeprocessors.register(FigureTreeprocessor(md), "figure", 15)
