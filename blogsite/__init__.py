"""
blogsite package

Static blog generator with a small GitHub statistics API:
- `content.py`: load markdown content files and their front-matter
- `md2html.py` / `figures.py`: the markdown to HTML pipeline
- `pages.py` / `render.py`: compose static pages from content and components
- `github.py` / `server.py`: GitHub statistics client and JSON endpoints
- `cli.py`: `build` and `serve` entry points
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
