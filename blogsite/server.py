from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional

from flask import Flask, jsonify, send_from_directory

from .github import GitHubClient, count_stars, language_usage

logger = logging.getLogger(__name__)

CACHE_CONTROL = "public, s-maxage=1200, stale-while-revalidate=600"


def create_app(
    client: GitHubClient,
    excluded_languages: Iterable[str] = (),
    site_dir: Optional[Path] = None,
) -> Flask:
    """Build the stats API, optionally also serving a generated site."""
    app = Flask(__name__, static_folder=None)
    excluded = list(excluded_languages)

    def cached_json(payload: object):
        response = jsonify(payload)
        response.headers["Cache-Control"] = CACHE_CONTROL
        return response

    @app.route("/api/github/user")
    def github_user():
        return cached_json(client.get_user().to_dict())

    @app.route("/api/github/stars")
    def github_stars():
        return cached_json({"stars": count_stars(client.get_repositories())})

    @app.route("/api/github/languages")
    def github_languages():
        shares = language_usage(client.get_repositories(), excluded)
        return cached_json([share.to_dict() for share in shares])

    if site_dir is not None:
        root = Path(site_dir).resolve()
        logger.info("Serving site from %s", root)

        @app.route("/", defaults={"path": "index.html"})
        @app.route("/<path:path>")
        def site_file(path: str):
            if (root / path).is_dir():
                path = f"{path.rstrip('/')}/index.html"
            return send_from_directory(root, path)

        @app.errorhandler(404)
        def not_found(error):
            if (root / "404.html").exists():
                return send_from_directory(root, "404.html"), 404
            return error

    return app
