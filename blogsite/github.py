"""
GitHub REST API access for the blog's statistics widgets.

Every public method performs a single GET with no retry; any non-2xx answer
raises ``GitHubError`` and is left for the caller to surface.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

import requests

from .models import GithubRepository, GithubUser, LanguageShare

logger = logging.getLogger(__name__)

DEFAULT_API_BASE = "https://api.github.com"
REPOS_PER_PAGE = 100


class GitHubError(RuntimeError):
    pass


class GitHubClient:
    def __init__(
        self,
        username: str,
        api_base: str = DEFAULT_API_BASE,
        token: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = 30,
    ) -> None:
        if not username.strip():
            raise GitHubError("GitHub username is required.")
        self.username = username.strip()
        self._api_base = api_base.rstrip("/")
        self._token = token
        self._session = session or requests.Session()
        self._timeout = timeout

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": "blogsite",
        }
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def _get(self, path: str, params: Optional[dict[str, Any]] = None) -> Any:
        url = f"{self._api_base}{path}"
        logger.debug("GET %s params=%s", url, params)
        r = self._session.get(url, headers=self._headers(), params=params, timeout=self._timeout)
        if r.status_code >= 400:
            try:
                payload = r.json()
            except ValueError:
                payload = {"message": r.text}
            message = payload.get("message", payload) if isinstance(payload, dict) else payload
            logger.warning("GitHub API error %s for %s", r.status_code, path)
            raise GitHubError(f"GitHub API error {r.status_code} GET {path}: {message}")
        return r.json()

    def get_user(self) -> GithubUser:
        data = self._get(f"/users/{self.username}")
        if not isinstance(data, dict):
            raise GitHubError(f"Unexpected user payload for {self.username}")
        return GithubUser(
            name=data.get("name"),
            username=data.get("login") or self.username,
            avatar_url=data.get("avatar_url"),
            bio=data.get("bio"),
            followers=int(data.get("followers") or 0),
        )

    def get_repositories(self) -> list[GithubRepository]:
        data = self._get(f"/users/{self.username}/repos", params={"per_page": REPOS_PER_PAGE})
        if not isinstance(data, list):
            raise GitHubError(f"Unexpected repository listing for {self.username}")
        return [
            GithubRepository(
                fork=bool(item.get("fork")),
                language=item.get("language"),
                stargazers_count=int(item.get("stargazers_count") or 0),
            )
            for item in data
        ]


def count_stars(repositories: Iterable[GithubRepository]) -> int:
    return sum(repo.stargazers_count for repo in repositories if not repo.fork)


def language_usage(
    repositories: Iterable[GithubRepository], excluded: Iterable[str] = ()
) -> list[LanguageShare]:
    """Share of the user's own repositories written in each language.

    Forks, repositories without a detected language and the ``excluded``
    languages are not counted. Percentages sum to 100 unless nothing is left.
    """
    excluded_set = set(excluded)
    languages = [
        repo.language
        for repo in repositories
        if not repo.fork and repo.language and repo.language not in excluded_set
    ]
    total = len(languages)
    counts: dict[str, int] = {}
    for language in languages:
        counts[language] = counts.get(language, 0) + 1
    shares = [LanguageShare(name=name, percentage=count * 100 / total) for name, count in counts.items()]
    shares.sort(key=lambda share: (-share.percentage, share.name))
    return shares
