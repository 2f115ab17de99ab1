from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

XOR_POST = """\
---
title: Proving the XOR swap
dateCreated: 2021-02-14
categories: [algorithms, math]
intro: Why swapping two integers with three XORs always works.
useLatex: true
---

Every value is its own inverse: $a \\oplus a = 0$.

```go
a ^= b
```
"""

ARRAY_POST = """\
---
title: Growing a dynamic array
dateCreated: 2021-01-03
categories:
  - Data Structures
intro: Amortized analysis of doubling.
---

![Capacity doubling](images/doubling.svg)

Appending is amortized constant time.
"""

DRAFT_NOTES = """\
No front-matter here, just a few words.
"""


def write_file(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(text), encoding="utf-8")
    return path


@pytest.fixture
def content_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "contents"
    write_file(directory / "xor-swap.md", XOR_POST)
    write_file(directory / "dynamic-array.md", ARRAY_POST)
    write_file(directory / "notes.md", DRAFT_NOTES)
    write_file(directory / "README.txt", "not content")
    return directory


class FakeResponse:
    def __init__(self, status_code: int, payload: object) -> None:
        self.status_code = status_code
        self._payload = payload
        self.text = str(payload)

    def json(self) -> object:
        return self._payload


class FakeSession:
    """Stands in for requests.Session, answering GETs from a path -> (status, payload) map."""

    def __init__(self, routes: dict) -> None:
        self.routes = routes
        self.calls: list[dict] = []

    def get(self, url: str, headers=None, params=None, timeout=None) -> FakeResponse:
        self.calls.append({"url": url, "headers": headers, "params": params, "timeout": timeout})
        for path, (status, payload) in self.routes.items():
            if url.endswith(path):
                return FakeResponse(status, payload)
        return FakeResponse(404, {"message": "Not Found"})


USER_PAYLOAD = {
    "login": "octocat",
    "name": "The Octocat",
    "avatar_url": "https://avatars.example.com/u/1",
    "bio": "Mascot",
    "followers": 42,
    "public_repos": 8,
}

REPOS_PAYLOAD = [
    {"name": "api", "fork": False, "language": "Go", "stargazers_count": 10},
    {"name": "cli", "fork": False, "language": "Go", "stargazers_count": 5},
    {"name": "ml", "fork": False, "language": "Python", "stargazers_count": 3},
    {"name": "site", "fork": False, "language": "HTML", "stargazers_count": 1},
    {"name": "dotfiles", "fork": False, "language": None, "stargazers_count": 0},
    {"name": "rust-fork", "fork": True, "language": "Rust", "stargazers_count": 100},
]


@pytest.fixture
def github_session() -> FakeSession:
    return FakeSession(
        {
            "/users/octocat": (200, USER_PAYLOAD),
            "/users/octocat/repos": (200, REPOS_PAYLOAD),
        }
    )
