from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ContentMetadata:
    title: Optional[str]
    slug: str
    read_time: str
    date_created: Optional[str]
    categories: tuple[str, ...]
    intro: Optional[str]
    use_latex: bool

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "slug": self.slug,
            "readTime": self.read_time,
            "dateCreated": self.date_created,
            "categories": list(self.categories),
            "intro": self.intro,
            "useLatex": self.use_latex,
        }


@dataclass(frozen=True)
class ParsedMarkdown:
    metadata: ContentMetadata
    html_string: str


@dataclass(frozen=True)
class GithubUser:
    name: Optional[str]
    username: str
    avatar_url: Optional[str]
    bio: Optional[str]
    followers: int

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "username": self.username,
            "avatar_url": self.avatar_url,
            "bio": self.bio,
            "followers": self.followers,
        }


@dataclass(frozen=True)
class GithubRepository:
    fork: bool
    language: Optional[str]
    stargazers_count: int


@dataclass(frozen=True)
class LanguageShare:
    name: str
    percentage: float

    def to_dict(self) -> dict:
        return {"name": self.name, "percentage": self.percentage}
