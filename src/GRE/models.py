"""Data classes for GRE."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

# name -> file size in bytes, or a nested directory
Directory = dict[str, Union[int, "Directory"]]


@dataclass
class TreeEntry:
    path: str
    type: str = "blob"
    size: int = 0
    sha: str = ""

    @property
    def is_blob(self) -> bool:
        return self.type == "blob"


@dataclass
class ResolvedPath:
    branch: str | None
    filepath: str


@dataclass
class RepoTarget:
    owner: str
    repo: str
    ref: str | None = None
    path: str = ""
    pinned: bool = False  # owner/repo@ref form

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


@dataclass
class Owner:
    login: str
    type: str = "User"
    name: str | None = None
    bio: str | None = None
    public_repos: int = 0
    avatar_url: str = ""

    @property
    def is_organization(self) -> bool:
        return self.type == "Organization"

    @classmethod
    def from_api(cls, data: dict) -> Owner:
        return cls(
            login=data["login"],
            type=data.get("type", "User"),
            name=data.get("name"),
            bio=data.get("bio"),
            public_repos=data.get("public_repos", 0),
            avatar_url=data.get("avatar_url", ""),
        )


@dataclass
class Repository:
    name: str
    full_name: str
    owner: Owner
    default_branch: str = "main"
    description: str | None = None
    fork: bool = False
    stargazers_count: int = 0
    forks_count: int = 0
    language: str | None = None
    parent: Repository | None = None

    @classmethod
    def from_api(cls, data: dict) -> Repository:
        parent = data.get("parent")
        return cls(
            name=data["name"],
            full_name=data["full_name"],
            owner=Owner.from_api(data["owner"]),
            default_branch=data.get("default_branch", "main"),
            description=data.get("description"),
            fork=data.get("fork", False),
            stargazers_count=data.get("stargazers_count", 0),
            forks_count=data.get("forks_count", 0),
            language=data.get("language"),
            parent=cls.from_api(parent) if parent else None,
        )


@dataclass
class RawContent:
    body: bytes
    content_type: str = "text/plain; charset=utf-8"
