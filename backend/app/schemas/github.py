from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class GitHubProject(BaseModel):
    """A configured repository the commit lookup can read from."""

    id: str
    name: str
    repo: str
    token: str
    branch: str | None = None


class GitHubProjectResponse(BaseModel):
    id: str
    name: str
    repo: str
    branch: str | None


class CommitInfo(BaseModel):
    sha: str
    short_sha: str
    message: str
    date: datetime
    url: str


class CommitListResponse(BaseModel):
    commits: list[CommitInfo]
    markdown: str
    count: int
