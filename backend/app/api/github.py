# ruff: noqa: B008
from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from app.api.deps import AuthDep
from app.config import get_settings
from app.db import SessionDep
from app.schemas.github import CommitListResponse, GitHubProjectResponse
from app.services.github import GitHubClient, get_day_commits, get_github_client, load_projects

github_router = APIRouter(prefix="/github", tags=["github"])

GitHubClientDep = Annotated[GitHubClient, Depends(get_github_client)]


@github_router.get("/projects", response_model=list[GitHubProjectResponse])
async def list_projects(auth: AuthDep) -> list[GitHubProjectResponse]:
    """Configured repositories, without their tokens."""
    return [
        GitHubProjectResponse(id=p.id, name=p.name, repo=p.repo, branch=p.branch)
        for p in load_projects(get_settings())
    ]


@github_router.get("/commits", response_model=CommitListResponse)
async def list_commits(
    session: SessionDep,
    auth: AuthDep,
    client: GitHubClientDep,
    day: str = Query(alias="date"),
) -> CommitListResponse:
    """The caller's commits for a day, with a Markdown block for record descriptions."""
    return await get_day_commits(session, auth, day, client, get_settings())
