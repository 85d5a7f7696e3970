# ruff: noqa: TC003
from __future__ import annotations

import logging
from datetime import UTC, date, datetime, time
from typing import TYPE_CHECKING

import httpx
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from app.config import Settings, get_settings
from app.exceptions import UpstreamError, ValidationError
from app.schemas.github import CommitInfo, CommitListResponse, GitHubProject
from app.services.hours import parse_date
from app.services.user import get_user_settings_row

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from app.schemas.auth import AuthenticatedPrincipal

logger = logging.getLogger(__name__)

_PROJECTS_ADAPTER = TypeAdapter(list[GitHubProject])
_USER_AGENT = "Hours-Bank-App"


def load_projects(settings: Settings) -> list[GitHubProject]:
    """Configured repositories: the JSON list, else the single token/repo pair."""
    if settings.github_projects:
        try:
            return _PROJECTS_ADAPTER.validate_json(settings.github_projects)
        except PydanticValidationError:
            logger.exception("GITHUB_PROJECTS is malformed, falling back to GITHUB_TOKEN/GITHUB_REPO")

    if settings.github_token and settings.github_repo:
        return [
            GitHubProject(
                id="default",
                name=settings.github_repo,
                repo=settings.github_repo,
                token=settings.github_token,
                branch=settings.github_branch,
            )
        ]
    return []


def resolve_project(projects: list[GitHubProject], project_id: str | None) -> GitHubProject | None:
    """The selected project, or the first configured one when none is selected."""
    if project_id:
        return next((p for p in projects if p.id == project_id), None)
    return projects[0] if projects else None


def format_commits_markdown(commits: list[CommitInfo], day: date) -> str:
    """Bullet list suitable for pre-filling a record description."""
    if not commits:
        return ""
    lines = [f"- **[{c.short_sha}]** {c.message} _({c.date.strftime('%H:%M')})_" for c in commits]
    return f"### Commits ({day.isoformat()})\n\n" + "\n".join(lines) + "\n\n"


class GitHubClient:
    """Reads commit history from the GitHub REST API."""

    def __init__(
        self,
        api_url: str,
        timeout: float,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_url = api_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    async def fetch_commits(
        self,
        project: GitHubProject,
        author: str,
        branch: str | None,
        since: datetime,
        until: datetime,
    ) -> list[CommitInfo]:
        params = {
            "author": author,
            "since": since.strftime("%Y-%m-%dT%H:%M:%SZ"),
            "until": until.strftime("%Y-%m-%dT%H:%M:%SZ"),
        }
        if branch:
            params["sha"] = branch
        headers = {
            "Authorization": f"Bearer {project.token}",
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": _USER_AGENT,
        }
        url = f"{self._api_url}/repos/{project.repo}/commits"

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.get(url, params=params, headers=headers)
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("GitHub commit lookup for %s failed: %s", project.repo, exc)
            raise UpstreamError("Failed to fetch commits from GitHub") from exc

        commits = []
        for item in payload:
            commit = item.get("commit") or {}
            commits.append(
                CommitInfo(
                    sha=item["sha"],
                    short_sha=item["sha"][:7],
                    message=commit.get("message", ""),
                    date=(commit.get("author") or {}).get("date"),
                    url=item.get("html_url", ""),
                )
            )
        return commits


_github_client: GitHubClient | None = None


def get_github_client() -> GitHubClient:
    """FastAPI dependency for the commit API client."""
    global _github_client
    if _github_client is None:
        settings = get_settings()
        _github_client = GitHubClient(settings.github_api_url, settings.upstream_timeout_seconds)
    return _github_client


def set_github_client(client: GitHubClient | None) -> None:
    """Override the client (for testing); ``None`` restores the default."""
    global _github_client
    _github_client = client


async def get_day_commits(
    session: AsyncSession,
    principal: AuthenticatedPrincipal,
    day: str,
    client: GitHubClient,
    settings: Settings,
) -> CommitListResponse:
    """The caller's commits for one day, using the repository and author from their settings.

    Branch preference: user setting, then the project's branch, then no filter.
    """
    selected_day = parse_date(day)
    user_settings = await get_user_settings_row(session, principal.subject_id)
    if user_settings is None or not user_settings.github_username:
        raise ValidationError("GitHub username not configured in user settings")

    project = resolve_project(load_projects(settings), user_settings.github_project_id)
    if project is None:
        raise UpstreamError("GitHub integration not configured")

    since = datetime.combine(selected_day, time.min, tzinfo=UTC)
    until = datetime.combine(selected_day, time(23, 59, 59), tzinfo=UTC)
    commits = await client.fetch_commits(
        project,
        author=user_settings.github_username,
        branch=user_settings.github_branch or project.branch,
        since=since,
        until=until,
    )
    return CommitListResponse(
        commits=commits,
        markdown=format_commits_markdown(commits, selected_day),
        count=len(commits),
    )
