"""Gogs REST API v1 provider."""

from typing import Any

from pydantic import TypeAdapter
from pydantic import ValidationError as SchemaError

from gog.errors import ApiError
from gog.models import (
    Comment,
    CreateCommentOption,
    CreateIssueOption,
    EditIssueOption,
    Issue,
    IssueLabelsOption,
    IssueState,
    Label,
    Repository,
)
from gog.providers.base import IssueTracker
from gog.transport import GogsTransport


def _decode(kind: Any, data: Any, path: str) -> Any:
    try:
        return TypeAdapter(kind).validate_python(data)
    except SchemaError as exc:
        raise ApiError(f"Unexpected response from {path}: {exc.error_count()} invalid field(s)") from exc


class GogsTracker(IssueTracker):
    def __init__(self, transport: GogsTransport) -> None:
        self._transport = transport

    async def list_repos(self) -> list[Repository]:
        # NOTE: first page only. Gogs returns every repo the token can see on one page for typical installs.
        path = "/user/repos"
        return _decode(list[Repository], await self._transport.get(path), path)

    async def get_repo(self, owner: str, repo: str) -> Repository:
        path = f"/repos/{owner}/{repo}"
        return _decode(Repository, await self._transport.get(path), path)

    async def list_issues(self, owner: str, repo: str, state: IssueState) -> list[Issue]:
        path = f"/repos/{owner}/{repo}/issues"
        return _decode(list[Issue], await self._transport.get(path, params={"state": state}), path)

    async def get_issue(self, owner: str, repo: str, number: int) -> Issue:
        path = f"/repos/{owner}/{repo}/issues/{number}"
        return _decode(Issue, await self._transport.get(path), path)

    async def create_issue(self, owner: str, repo: str, option: CreateIssueOption) -> Issue:
        path = f"/repos/{owner}/{repo}/issues"
        return _decode(Issue, await self._transport.post(path, option.payload()), path)

    async def edit_issue(self, owner: str, repo: str, number: int, option: EditIssueOption) -> Issue:
        path = f"/repos/{owner}/{repo}/issues/{number}"
        return _decode(Issue, await self._transport.patch(path, option.payload()), path)

    async def list_comments(self, owner: str, repo: str, number: int) -> list[Comment]:
        path = f"/repos/{owner}/{repo}/issues/{number}/comments"
        return _decode(list[Comment], await self._transport.get(path), path)

    async def create_comment(self, owner: str, repo: str, number: int, option: CreateCommentOption) -> Comment:
        path = f"/repos/{owner}/{repo}/issues/{number}/comments"
        return _decode(Comment, await self._transport.post(path, option.payload()), path)

    async def list_labels(self, owner: str, repo: str) -> list[Label]:
        path = f"/repos/{owner}/{repo}/labels"
        return _decode(list[Label], await self._transport.get(path), path)

    async def add_issue_labels(self, owner: str, repo: str, number: int, option: IssueLabelsOption) -> list[Label]:
        path = f"/repos/{owner}/{repo}/issues/{number}/labels"
        return _decode(list[Label], await self._transport.post(path, option.payload()), path)

    async def remove_issue_label(self, owner: str, repo: str, number: int, label_id: int) -> None:
        await self._transport.delete(f"/repos/{owner}/{repo}/issues/{number}/labels/{label_id}")
