"""Abstract base class for issue tracker backends."""

from abc import ABC, abstractmethod

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


class IssueTracker(ABC):
    @abstractmethod
    async def list_repos(self) -> list[Repository]: ...

    @abstractmethod
    async def get_repo(self, owner: str, repo: str) -> Repository: ...

    @abstractmethod
    async def list_issues(self, owner: str, repo: str, state: IssueState) -> list[Issue]: ...

    @abstractmethod
    async def get_issue(self, owner: str, repo: str, number: int) -> Issue: ...

    @abstractmethod
    async def create_issue(self, owner: str, repo: str, option: CreateIssueOption) -> Issue: ...

    @abstractmethod
    async def edit_issue(self, owner: str, repo: str, number: int, option: EditIssueOption) -> Issue: ...

    @abstractmethod
    async def list_comments(self, owner: str, repo: str, number: int) -> list[Comment]: ...

    @abstractmethod
    async def create_comment(self, owner: str, repo: str, number: int, option: CreateCommentOption) -> Comment: ...

    @abstractmethod
    async def list_labels(self, owner: str, repo: str) -> list[Label]: ...

    @abstractmethod
    async def add_issue_labels(self, owner: str, repo: str, number: int, option: IssueLabelsOption) -> list[Label]: ...

    @abstractmethod
    async def remove_issue_label(self, owner: str, repo: str, number: int, label_id: int) -> None: ...
