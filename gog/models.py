"""Shared pydantic models: the contract between the tracker, the aggregator and output.py."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

IssueState = Literal["open", "closed"]


class _WireModel(BaseModel):
    # Attribute names are ours; aliases are the Gogs field names used on the wire and in JSON output.
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class Identity(_WireModel):
    id: int
    username: str
    full_name: str | None = None
    email: str | None = None


class Label(_WireModel):
    id: int
    name: str
    color: str


class Repository(_WireModel):
    id: int
    name: str
    full_name: str  # owner/name
    owner: Identity
    description: str | None = None
    is_private: bool = Field(alias="private")
    html_url: str
    clone_url: str


class Issue(_WireModel):
    id: int
    number: int  # unique per repository, not globally
    title: str
    body: str | None = None
    author: Identity = Field(alias="user")
    labels: list[Label] = []
    state: IssueState
    comment_count: int = Field(default=0, alias="comments")
    created_at: str
    updated_at: str
    html_url: str


class Comment(_WireModel):
    id: int
    body: str
    author: Identity = Field(alias="user")
    created_at: str
    updated_at: str


# ---------------------------------------------------------------------------
# Request bodies
# ---------------------------------------------------------------------------


class _Option(BaseModel):
    model_config = ConfigDict(frozen=True)

    def payload(self) -> dict:
        """Return the request body, leaving out fields that were not set."""
        return self.model_dump(exclude_none=True)


class CreateIssueOption(_Option):
    title: str
    body: str | None = None
    labels: list[int] | None = None  # label ids, omitted when empty


class EditIssueOption(_Option):
    title: str | None = None
    body: str | None = None
    state: IssueState | None = None


class CreateCommentOption(_Option):
    body: str


class IssueLabelsOption(_Option):
    labels: list[int]


# ---------------------------------------------------------------------------
# Fan-out results
# ---------------------------------------------------------------------------


class RepoOutcome(BaseModel):
    """Result of fetching one repository: issues on success, a reason on failure, never both."""

    model_config = ConfigDict(frozen=True)

    repo: str
    issues: list[Issue] | None = None
    error: str | None = None

    @classmethod
    def success(cls, repo: str, issues: list[Issue]) -> "RepoOutcome":
        return cls(repo=repo, issues=issues)

    @classmethod
    def failure(cls, repo: str, error: str) -> "RepoOutcome":
        return cls(repo=repo, error=error)

    @property
    def ok(self) -> bool:
        return self.error is None


class RepoIssues(BaseModel):
    model_config = ConfigDict(frozen=True)

    repo: str  # full name
    issues: list[Issue]


class AggregationResult(BaseModel):
    """Issues grouped by repository, sorted by full name. Only repositories with issues are kept."""

    model_config = ConfigDict(frozen=True)

    entries: list[RepoIssues] = []
    failures: list[RepoOutcome] = []  # enumeration order

    @property
    def total_issues(self) -> int:
        return sum(len(entry.issues) for entry in self.entries)

    @property
    def repo_count(self) -> int:
        return len(self.entries)
