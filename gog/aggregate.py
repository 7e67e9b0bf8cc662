"""Issue listing across one or many repositories.

``list_issues_all`` fans out one ``list_issues`` call per visible repository and
gathers every outcome, successful or not, before merging. A repository that
fails is reported in ``AggregationResult.failures`` and otherwise ignored; only
the initial repository enumeration is fatal.

Concurrency width equals the repository count. That is fine for tens of
repositories; thousands would need a semaphore here.
"""

import asyncio
from collections.abc import Iterable, Sequence

from gog.models import AggregationResult, Issue, IssueState, RepoIssues, RepoOutcome, Repository
from gog.providers.base import IssueTracker


def filter_by_labels(issues: Iterable[Issue], labels: Iterable[str]) -> list[Issue]:
    """Keep issues carrying at least one of ``labels`` (case-insensitive). No labels keeps everything."""
    wanted = {label.lower() for label in labels}
    if not wanted:
        return list(issues)
    return [issue for issue in issues if any(label.name.lower() in wanted for label in issue.labels)]


async def _fetch_repo(tracker: IssueTracker, repo: Repository, state: IssueState) -> RepoOutcome:
    issues = await tracker.list_issues(repo.owner.username, repo.name, state)
    return RepoOutcome.success(repo.full_name, issues)


def merge_outcomes(outcomes: Iterable[RepoOutcome], labels: Sequence[str] = ()) -> AggregationResult:
    """Filter successful outcomes, drop empty repositories and sort by full name."""
    entries: list[RepoIssues] = []
    failures: list[RepoOutcome] = []
    for outcome in outcomes:
        if not outcome.ok:
            failures.append(outcome)
            continue
        issues = filter_by_labels(outcome.issues or [], labels)
        if issues:
            entries.append(RepoIssues(repo=outcome.repo, issues=issues))
    entries.sort(key=lambda entry: entry.repo)
    return AggregationResult(entries=entries, failures=failures)


async def list_issues_all(
    tracker: IssueTracker,
    state: IssueState = "open",
    labels: Sequence[str] = (),
) -> AggregationResult:
    repos = await tracker.list_repos()

    tasks = [_fetch_repo(tracker, repo, state) for repo in repos]
    results = await asyncio.gather(*tasks, return_exceptions=True)

    outcomes: list[RepoOutcome] = []
    for repo, result in zip(repos, results, strict=True):
        if isinstance(result, RepoOutcome):
            outcomes.append(result)
        elif isinstance(result, Exception):
            outcomes.append(RepoOutcome.failure(repo.full_name, str(result) or type(result).__name__))
        else:
            raise result
    return merge_outcomes(outcomes, labels)


async def list_issues_repo(
    tracker: IssueTracker,
    owner: str,
    repo: str,
    state: IssueState = "open",
    labels: Sequence[str] = (),
) -> AggregationResult:
    issues = await tracker.list_issues(owner, repo, state)
    return merge_outcomes([RepoOutcome.success(f"{owner}/{repo}", issues)], labels)
