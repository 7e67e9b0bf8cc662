"""Resolve user-supplied label names to repository label ids."""

from collections.abc import Iterable

from gog.errors import NotFoundError
from gog.models import Label
from gog.providers.base import IssueTracker


def find_label(labels: Iterable[Label], name: str, repo: str) -> Label:
    wanted = name.lower()
    for label in labels:
        if label.name.lower() == wanted:
            return label
    raise NotFoundError(f"Label '{name}' not found in repository {repo}")


async def resolve_labels(tracker: IssueTracker, owner: str, repo: str, names: Iterable[str]) -> list[Label]:
    """Fetch the repository's labels once and resolve every name.

    Raises NotFoundError for the first unknown name. Callers run this before any
    mutating request so a bad name never leaves an issue half-updated.
    """
    available = await tracker.list_labels(owner, repo)
    return [find_label(available, name, f"{owner}/{repo}") for name in names]


async def resolve_label(tracker: IssueTracker, owner: str, repo: str, name: str) -> Label:
    (label,) = await resolve_labels(tracker, owner, repo, [name])
    return label
