"""Human and JSON rendering. Every function here is pure: fetched data in, string out."""

import json
from enum import Enum

from gog.models import AggregationResult, Comment, Issue, Repository


class OutputFormat(str, Enum):
    HUMAN = "human"
    JSON = "json"

    @classmethod
    def from_json_flag(cls, json_output: bool) -> "OutputFormat":
        return cls.JSON if json_output else cls.HUMAN


def _dumps(value: object) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False)


# ---------------------------------------------------------------------------
# Issue lists
# ---------------------------------------------------------------------------


def _issue_line(issue: Issue) -> str:
    labels = "".join(f" [{label.name}]" for label in issue.labels)
    return f"  #{issue.number:<4} [{issue.state}]{labels} {issue.title}\n"


def _issue_list_human(result: AggregationResult) -> str:
    out = []
    for entry in result.entries:
        out.append(f"\n{entry.repo}\n")
        out.extend(_issue_line(issue) for issue in entry.issues)

    if result.total_issues == 0:
        out.append("\nNo issues found.\n")
    else:
        out.append(f"\nTotal: {result.total_issues} issue(s) across {result.repo_count} repo(s)\n")
    return "".join(out)


def _issue_list_json(result: AggregationResult) -> str:
    # "repo" is not an Issue field, so it can sit alongside them without shadowing anything.
    rows = [{"repo": entry.repo, **issue.to_wire()} for entry in result.entries for issue in entry.issues]
    return _dumps(rows)


def format_issue_list(result: AggregationResult, fmt: OutputFormat) -> str:
    if fmt is OutputFormat.JSON:
        return _issue_list_json(result)
    return _issue_list_human(result)


# ---------------------------------------------------------------------------
# Single issue
# ---------------------------------------------------------------------------


def format_issue_detail(issue: Issue, comments: list[Comment], fmt: OutputFormat) -> str:
    if fmt is OutputFormat.JSON:
        return _dumps({**issue.to_wire(), "comment_list": [c.to_wire() for c in comments]})

    lines = [
        f"#{issue.number} {issue.title}",
        f"State: {issue.state}",
        f"Author: {issue.author.username}",
        f"Created: {issue.created_at}",
        f"Updated: {issue.updated_at}",
    ]
    if issue.labels:
        lines.append(f"Labels: {', '.join(label.name for label in issue.labels)}")
    lines.append(f"URL: {issue.html_url}")
    if issue.body:
        lines += ["", issue.body]

    if comments:
        lines += ["", f"--- {len(comments)} comment(s) ---"]
        for comment in comments:
            lines += ["", f"@{comment.author.username} ({comment.created_at})", comment.body]

    return "\n".join(lines) + "\n"


def format_created_issue(issue: Issue, fmt: OutputFormat) -> str:
    if fmt is OutputFormat.JSON:
        return _dumps(issue.to_wire())
    return f"Created issue #{issue.number}: {issue.title}\nURL: {issue.html_url}\n"


def format_issue_updated(issue: Issue, action: str, fmt: OutputFormat) -> str:
    if fmt is OutputFormat.JSON:
        return _dumps(issue.to_wire())
    return f"Issue #{issue.number} {action}: {issue.title}\n"


def format_created_comment(comment: Comment, fmt: OutputFormat) -> str:
    if fmt is OutputFormat.JSON:
        return _dumps(comment.to_wire())
    return f"Comment added by @{comment.author.username} at {comment.created_at}\n"


def format_label_change(label: str, number: int, added: bool, fmt: OutputFormat) -> str:
    if fmt is OutputFormat.JSON:
        return _dumps({"status": "success", "label": label, "issue": number})
    direction = "added to" if added else "removed from"
    return f"Label '{label}' {direction} issue #{number}\n"


# ---------------------------------------------------------------------------
# Repositories
# ---------------------------------------------------------------------------


def format_repo_list(repos: list[Repository], fmt: OutputFormat) -> str:
    if fmt is OutputFormat.JSON:
        return _dumps([repo.to_wire() for repo in repos])

    if not repos:
        return "No repositories found.\n"

    out = [f"Found {len(repos)} repository(ies):\n\n"]
    for repo in repos:
        visibility = "[private]" if repo.is_private else "[public]"
        out.append(f"  {repo.full_name} {visibility}\n")
        if repo.description:
            out.append(f"    {repo.description}\n")
    return "".join(out)
