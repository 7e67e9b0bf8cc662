"""gog CLI: all commands."""

import asyncio
from collections.abc import AsyncIterator, Coroutine, Iterator
from contextlib import asynccontextmanager, contextmanager
from importlib.metadata import version
from typing import Annotated, Any, TypeVar

import tomlkit
import typer
from pydantic import BaseModel, ConfigDict
from rich import print as rprint
from rich.console import Console
from rich.markup import escape

from gog.aggregate import list_issues_all, list_issues_repo
from gog.errors import GogError, ValidationError
from gog.labels import resolve_label, resolve_labels
from gog.models import CreateCommentOption, CreateIssueOption, EditIssueOption, IssueLabelsOption, IssueState
from gog.output import (
    OutputFormat,
    format_created_comment,
    format_created_issue,
    format_issue_detail,
    format_issue_list,
    format_issue_updated,
    format_label_change,
    format_repo_list,
)
from gog.providers.base import IssueTracker
from gog.providers.gogs import GogsTracker
from gog.settings import (
    DEFAULT_PROFILE,
    Config,
    Profile,
    _list_profiles,
    config_path,
    load_config,
    load_document,
    parse_repo,
    save_config,
)
from gog.signature import sign
from gog.transport import GogsTransport

T = TypeVar("T")

app = typer.Typer(
    help="Gogs CLI for multi-agent development orchestration",
    no_args_is_help=True,
)
issue_app = typer.Typer(help="Issue operations", no_args_is_help=True)
repo_app = typer.Typer(help="Repository operations", no_args_is_help=True)
app.add_typer(issue_app, name="issue")
app.add_typer(repo_app, name="repo")

# Diagnostics only. Primary output goes through typer.echo so "[bug]"-style labels are never read as markup.
err_console = Console(stderr=True, soft_wrap=True, highlight=False)

ProfileOpt = Annotated[str | None, typer.Option("--profile", help="Profile to use (overrides default)")]
JsonOpt = Annotated[bool, typer.Option("--json", help="Output in JSON format")]
RepoOpt = Annotated[str | None, typer.Option("--repo", help="Repository (owner/repo)")]
NumberArg = Annotated[int, typer.Argument(help="Issue number")]


# ---------------------------------------------------------------------------
# Plumbing
# ---------------------------------------------------------------------------


@asynccontextmanager
async def open_tracker(config: Config, profile: Profile) -> AsyncIterator[IssueTracker]:
    async with GogsTransport(config.server.url, profile.token.get_secret_value()) as transport:
        yield GogsTracker(transport)


def _warn(message: str) -> None:
    err_console.print(f"[yellow]Warning:[/yellow] {escape(message)}")


def _emit(text: str) -> None:
    typer.echo(text, nl=not text.endswith("\n"))


@contextmanager
def _errors_to_exit() -> Iterator[None]:
    """Turn a GogError into one line on stderr and the matching exit code."""
    try:
        yield
    except GogError as exc:
        err_console.print(f"[red]Error:[/red] {escape(str(exc))}")
        raise typer.Exit(exc.exit_code) from exc


def _run(coro: Coroutine[Any, Any, T]) -> T:
    with _errors_to_exit():
        return asyncio.run(coro)


def _state_from_flags(open_: bool, closed: bool) -> IssueState:
    if open_ and closed:
        raise ValidationError("--open and --closed cannot be used together")
    # Open is the default; --open only makes it explicit.
    return "closed" if closed else "open"


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"gog {version('gog-cli')}")
        raise typer.Exit()


class GlobalOptions(BaseModel):
    """Flags given before the subcommand, e.g. ``gog --json repo list``."""

    model_config = ConfigDict(frozen=True)

    profile: str | None = None
    json_output: bool = False


def _options(ctx: typer.Context, profile: str | None, json_output: bool) -> tuple[str | None, OutputFormat]:
    # A flag on the subcommand wins over the same flag given globally.
    shared = ctx.ensure_object(GlobalOptions)
    return profile or shared.profile, OutputFormat.from_json_flag(json_output or shared.json_output)


@app.callback()
def main(
    ctx: typer.Context,
    profile: ProfileOpt = None,
    json_output: JsonOpt = False,
    show_version: Annotated[
        bool,
        typer.Option("--version", callback=_version_callback, is_eager=True, help="Show version and exit"),
    ] = False,
) -> None:
    """Gogs issue tracker CLI for coordinating coding agents across repositories."""
    ctx.obj = GlobalOptions(profile=profile, json_output=json_output)


# ---------------------------------------------------------------------------
# Issue commands
# ---------------------------------------------------------------------------


async def _issue_list(
    all_repos: bool,
    open_: bool,
    closed: bool,
    repo: str | None,
    labels: list[str],
    profile_name: str | None,
    fmt: OutputFormat,
) -> None:
    state = _state_from_flags(open_, closed)
    config = load_config()
    profile = config.resolve_profile(profile_name)

    if all_repos:
        async with open_tracker(config, profile) as tracker:
            result = await list_issues_all(tracker, state, labels)
    else:
        owner, name = config.resolve_repo(repo)
        async with open_tracker(config, profile) as tracker:
            result = await list_issues_repo(tracker, owner, name, state, labels)

    for failure in result.failures:
        _warn(f"Failed to list issues for {failure.repo}: {failure.error}")
    _emit(format_issue_list(result, fmt))


@issue_app.command("list")
def issue_list(
    ctx: typer.Context,
    all_repos: Annotated[bool, typer.Option("--all", help="List issues across all repositories")] = False,
    open_: Annotated[bool, typer.Option("--open", help="Only show open issues (default)")] = False,
    closed: Annotated[bool, typer.Option("--closed", help="Only show closed issues")] = False,
    repo: RepoOpt = None,
    label: Annotated[list[str] | None, typer.Option("--label", help="Filter by label (repeatable)")] = None,
    profile: ProfileOpt = None,
    json_output: JsonOpt = False,
) -> None:
    """List issues from one repository, or from every repository with --all.

    \b
    Examples:
      gog issue list --all
      gog issue list --repo owner/project
      gog issue list --all --label bug
    """
    profile, fmt = _options(ctx, profile, json_output)
    _run(_issue_list(all_repos, open_, closed, repo, label or [], profile, fmt))


async def _issue_show(number: int, repo: str | None, profile_name: str | None, fmt: OutputFormat) -> None:
    config = load_config()
    profile = config.resolve_profile(profile_name)
    owner, name = config.resolve_repo(repo)
    async with open_tracker(config, profile) as tracker:
        issue = await tracker.get_issue(owner, name, number)
        comments = await tracker.list_comments(owner, name, number)
    _emit(format_issue_detail(issue, comments, fmt))


@issue_app.command("show")
def issue_show(
    ctx: typer.Context,
    number: NumberArg,
    repo: RepoOpt = None,
    profile: ProfileOpt = None,
    json_output: JsonOpt = False,
) -> None:
    """Show an issue with its comments."""
    profile, fmt = _options(ctx, profile, json_output)
    _run(_issue_show(number, repo, profile, fmt))


async def _issue_create(
    title: str,
    repo: str | None,
    body: str | None,
    labels: list[str],
    profile_name: str | None,
    fmt: OutputFormat,
) -> None:
    if not title.strip():
        raise ValidationError("Issue title cannot be empty")
    config = load_config()
    profile = config.resolve_profile(profile_name)
    owner, name = config.resolve_repo(repo)

    async with open_tracker(config, profile) as tracker:
        # Resolve before creating so an unknown label never leaves a half-labelled issue behind.
        label_ids = [label.id for label in await resolve_labels(tracker, owner, name, labels)] if labels else None
        option = CreateIssueOption(title=title, body=sign(profile.signature, body), labels=label_ids)
        issue = await tracker.create_issue(owner, name, option)
    _emit(format_created_issue(issue, fmt))


@issue_app.command("create")
def issue_create(
    ctx: typer.Context,
    title: Annotated[str, typer.Argument(help="Issue title")],
    repo: RepoOpt = None,
    body: Annotated[str | None, typer.Option("--body", help="Issue body")] = None,
    label: Annotated[list[str] | None, typer.Option("--label", help="Add label (repeatable)")] = None,
    profile: ProfileOpt = None,
    json_output: JsonOpt = False,
) -> None:
    """Create an issue. The body is prefixed with the profile signature."""
    profile, fmt = _options(ctx, profile, json_output)
    _run(_issue_create(title, repo, body, label or [], profile, fmt))


async def _issue_comment(
    number: int, text: str, repo: str | None, profile_name: str | None, fmt: OutputFormat
) -> None:
    if not text.strip():
        raise ValidationError("Comment text cannot be empty")
    config = load_config()
    profile = config.resolve_profile(profile_name)
    owner, name = config.resolve_repo(repo)
    async with open_tracker(config, profile) as tracker:
        option = CreateCommentOption(body=sign(profile.signature, text))
        comment = await tracker.create_comment(owner, name, number, option)
    _emit(format_created_comment(comment, fmt))


@issue_app.command("comment")
def issue_comment(
    ctx: typer.Context,
    number: NumberArg,
    text: Annotated[str, typer.Argument(help="Comment text")],
    repo: RepoOpt = None,
    profile: ProfileOpt = None,
    json_output: JsonOpt = False,
) -> None:
    """Comment on an issue. The text is prefixed with the profile signature."""
    profile, fmt = _options(ctx, profile, json_output)
    _run(_issue_comment(number, text, repo, profile, fmt))


async def _issue_set_state(
    number: int, state: IssueState, repo: str | None, profile_name: str | None, fmt: OutputFormat
) -> None:
    config = load_config()
    profile = config.resolve_profile(profile_name)
    owner, name = config.resolve_repo(repo)
    async with open_tracker(config, profile) as tracker:
        issue = await tracker.edit_issue(owner, name, number, EditIssueOption(state=state))
    action = "closed" if state == "closed" else "reopened"
    _emit(format_issue_updated(issue, action, fmt))


@issue_app.command("close")
def issue_close(
    ctx: typer.Context,
    number: NumberArg,
    repo: RepoOpt = None,
    profile: ProfileOpt = None,
    json_output: JsonOpt = False,
) -> None:
    """Close an issue."""
    profile, fmt = _options(ctx, profile, json_output)
    _run(_issue_set_state(number, "closed", repo, profile, fmt))


@issue_app.command("reopen")
def issue_reopen(
    ctx: typer.Context,
    number: NumberArg,
    repo: RepoOpt = None,
    profile: ProfileOpt = None,
    json_output: JsonOpt = False,
) -> None:
    """Reopen a closed issue."""
    profile, fmt = _options(ctx, profile, json_output)
    _run(_issue_set_state(number, "open", repo, profile, fmt))


async def _issue_relabel(
    number: int, label_name: str, add: bool, repo: str | None, profile_name: str | None, fmt: OutputFormat
) -> None:
    config = load_config()
    profile = config.resolve_profile(profile_name)
    owner, name = config.resolve_repo(repo)
    async with open_tracker(config, profile) as tracker:
        label = await resolve_label(tracker, owner, name, label_name)
        if add:
            await tracker.add_issue_labels(owner, name, number, IssueLabelsOption(labels=[label.id]))
        else:
            await tracker.remove_issue_label(owner, name, number, label.id)
    _emit(format_label_change(label.name, number, add, fmt))


@issue_app.command("label")
def issue_label(
    ctx: typer.Context,
    number: NumberArg,
    label: Annotated[str, typer.Argument(help="Label name (case-insensitive)")],
    repo: RepoOpt = None,
    profile: ProfileOpt = None,
    json_output: JsonOpt = False,
) -> None:
    """Add a label to an issue."""
    profile, fmt = _options(ctx, profile, json_output)
    _run(_issue_relabel(number, label, True, repo, profile, fmt))


@issue_app.command("unlabel")
def issue_unlabel(
    ctx: typer.Context,
    number: NumberArg,
    label: Annotated[str, typer.Argument(help="Label name (case-insensitive)")],
    repo: RepoOpt = None,
    profile: ProfileOpt = None,
    json_output: JsonOpt = False,
) -> None:
    """Remove a label from an issue."""
    profile, fmt = _options(ctx, profile, json_output)
    _run(_issue_relabel(number, label, False, repo, profile, fmt))


# ---------------------------------------------------------------------------
# Repo commands
# ---------------------------------------------------------------------------


async def _repo_list(profile_name: str | None, fmt: OutputFormat) -> None:
    config = load_config()
    profile = config.resolve_profile(profile_name)
    async with open_tracker(config, profile) as tracker:
        repos = await tracker.list_repos()
    _emit(format_repo_list(repos, fmt))


@repo_app.command("list")
def repo_list(ctx: typer.Context, profile: ProfileOpt = None, json_output: JsonOpt = False) -> None:
    """List repositories accessible to the current profile."""
    profile, fmt = _options(ctx, profile, json_output)
    _run(_repo_list(profile, fmt))


# ---------------------------------------------------------------------------
# init
# ---------------------------------------------------------------------------


async def _check_connection(server_url: str, token: str) -> int:
    """Return how many repositories the token can see."""
    async with GogsTransport(server_url, token) as transport:
        return len(await GogsTracker(transport).list_repos())


def _prompt_required(text: str, **kwargs: Any) -> str:
    value = typer.prompt(text, **kwargs).strip()
    if not value:
        raise ValidationError(f"{text} cannot be empty")
    return value


@app.command("init")
def init_cmd(ctx: typer.Context) -> None:
    """Interactive first-time setup wizard."""
    with _errors_to_exit():
        _init_wizard(ctx.ensure_object(GlobalOptions).profile or DEFAULT_PROFILE)


def _init_wizard(default_profile: str) -> None:
    rprint("[bold]Gogs CLI Configuration Setup[/bold]")
    rprint("")

    path = config_path()
    doc = load_document(path)
    if path.exists():
        rprint(f"Config file already exists at {path}")
        existing = _list_profiles(doc)
        if existing:
            rprint(f"Existing profiles: {', '.join(existing)}")
        if not typer.confirm("Add or replace a profile in it?", default=False):
            rprint("Aborted.")
            raise typer.Exit(0)

    # Step 1: server
    current_url = doc.get("server", {}).get("url")
    server_url = _prompt_required("Gogs server URL (e.g., https://gogs.example.com)", default=current_url)

    # Step 2: identity
    profile_name = _prompt_required("Profile name", default=default_profile)
    gogs_user = _prompt_required("Gogs username")
    token = _prompt_required("API token (from Gogs settings)", hide_input=True)

    # Step 3: attribution
    role = _prompt_required("Role description (e.g., 'Human Developer' or 'Planning Agent')", default="Human")
    signature = _prompt_required("Comment signature", default=f"[{role}]")

    # Step 4: connection test
    rprint(f"\nTesting connection to {server_url}...")
    try:
        count = asyncio.run(_check_connection(server_url, token))
        rprint(f"[green]✓[/green] Connection successful! Found {count} accessible repositories.")
    except GogError as exc:
        rprint(f"[yellow]Warning:[/yellow] Connection test failed: {escape(str(exc))}")
        if not typer.confirm("Save config anyway?", default=False):
            rprint("Aborted.")
            raise typer.Exit(0)

    # Step 5: default repo
    default_repo = typer.prompt("Default repository (owner/repo, optional)", default="", show_default=False).strip()
    if default_repo:
        try:
            parse_repo(default_repo)
        except ValidationError:
            rprint("[yellow]Warning:[/yellow] Invalid repo format. Should be 'owner/repo'. Skipping default.")
            default_repo = ""

    # Step 6: write config (round-trip preserves other profiles and comments)
    if "server" not in doc:
        doc.add("server", tomlkit.table())
    doc["server"]["url"] = server_url

    if "defaults" not in doc:
        doc.add("defaults", tomlkit.table())
    doc["defaults"]["profile"] = profile_name
    if default_repo:
        doc["defaults"]["repo"] = default_repo

    if "profiles" not in doc:
        doc.add("profiles", tomlkit.table(is_super_table=True))
    doc["profiles"][profile_name] = {
        "gogs_user": gogs_user,
        "token": token,
        "role": role,
        "signature": signature,
    }

    written = save_config(doc, path)
    rprint(f"\n[green]✓[/green] Configuration saved to {written}")
    rprint(f"Profile '{profile_name}' created.")
    rprint("\nYou can now use gog commands. Try:")
    rprint("  gog repo list")
    rprint("  gog issue list --all")
