"""Shared test fixtures."""

from collections.abc import Callable
from pathlib import Path

import pytest
import tomlkit

import gog.settings as settings_module
from gog.models import Identity, Issue, Label

SERVER = "https://gogs.test"
API = f"{SERVER}/api/v1"


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch):
    """Keep the developer's real config and GOGS_* variables out of every test."""
    for var in ("GOGS_CONFIG", "GOGS_PROFILE", "GOGS_REPO"):
        monkeypatch.delenv(var, raising=False)
    settings_module._load_toml.cache_clear()
    yield
    settings_module._load_toml.cache_clear()


@pytest.fixture
def config_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    config_path = tmp_path / "config.toml"
    config_path.write_text(
        tomlkit.dumps(
            {
                "server": {"url": SERVER},
                "defaults": {"repo": "acme/alpha", "profile": "planner"},
                "profiles": {
                    "planner": {
                        "gogs_user": "planner-bot",
                        "token": "secret-token",
                        "role": "Planning Agent",
                        "signature": "[Planning Agent]",
                    },
                    "human": {
                        "gogs_user": "alice",
                        "token": "alice-token",
                        "role": "Human",
                        "signature": "[Human]",
                    },
                },
            }
        )
    )
    monkeypatch.setenv("GOGS_CONFIG", str(config_path))
    return config_path


@pytest.fixture
def issue_node() -> Callable[..., dict]:
    """Build a Gogs issue payload as the API returns it."""

    def build(number: int, title: str = "Fix null check", labels: tuple[str, ...] = (), state: str = "open") -> dict:
        return {
            "id": 1000 + number,
            "number": number,
            "title": title,
            "body": "Null pointer in logout handler.",
            "user": {"id": 7, "username": "alice", "full_name": "Alice", "email": "alice@example.com"},
            "labels": [{"id": i + 1, "name": name, "color": "ee0701"} for i, name in enumerate(labels)],
            "state": state,
            "comments": 2,
            "created_at": "2024-05-01T10:00:00Z",
            "updated_at": "2024-05-02T11:30:00Z",
            "html_url": f"{SERVER}/acme/alpha/issues/{number}",
        }

    return build


@pytest.fixture
def repo_node() -> Callable[..., dict]:
    def build(full_name: str, repo_id: int = 1, private: bool = False, description: str | None = None) -> dict:
        owner, name = full_name.split("/")
        return {
            "id": repo_id,
            "name": name,
            "full_name": full_name,
            "owner": {"id": 1, "username": owner},
            "description": description,
            "private": private,
            "html_url": f"{SERVER}/{full_name}",
            "clone_url": f"{SERVER}/{full_name}.git",
        }

    return build


@pytest.fixture
def author() -> Identity:
    return Identity(id=7, username="alice")


@pytest.fixture
def make_issue(author: Identity) -> Callable[..., Issue]:
    def build(number: int, title: str = "Fix null check", labels: tuple[str, ...] = (), state: str = "open") -> Issue:
        return Issue(
            id=1000 + number,
            number=number,
            title=title,
            body=None,
            author=author,
            labels=[Label(id=i + 1, name=name, color="ee0701") for i, name in enumerate(labels)],
            state=state,
            comment_count=0,
            created_at="2024-05-01T10:00:00Z",
            updated_at="2024-05-01T10:00:00Z",
            html_url=f"{SERVER}/acme/alpha/issues/{number}",
        )

    return build
