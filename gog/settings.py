"""Config file loading, profile/repo resolution and environment overrides."""

import os
from collections.abc import Mapping
from functools import lru_cache
from pathlib import Path

import tomlkit
from pydantic import BaseModel, ConfigDict, SecretStr
from pydantic import ValidationError as SchemaError
from pydantic_settings import BaseSettings, SettingsConfigDict
from tomlkit.exceptions import TOMLKitError

from gog.errors import ConfigError, ValidationError

CONFIG_PATH = Path.home() / ".config" / "gogs-cli" / "config.toml"
DEFAULT_PROFILE = "default"


class GogEnv(BaseSettings):
    """Environment overrides: GOGS_CONFIG, GOGS_PROFILE, GOGS_REPO."""

    model_config = SettingsConfigDict(env_prefix="GOGS_", extra="ignore")

    config: Path | None = None
    profile: str | None = None
    repo: str | None = None


class Profile(BaseModel):
    model_config = ConfigDict(frozen=True)

    gogs_user: str
    token: SecretStr
    role: str = "Human"
    signature: str


class ServerConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str


class Defaults(BaseModel):
    model_config = ConfigDict(frozen=True)

    repo: str | None = None
    profile: str | None = None


class Config(BaseModel):
    model_config = ConfigDict(frozen=True)

    server: ServerConfig
    defaults: Defaults = Defaults()
    profiles: dict[str, Profile] = {}

    def resolve_profile(self, name: str | None = None) -> Profile:
        """Precedence: explicit name, GOGS_PROFILE, defaults.profile, "default"."""
        active = name or GogEnv().profile or self.defaults.profile or DEFAULT_PROFILE
        if active not in self.profiles:
            available = ", ".join(self.profiles) or "(none)"
            raise ConfigError(f"Profile '{active}' not found in config. Available: {available}")
        return self.profiles[active]

    def resolve_repo(self, repo: str | None = None) -> tuple[str, str]:
        """Precedence: explicit owner/repo, GOGS_REPO, defaults.repo."""
        target = repo or GogEnv().repo or self.defaults.repo
        if not target:
            raise ConfigError("Repository not specified. Use --repo owner/name or set defaults.repo in config")
        return parse_repo(target)


def parse_repo(repo: str) -> tuple[str, str]:
    owner, sep, name = repo.partition("/")
    if not sep or not owner or not name or "/" in name:
        raise ValidationError(f"Invalid repository format. Expected 'owner/repo', got '{repo}'")
    return owner, name


def config_path() -> Path:
    return GogEnv().config or CONFIG_PATH


@lru_cache(maxsize=4)
def _load_toml(path: Path) -> tomlkit.TOMLDocument:
    return load_document(path)


def _list_profiles(config: Mapping) -> list[str]:
    # tomlkit Table implements MutableMapping but not dict, so check Mapping
    profiles = config.get("profiles", {})
    return [k for k, v in profiles.items() if isinstance(v, Mapping)]


def load_document(path: Path | None = None) -> tomlkit.TOMLDocument:
    """Load the raw TOML document, or an empty one if the file is missing.

    Edits made through tomlkit keep the user's comments and ordering on save.
    """
    path = path or config_path()
    if not path.exists():
        return tomlkit.document()
    try:
        text = path.read_text()
    except OSError as exc:
        raise ConfigError(f"Failed to read config from {path}: {exc}") from exc
    try:
        return tomlkit.parse(text)
    except TOMLKitError as exc:
        raise ConfigError(f"Failed to parse config file {path}: {exc}") from exc


def load_config(path: Path | None = None) -> Config:
    path = path or config_path()
    if not path.exists():
        raise ConfigError(f"Failed to read config from {path}. Run 'gog init' to create configuration.")
    doc = _load_toml(path)
    try:
        return Config.model_validate(doc.unwrap())
    except SchemaError as exc:
        problems = "; ".join(f"{'.'.join(map(str, e['loc']))}: {e['msg']}" for e in exc.errors())
        raise ConfigError(f"Malformed config file {path}: {problems}") from exc


def save_config(doc: tomlkit.TOMLDocument, path: Path | None = None) -> Path:
    """Write the config with owner-only permissions; the file holds API tokens."""
    path = path or config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "w") as fh:
        fh.write(tomlkit.dumps(doc))
    # O_CREAT's mode only applies to new files
    os.chmod(path, 0o600)
    _load_toml.cache_clear()
    return path
