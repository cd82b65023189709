"""User configuration: the three sources and how they are merged.

Values come from command line options, ``PRTOOL_*`` environment variables
and a YAML file. Each field is resolved independently: the first source
that actually sets it wins, otherwise the documented default is used.
"""

from collections.abc import Sequence
from logging import getLogger
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from prtool.errors import ConfigFileError

logger = getLogger(__name__)

DEFAULT_SINCE = "-7d"
DEFAULT_LLM_PROVIDER = "stub"


def split_teams(value: str | Sequence[str] | None) -> list[str]:
    """Split a comma-separated team list (or list of such strings) into trimmed identifiers."""
    if value is None:
        return []
    parts = [value] if isinstance(value, str) else list(value)
    teams: list[str] = []
    for part in parts:
        for team in str(part).split(","):
            team = team.strip()
            if team:
                teams.append(team)
    return teams


class PartialConfig(BaseModel):
    """Configuration as provided by a single source. ``None`` means "not given"."""

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    github_token: str | None = None
    org: str | None = None
    team: list[str] | None = None
    user: str | None = None
    repo: str | None = None
    since: str | None = None
    llm_provider: str | None = None
    llm_api_key: str | None = None
    llm_model: str | None = None
    prompt: str | None = None
    output: str | None = None
    log_file: str | None = None
    dry_run: bool | None = None
    verbose: bool | None = None
    ci: bool | None = None

    @field_validator("team", mode="before")
    @classmethod
    def parse_team(cls, v: Any) -> list[str] | None:
        if v is None:
            return None
        return split_teams(v)


class EffectiveConfig(BaseModel):
    """Merged configuration used by the rest of the pipeline. Every field is populated."""

    model_config = ConfigDict(frozen=True)

    github_token: str = ""
    org: str = ""
    teams: list[str] = []
    user: str = ""
    repo: str = ""
    since: str = DEFAULT_SINCE
    llm_provider: str = DEFAULT_LLM_PROVIDER
    llm_api_key: str = ""
    llm_model: str = ""
    prompt: str = ""
    output: str = ""
    log_file: str = ""
    dry_run: bool = False
    verbose: bool = False
    ci: bool = False


class EnvConfig(BaseSettings):
    """Reads the ``PRTOOL_*`` environment variables. Empty variables count as unset."""

    model_config = SettingsConfigDict(env_prefix="PRTOOL_", env_ignore_empty=True, extra="ignore")

    github_token: str | None = None
    org: str | None = None
    # Kept as a plain string so pydantic-settings does not expect JSON
    team: str | None = None
    user: str | None = None
    repo: str | None = None
    since: str | None = None
    llm_provider: str | None = None
    llm_api_key: str | None = None
    llm_model: str | None = None
    prompt: str | None = None
    output: str | None = None
    log_file: str | None = None
    dry_run: bool | None = None
    verbose: bool | None = None
    ci: bool | None = None


def load_env_config() -> PartialConfig:
    """Load configuration from ``PRTOOL_*`` environment variables."""
    env = EnvConfig()
    return PartialConfig.model_validate(env.model_dump())


def load_file_config(path: str | Path | None) -> PartialConfig:
    """Load configuration from a YAML file.

    A missing path or a file that does not exist yields an empty configuration.

    Raises:
        ConfigFileError: If the file cannot be read, is not valid YAML, or has unexpected values
    """
    if not path:
        return PartialConfig()

    file_path = Path(path).expanduser()
    if not file_path.exists():
        logger.debug(f"Config file {file_path} does not exist, skipping")
        return PartialConfig()

    try:
        raw = yaml.safe_load(file_path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigFileError(str(file_path), str(e)) from e
    except yaml.YAMLError as e:
        raise ConfigFileError(str(file_path), f"invalid YAML: {e}") from e

    if raw is None:
        return PartialConfig()
    if not isinstance(raw, dict):
        raise ConfigFileError(str(file_path), "top level must be a mapping")

    try:
        config = PartialConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigFileError(str(file_path), str(e)) from e

    logger.info(f"Loaded configuration from {file_path}")
    return config


def _is_present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip() != ""
    if isinstance(value, list):
        return len(value) > 0
    return True


def first_present(values: Sequence[Any], default: Any) -> Any:
    """Return the first value that counts as set, or ``default``."""
    for value in values:
        if _is_present(value):
            return value
    return default


# Maps each EffectiveConfig field to the PartialConfig field that feeds it.
_FIELD_SOURCES = {
    "github_token": "github_token",
    "org": "org",
    "teams": "team",
    "user": "user",
    "repo": "repo",
    "since": "since",
    "llm_provider": "llm_provider",
    "llm_api_key": "llm_api_key",
    "llm_model": "llm_model",
    "prompt": "prompt",
    "output": "output",
    "log_file": "log_file",
    "dry_run": "dry_run",
    "verbose": "verbose",
    "ci": "ci",
}


def merge_config(
    cli: PartialConfig | None,
    env: PartialConfig | None,
    file: PartialConfig | None,
) -> EffectiveConfig:
    """Merge the configuration sources with precedence cli > env > file > default.

    Args:
        cli: Values from command line options
        env: Values from environment variables
        file: Values from the YAML configuration file

    Returns:
        Fully populated effective configuration
    """
    sources = [source if source is not None else PartialConfig() for source in (cli, env, file)]
    defaults = EffectiveConfig()

    merged: dict[str, Any] = {}
    for field, source_field in _FIELD_SOURCES.items():
        value = first_present([getattr(source, source_field) for source in sources], getattr(defaults, field))
        merged[field] = value.strip() if isinstance(value, str) else value

    return EffectiveConfig(**merged)


SAMPLE_CONFIG = """\
# prtool configuration file
# Values can be overridden by environment variables or command-line options.

# Required: GitHub personal access token
# Environment variable: PRTOOL_GITHUB_TOKEN
github_token: ""

# Scope (set exactly ONE of org, team, user, repo)
# Environment variables: PRTOOL_ORG, PRTOOL_TEAM, PRTOOL_USER, PRTOOL_REPO
org: ""
# One or more teams as org/team, comma-separated or as a list
team: ""
user: ""
# Format: owner/repo
repo: ""

# How far back to look for merged pull requests (e.g. -7d, -2w, -1m, -1yr)
# Environment variable: PRTOOL_SINCE
since: "-7d"

# Summarizer: stub, openai or ollama
# Environment variables: PRTOOL_LLM_PROVIDER, PRTOOL_LLM_API_KEY, PRTOOL_LLM_MODEL
llm_provider: "stub"
llm_api_key: ""
llm_model: ""

# Path to a file with a custom summarization prompt
# Environment variable: PRTOOL_PROMPT
prompt: ""

# Report file (empty prints to stdout)
# Environment variable: PRTOOL_OUTPUT
output: ""

# Log file (empty logs to stderr)
# Environment variable: PRTOOL_LOG_FILE
log_file: ""

# Skip summarization and print the collected pull requests
dry_run: false
# Enable informational logging
verbose: false
# Non-interactive mode: no progress spinners, plain log lines
ci: false
"""


def write_sample_config(path: str | Path) -> Path:
    """Write the annotated sample configuration.

    Raises:
        ConfigFileError: If the file already exists or cannot be written
    """
    target = Path(path)
    if target.exists():
        raise ConfigFileError(str(target), "file already exists")
    try:
        target.write_text(SAMPLE_CONFIG, encoding="utf-8")
    except OSError as e:
        raise ConfigFileError(str(target), str(e)) from e
    return target.resolve()


def load_config(cli: PartialConfig | None, config_path: str | Path | None) -> EffectiveConfig:
    """Load the environment and file sources and merge them under ``cli``.

    Raises:
        ConfigFileError: If the configuration file exists but cannot be loaded
    """
    file_config = load_file_config(config_path)
    env_config = load_env_config()
    return merge_config(cli, env_config, file_config)
