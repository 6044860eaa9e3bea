import os
from dataclasses import dataclass
from enum import Enum

from dotenv import find_dotenv, load_dotenv

load_dotenv(find_dotenv())

DEFAULT_CONFIG_PATH = ".github/reviewers.yml"
DEFAULT_API_URL = "https://api.github.com"
DEFAULT_GRAPHQL_URL = "https://api.github.com/graphql"

# Teams are written as "team:<slug>" everywhere in the config
TEAM_PREFIX = "team:"

# Hidden marker used to find our own notification comment on the PR
NOTIFICATION_MARKER = "<!-- auto-request-review:missing-access -->"

# GitHub REST pagination
PER_PAGE = 100

# Seconds before a single GitHub API request is abandoned
REQUEST_TIMEOUT = 30

# Upper bound of concurrent access checks
MAX_ACCESS_CHECK_WORKERS = 10


class InputNames(str, Enum):
    """Action inputs, as exposed by the runner (INPUT_<NAME>)"""

    TOKEN = "token"
    CONFIG = "config"
    USE_LOCAL = "use_local"
    VALIDATE_ALL = "validate_all"


class ReviewStates(str, Enum):
    """Review states reported by the GitHub GraphQL API"""

    APPROVED = "APPROVED"
    CHANGES_REQUESTED = "CHANGES_REQUESTED"
    COMMENTED = "COMMENTED"


def get_input(name: str, default: str = "") -> str:
    """
    Read an action input from the environment.

    The runner exposes `with:` inputs as INPUT_<NAME> (upper case,
    spaces replaced by underscores).
    """
    key = f"INPUT_{name.replace(' ', '_').upper()}"
    return os.environ.get(key, default).strip()


def get_boolean_input(name: str) -> bool:
    return get_input(name).lower() == "true"


@dataclass(frozen=True)
class ActionSettings:
    """
    Process-level settings, read once per run.

    Attributes:
        token: GitHub token used for every API call
        config_path: Path of the reviewers YAML document
        use_local: Read the config from the checked-out workspace
        validate_all: Also check access for every alias in the config
        repository: "owner/repo" of the pull request
        event_path: Path of the webhook payload written by the runner
        ref: Git ref the config is fetched from
        api_url: Base URL of the GitHub REST API
        graphql_url: Endpoint of the GitHub GraphQL API
    """

    token: str
    config_path: str = DEFAULT_CONFIG_PATH
    use_local: bool = False
    validate_all: bool = False
    repository: str = ""
    event_path: str = ""
    ref: str = ""
    api_url: str = DEFAULT_API_URL
    graphql_url: str = DEFAULT_GRAPHQL_URL

    @property
    def owner(self) -> str:
        return self.repository.split("/", 1)[0]

    @property
    def repo(self) -> str:
        parts = self.repository.split("/", 1)
        return parts[1] if len(parts) == 2 else ""


def load_settings(
    config_path: str | None = None,
    use_local: bool | None = None,
    validate_all: bool | None = None,
) -> ActionSettings:
    """
    Build the settings from action inputs and runner variables.

    Explicit arguments (coming from CLI flags) win over the environment.
    """
    token = get_input(InputNames.TOKEN.value) or os.environ.get(
        "GITHUB_TOKEN", ""
    )

    return ActionSettings(
        token=token,
        config_path=(
            config_path
            or get_input(InputNames.CONFIG.value)
            or DEFAULT_CONFIG_PATH
        ),
        use_local=(
            use_local
            if use_local is not None
            else get_boolean_input(InputNames.USE_LOCAL.value)
        ),
        validate_all=(
            validate_all
            if validate_all is not None
            else get_boolean_input(InputNames.VALIDATE_ALL.value)
        ),
        repository=os.environ.get("GITHUB_REPOSITORY", ""),
        event_path=os.environ.get("GITHUB_EVENT_PATH", ""),
        ref=os.environ.get("GITHUB_REF", ""),
        api_url=os.environ.get("GITHUB_API_URL", DEFAULT_API_URL).rstrip("/"),
        graphql_url=os.environ.get("GITHUB_GRAPHQL_URL", DEFAULT_GRAPHQL_URL),
    )


_cached_settings: ActionSettings | None = None


def get_settings() -> ActionSettings:
    """Return the cached settings for this process."""
    global _cached_settings
    if _cached_settings is None:
        _cached_settings = load_settings()
    return _cached_settings


def reset_settings() -> None:
    """Clear cached settings (for tests)."""
    global _cached_settings
    _cached_settings = None
