"""
Configuration Loader

Loads the reviewers document, either from the repository through the
GitHub API (default) or from the checked-out workspace (`use_local`).

Expected format (YAML):

    reviewers:
      defaults: [repository-owners]
      groups:
        repository-owners: [me]
        js-lovers: [js-man, js-woman, team:js-experts]
      per_author:
        engineers: [engineers, dr-mario]
    files:
      '**/*.js': [js-lovers]
    options:
      ignore_draft: true
      ignored_keywords: [DO NOT REVIEW]
      enable_group_assignment: false
      number_of_reviewers: 3
"""
from pathlib import Path

import yaml

from request_review.data_types import InvalidConfigError, ReviewConfig
from request_review.env_constants import ActionSettings


class ConfigMissingError(Exception):
    """No reviewers document; the run ends without doing anything."""


class ConfigNotFound(ConfigMissingError):
    """The document does not exist in the repository (HTTP 404)."""


class LocalConfigMissing(ConfigMissingError):
    """The document is missing, unreadable or empty in the workspace."""


def parse_config(content: str) -> ReviewConfig:
    """
    Parse the YAML text of the reviewers document.

    Raises:
        yaml.YAMLError: The text is not valid YAML
        InvalidConfigError: The document has an unexpected shape
    """
    raw = yaml.safe_load(content)
    if raw is None:
        raise InvalidConfigError("The reviewers document is empty")
    return ReviewConfig.from_dict(raw)


def read_local_config(config_path: str) -> str:
    try:
        content = Path(config_path).read_text(encoding="utf-8")
    except OSError as exc:
        print(f"   Error when reading local file: {exc}")
        raise LocalConfigMissing(config_path) from exc

    if not content.strip():
        raise LocalConfigMissing(config_path)

    return content


def fetch_config(settings: ActionSettings, client) -> ReviewConfig:
    """
    Load the reviewers document for this run.

    Args:
        settings: Process settings (path, ref, use_local)
        client: Object exposing `fetch_config_content(path, ref)`,
            usually a GitHubClient

    Raises:
        ConfigNotFound: The document is not in the repository
        LocalConfigMissing: The document is not in the workspace
    """
    if settings.use_local:
        content = read_local_config(settings.config_path)
    else:
        content = client.fetch_config_content(settings.config_path, settings.ref)

    return parse_config(content)
