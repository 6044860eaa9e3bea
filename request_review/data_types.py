"""Data type definitions for the review request system."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


class InvalidConfigError(ValueError):
    """The reviewers document does not have the expected shape."""


def _as_string_list(value: Any, where: str) -> List[str]:
    """
    Normalise a config value into a list of strings.

    Accepts a sequence of strings, a single string, or null (empty).
    """
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple)):
        values = []
        for item in value:
            if not isinstance(item, (str, int)) or isinstance(item, bool):
                raise InvalidConfigError(
                    f"{where} must only contain strings, got {item!r}"
                )
            values.append(str(item))
        return values
    raise InvalidConfigError(
        f"{where} must be a list of strings, got {type(value).__name__}"
    )


def _as_string_list_mapping(value: Any, where: str) -> Dict[str, List[str]]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise InvalidConfigError(
            f"{where} must be a mapping, got {type(value).__name__}"
        )
    return {
        str(key): _as_string_list(targets, f"{where}.{key}")
        for key, targets in value.items()
    }


@dataclass
class ReviewOptions:
    """
    Options section of the reviewers document.

    Attributes:
        ignore_draft: Skip draft pull requests
        ignored_keywords: Skip pull requests whose title contains any of
            these (case-sensitive)
        enable_group_assignment: Also request the author's group mates
        number_of_reviewers: Cap on reviewers requested per run
    """

    ignore_draft: bool = False
    ignored_keywords: List[str] = field(default_factory=list)
    enable_group_assignment: bool = False
    number_of_reviewers: Optional[int] = None

    @classmethod
    def from_dict(cls, raw: Any) -> "ReviewOptions":
        if raw is None:
            return cls()
        if not isinstance(raw, dict):
            raise InvalidConfigError("options must be a mapping")

        number_of_reviewers = raw.get("number_of_reviewers")
        if number_of_reviewers is not None and (
            isinstance(number_of_reviewers, bool)
            or not isinstance(number_of_reviewers, int)
            or number_of_reviewers <= 0
        ):
            raise InvalidConfigError(
                "options.number_of_reviewers must be a positive integer, "
                f"got {number_of_reviewers!r}"
            )

        return cls(
            ignore_draft=bool(raw.get("ignore_draft", False)),
            ignored_keywords=_as_string_list(
                raw.get("ignored_keywords"), "options.ignored_keywords"
            ),
            enable_group_assignment=bool(
                raw.get("enable_group_assignment", False)
            ),
            number_of_reviewers=number_of_reviewers,
        )


@dataclass
class ReviewersSection:
    """
    Reviewers section of the reviewers document.

    Attributes:
        defaults: Aliases requested when no other rule matches
        groups: Group name -> member aliases (may name other groups)
        per_author: Author login or group name -> aliases to request
    """

    defaults: List[str] = field(default_factory=list)
    groups: Dict[str, List[str]] = field(default_factory=dict)
    per_author: Dict[str, List[str]] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: Any) -> "ReviewersSection":
        if raw is None:
            return cls()
        if not isinstance(raw, dict):
            raise InvalidConfigError("reviewers must be a mapping")
        return cls(
            defaults=_as_string_list(raw.get("defaults"), "reviewers.defaults"),
            groups=_as_string_list_mapping(raw.get("groups"), "reviewers.groups"),
            per_author=_as_string_list_mapping(
                raw.get("per_author"), "reviewers.per_author"
            ),
        )


@dataclass
class ReviewConfig:
    """The whole reviewers document, immutable for the run."""

    reviewers: ReviewersSection = field(default_factory=ReviewersSection)
    files: Dict[str, List[str]] = field(default_factory=dict)
    options: ReviewOptions = field(default_factory=ReviewOptions)

    @classmethod
    def from_dict(cls, raw: Any) -> "ReviewConfig":
        if not isinstance(raw, dict):
            raise InvalidConfigError(
                "The reviewers document must be a mapping at the top level"
            )
        return cls(
            reviewers=ReviewersSection.from_dict(raw.get("reviewers")),
            files=_as_string_list_mapping(raw.get("files"), "files"),
            options=ReviewOptions.from_dict(raw.get("options")),
        )


@dataclass(frozen=True)
class PullRequest:
    """Facts about the pull request that triggered the run."""

    title: str
    is_draft: bool
    author: str
    number: int = 0


@dataclass
class ValidationReport:
    """
    Outcome of an access check.

    Attributes:
        validated: Aliases confirmed to have repository access
        missing_access: Aliases lacking access (or whose check failed)
    """

    validated: List[str] = field(default_factory=list)
    missing_access: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class NotificationComment:
    """A comment previously posted on the PR by this action."""

    id: int
    body: str
