"""Comment listing the aliases from the config that lack repository access."""

from typing import Optional, Sequence

from request_review.data_types import NotificationComment
from request_review.env_constants import NOTIFICATION_MARKER
from request_review.utilities import unique


def is_notification_comment(body: Optional[str]) -> bool:
    return NOTIFICATION_MARKER in (body or "")


def build_notification_body(missing_access: Sequence[str]) -> str:
    """
    Render the comment body.

    Aliases are sorted so the same report always renders the same text.
    With nothing missing, the body states that every alias has access
    (used to neutralize a previous warning).
    """
    if not missing_access:
        return "\n".join(
            [
                NOTIFICATION_MARKER,
                "✅ All reviewers in the configuration have access to this "
                "repository.",
            ]
        )

    lines = [
        NOTIFICATION_MARKER,
        "⚠️ **Some reviewers could not be requested**",
        "",
        "The following aliases from the reviewers configuration do not have "
        "access to this repository:",
        "",
    ]
    lines.extend(f"- `{alias}`" for alias in sorted(unique(missing_access)))
    lines.extend(
        [
            "",
            "Grant them access to the repository, or remove them from the "
            "configuration.",
        ]
    )
    return "\n".join(lines)


def _normalize(body: str) -> str:
    return body.replace("\r\n", "\n").strip()


def needs_update(existing_comment: NotificationComment, body: str) -> bool:
    return _normalize(existing_comment.body) != _normalize(body)
