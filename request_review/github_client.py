"""
GitHub Client

Everything the review request run needs from GitHub: the pull request
payload, the reviewers document, changed files, reviewers already
engaged, access checks, review requests and the notification comment.

Access checks are issued concurrently (one request per alias). A check
that fails for any reason marks that alias as lacking access; the other
checks are not affected.
"""

import base64
import json
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional, Sequence, Tuple

import requests

from request_review.config_loader import ConfigNotFound
from request_review.data_types import NotificationComment, PullRequest
from request_review.env_constants import (
    MAX_ACCESS_CHECK_WORKERS,
    PER_PAGE,
    REQUEST_TIMEOUT,
    ActionSettings,
    ReviewStates,
)
from request_review.notification import (
    build_notification_body,
    is_notification_comment,
    needs_update,
)
from request_review.utilities import (
    format_aliases,
    is_team,
    partition_aliases,
    strip_team_prefix,
    unique,
)

# GraphQL Docs: https://docs.github.com/en/graphql/reference/unions#pullrequesttimelineitems
REVIEWERS_QUERY = """
query($cursor: String, $repo: String!, $owner: String!, $number: Int!, $per_page: Int!) {
  repository(owner: $owner, name: $repo) {
    pullRequest(number: $number) {
      timelineItems(first: $per_page, after: $cursor, itemTypes: [REVIEW_REQUESTED_EVENT, PULL_REQUEST_REVIEW]) {
        nodes {
          ... on ReviewRequestedEvent {
            requestedReviewer {
              ... on User { login }
              ... on Team { slug }
            }
          }
          ... on PullRequestReview {
            author { login }
            state
          }
        }
        pageInfo {
          hasNextPage
          endCursor
        }
      }
    }
  }
}
"""


class GitHubAPIError(Exception):
    """The GitHub GraphQL API answered with errors."""


class GitHubClient:
    def __init__(
        self,
        settings: ActionSettings,
        session: Optional[requests.Session] = None,
    ) -> None:
        if not settings.token:
            raise ValueError(
                "A GitHub token is required: set the `token` input "
                "(INPUT_TOKEN) or GITHUB_TOKEN"
            )
        if not settings.owner or not settings.repo:
            raise ValueError(
                f"GITHUB_REPOSITORY must be 'owner/repo', got "
                f"{settings.repository!r}"
            )

        self.settings = settings
        self.session = session if session is not None else requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Bearer {settings.token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
            }
        )
        self._event: Optional[Dict[str, Any]] = None

    # Low level helpers

    @property
    def repo_path(self) -> str:
        return f"/repos/{self.settings.owner}/{self.settings.repo}"

    def _send(self, method: str, path: str, **kwargs) -> requests.Response:
        return self.session.request(
            method,
            f"{self.settings.api_url}{path}",
            timeout=REQUEST_TIMEOUT,
            **kwargs,
        )

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        response = self._send(method, path, **kwargs)
        response.raise_for_status()
        return response

    def _paginate(self, path: str) -> List[Any]:
        """Collect every item of a paginated REST list endpoint."""
        items: List[Any] = []
        page = 0
        while True:
            page += 1
            response = self._request(
                "GET", path, params={"page": page, "per_page": PER_PAGE}
            )
            page_items = response.json()
            items.extend(page_items)
            if len(page_items) < PER_PAGE:
                return items

    def _graphql(self, query: str, variables: Dict[str, Any]) -> Dict[str, Any]:
        response = self.session.request(
            "POST",
            self.settings.graphql_url,
            json={"query": query, "variables": variables},
            timeout=REQUEST_TIMEOUT,
        )
        response.raise_for_status()
        body = response.json()
        if body.get("errors"):
            messages = "; ".join(
                error.get("message", str(error)) for error in body["errors"]
            )
            raise GitHubAPIError(f"GraphQL query failed: {messages}")
        return body.get("data") or {}

    # Pull request facts

    def _load_event(self) -> Dict[str, Any]:
        if self._event is None:
            if not self.settings.event_path:
                raise ValueError("GITHUB_EVENT_PATH is not set")
            with open(self.settings.event_path, encoding="utf-8") as f:
                self._event = json.load(f)
        return self._event

    def get_pull_request(self) -> PullRequest:
        payload = self._load_event().get("pull_request")
        if not payload:
            raise ValueError("The triggering event is not a pull request event")

        return PullRequest(
            title=payload.get("title") or "",
            is_draft=bool(payload.get("draft", False)),
            author=payload["user"]["login"],
            number=int(payload["number"]),
        )

    @property
    def pull_number(self) -> int:
        return self.get_pull_request().number

    # Collaborators used by the run

    def fetch_config_content(self, path: str, ref: str = "") -> str:
        """
        Read a file of the repository through the contents API.

        Raises:
            ConfigNotFound: The file does not exist at `ref`
        """
        params = {"ref": ref} if ref else {}
        response = self._send("GET", f"{self.repo_path}/contents/{path}", params=params)
        if response.status_code == 404:
            raise ConfigNotFound(path)
        response.raise_for_status()

        body = response.json()
        if body.get("encoding", "base64") != "base64":
            return body["content"]
        return base64.b64decode(body["content"]).decode("utf-8")

    def fetch_changed_files(self) -> List[str]:
        files = self._paginate(f"{self.repo_path}/pulls/{self.pull_number}/files")
        return [file["filename"] for file in files]

    def fetch_current_reviewers(self) -> List[str]:
        """
        Aliases already requested at some point, or who already approved.

        Teams are returned as "team:<slug>".
        """
        reviewers: List[str] = []
        cursor: Optional[str] = None

        while True:
            data = self._graphql(
                REVIEWERS_QUERY,
                {
                    "owner": self.settings.owner,
                    "repo": self.settings.repo,
                    "number": self.pull_number,
                    "per_page": PER_PAGE,
                    "cursor": cursor,
                },
            )
            timeline = (
                ((data.get("repository") or {}).get("pullRequest") or {}).get(
                    "timelineItems"
                )
                or {}
            )

            for node in timeline.get("nodes") or []:
                node = node or {}
                requested = node.get("requestedReviewer") or {}
                author = node.get("author") or {}
                if requested.get("slug"):
                    reviewers.append(f"team:{requested['slug']}")
                elif requested.get("login"):
                    reviewers.append(requested["login"])
                elif (
                    node.get("state") == ReviewStates.APPROVED.value
                    and author.get("login")
                ):
                    reviewers.append(author["login"])

            page_info = timeline.get("pageInfo") or {}
            if not page_info.get("hasNextPage"):
                return unique(reviewers)
            cursor = page_info.get("endCursor")

    def _check_alias_access(self, alias: str) -> str:
        owner, repo = self.settings.owner, self.settings.repo
        if is_team(alias):
            # https://docs.github.com/en/rest/teams/teams#check-team-permissions-for-a-repository
            slug = strip_team_prefix(alias)
            response = self._request(
                "GET", f"/orgs/{owner}/teams/{slug}/repos/{owner}/{repo}"
            )
            print(f"   Received status code {response.status_code} for team: {slug}")
        else:
            # https://docs.github.com/en/rest/collaborators/collaborators#check-if-a-user-is-a-repository-collaborator
            response = self._request(
                "GET", f"{self.repo_path}/collaborators/{alias}"
            )
            print(f"   Received status code {response.status_code} for alias: {alias}")
        return alias

    def check_access(self, reviewers: Sequence[str]) -> Tuple[List[str], List[str]]:
        """
        Split aliases by whether they can review in this repository.

        Returns:
            Tuple of (validated aliases, aliases missing access), both in
            input order
        """
        aliases = unique(reviewers)
        if not aliases:
            return [], []

        workers = min(MAX_ACCESS_CHECK_WORKERS, len(aliases))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {
                alias: executor.submit(self._check_alias_access, alias)
                for alias in aliases
            }

        collaborators = set()
        for alias, future in futures.items():
            try:
                collaborators.add(future.result())
            except Exception as exc:  # noqa: BLE001
                kind = "Team" if is_team(alias) else "Individual"
                print(f"❌ {kind}: {alias} failed to be added with error: {exc}")

        validated = [alias for alias in aliases if alias in collaborators]
        missing_access = [alias for alias in aliases if alias not in collaborators]
        print(f"   Filtered list of only collaborators: {format_aliases(validated)}")
        return validated, missing_access

    def assign_reviewers(self, reviewers: Sequence[str]) -> None:
        individuals, teams = partition_aliases(reviewers)
        self._request(
            "POST",
            f"{self.repo_path}/pulls/{self.pull_number}/requested_reviewers",
            json={"reviewers": individuals, "team_reviewers": teams},
        )

    def get_existing_comment(self) -> Optional[NotificationComment]:
        comments = self._paginate(
            f"{self.repo_path}/issues/{self.pull_number}/comments"
        )
        for comment in comments:
            if is_notification_comment(comment.get("body")):
                return NotificationComment(id=comment["id"], body=comment["body"])
        return None

    def post_notification(
        self,
        missing_access: Sequence[str],
        existing_comment: Optional[NotificationComment],
    ) -> None:
        """
        Create, update or neutralize the missing-access comment.

        An existing comment is only rewritten when its text changes.
        """
        body = build_notification_body(missing_access)

        if existing_comment is None:
            if not missing_access:
                return
            self._request(
                "POST",
                f"{self.repo_path}/issues/{self.pull_number}/comments",
                json={"body": body},
            )
            print("✅ Posted notification comment")
            return

        if not needs_update(existing_comment, body):
            print("ℹ️  Notification comment is already up to date")
            return

        self._request(
            "PATCH",
            f"{self.repo_path}/issues/comments/{existing_comment.id}",
            json={"body": body},
        )
        print(f"✅ Updated notification comment {existing_comment.id}")
