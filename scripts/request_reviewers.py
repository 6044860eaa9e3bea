"""
Auto Request Review

Requests reviews on a pull request according to the reviewers document
(`.github/reviewers.yml` by default).

FLOW:
1. Fetch the reviewers document (from the repository, or from the
   workspace with `use_local`). No document → nothing to do.
2. Skip drafts / ignored keywords according to the options.
3. Collect reviewers from changed files, per-author rules and (when
   enabled) the author's group mates. Fall back to the defaults when none
   matched; stop when there are no defaults either.
4. Drop aliases already requested or that already approved.
5. Keep only aliases with access to the repository. With `validate_all`,
   also check every other alias of the document and report the ones
   without access.
6. Randomly cap to `number_of_reviewers`, then request the reviews.
7. Create, update or neutralize the missing-access comment.

Usage:
    python scripts/request_reviewers.py
    python scripts/request_reviewers.py --config .github/reviewers.yml --use-local
    python scripts/request_reviewers.py --validate-all

Environment Variables:
    INPUT_TOKEN / GITHUB_TOKEN: Token used for the GitHub API
    INPUT_CONFIG: Path of the reviewers document
    INPUT_USE_LOCAL: "true" to read the document from the workspace
    INPUT_VALIDATE_ALL: "true" to check access for every alias
    GITHUB_REPOSITORY, GITHUB_EVENT_PATH, GITHUB_REF: Set by the runner

Exit Codes:
    0: Success (including runs that had nothing to do)
    1: Failure
"""

import argparse
import random
import sys
import traceback
from pathlib import Path
from typing import List, Optional

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

# pylint: next-line: disable=wrong-import-position
from request_review.config_loader import (  # noqa: E402
    ConfigNotFound,
    LocalConfigMissing,
    fetch_config,
)
from request_review.data_types import ValidationReport  # noqa: E402
from request_review.env_constants import ActionSettings, load_settings  # noqa: E402
from request_review.github_client import GitHubClient  # noqa: E402
from request_review.reviewer import (  # noqa: E402
    fetch_all_reviewers,
    fetch_default_reviewers,
    fetch_other_group_members,
    identify_reviewers_by_author,
    identify_reviewers_by_changed_files,
    randomly_pick_reviewers,
    should_request_review,
)
from request_review.utilities import format_aliases, unique  # noqa: E402


def run(
    settings: ActionSettings,
    client: GitHubClient,
    rng: Optional[random.Random] = None,
) -> None:
    """
    Request reviews for the current pull request.

    Args:
        settings: Process settings, read once for the run
        client: GitHub collaborator (see GitHubClient)
        rng: Source of randomness for `number_of_reviewers`

    Missing configuration, ignored pull requests and the absence of any
    matching reviewer end the run quietly. Any other error propagates.
    """
    print("📋 Fetching configuration file from the source branch")
    try:
        config = fetch_config(settings, client)
    except ConfigNotFound:
        print(
            "⚠️  No configuration file is found in the base branch; "
            "terminating the process"
        )
        return
    except LocalConfigMissing:
        print(
            "⚠️  No configuration file is found locally; "
            "terminating the process"
        )
        return

    pull_request = client.get_pull_request()
    author = pull_request.author

    if not should_request_review(
        title=pull_request.title,
        is_draft=pull_request.is_draft,
        config=config,
    ):
        print("ℹ️  Matched the ignoring rules; terminating the process")
        return

    print("Fetching changed files in the pull request")
    changed_files = client.fetch_changed_files()

    print("Fetching reviewers")
    current_reviewers = client.fetch_current_reviewers()
    print(
        "   Aliases already requested or approved: "
        f"{format_aliases(current_reviewers)}"
    )

    print("Identifying reviewers based on the changed files")
    reviewers_based_on_files = identify_reviewers_by_changed_files(
        config=config, changed_files=changed_files, excludes=[author]
    )

    print("Identifying reviewers based on the author")
    reviewers_based_on_author = identify_reviewers_by_author(
        config=config, author=author
    )

    print("Adding other group members if group assignment is enabled")
    reviewers_from_same_groups = fetch_other_group_members(
        config=config, author=author
    )

    reviewers: List[str] = unique(
        [
            *reviewers_based_on_files,
            *reviewers_based_on_author,
            *reviewers_from_same_groups,
        ]
    )

    if not reviewers:
        print("ℹ️  Matched no reviewers")
        default_reviewers = fetch_default_reviewers(config=config, excludes=[author])
        if not default_reviewers:
            print("ℹ️  No default reviewers are matched; terminating the process")
            return

        print("Falling back to the default reviewers")
        reviewers = default_reviewers

    print(
        f"   Possible reviewers: {format_aliases(reviewers)}; "
        "filtering out already requested or approved reviewers"
    )
    reviewers = [
        reviewer for reviewer in reviewers if reviewer not in current_reviewers
    ]

    print(
        f"   Possible new reviewers: {format_aliases(reviewers)}; "
        "filtering to only collaborators"
    )
    validated, missing_access = client.check_access(reviewers)
    report = ValidationReport(
        validated=list(validated), missing_access=list(missing_access)
    )

    # Aliases validated by this pass are reported on, never requested
    if settings.validate_all:
        print(
            "👥 Validate all mode: checking every alias of the configuration file"
        )
        already_checked = set(report.validated) | set(report.missing_access)
        remaining = [
            alias
            for alias in fetch_all_reviewers(config)
            if alias not in already_checked
        ]
        print(f"   All other possible reviewers: {format_aliases(remaining)}")

        _, additional_missing_access = client.check_access(remaining)
        report.missing_access = unique(
            [*report.missing_access, *additional_missing_access]
        )

    print("Randomly picking reviewers if the number of reviewers is set")
    reviewers = randomly_pick_reviewers(report.validated, config, rng=rng)

    if reviewers:
        print(f"✅ Requesting review to {format_aliases(reviewers)}")
        client.assign_reviewers(reviewers)
    else:
        print("ℹ️  No new reviewers to assign to PR")

    # An earlier comment is refreshed even when nothing is missing anymore
    existing_comment = client.get_existing_comment()
    if report.missing_access or existing_comment is not None:
        print(
            "⚠️  Aliases without access: "
            f"{format_aliases(report.missing_access)}; updating notification"
        )
        client.post_notification(report.missing_access, existing_comment)


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(
        description="Request pull request reviews from a reviewers document"
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path of the reviewers document (default: INPUT_CONFIG or "
        ".github/reviewers.yml)",
    )
    parser.add_argument(
        "--use-local",
        action="store_const",
        const=True,
        default=None,
        help="Read the reviewers document from the workspace",
    )
    parser.add_argument(
        "--validate-all",
        action="store_const",
        const=True,
        default=None,
        help="Check repository access for every alias of the document",
    )
    args = parser.parse_args(argv)

    try:
        settings = load_settings(
            config_path=args.config,
            use_local=args.use_local,
            validate_all=args.validate_all,
        )
        run(settings, GitHubClient(settings))
    except Exception as exc:  # noqa: BLE001 # pylint: disable=broad-except
        print(f"\n❌ Error while requesting reviewers: {exc}")
        traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
