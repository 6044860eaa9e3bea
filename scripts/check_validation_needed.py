"""
Check if the reviewers document changed in the current pull request.

Workflows use this to decide whether to run the request with
`validate_all`, so a PR editing the document is told about any alias
in it that has no access to the repository.

Exit codes:
    0: Validation needed (the reviewers document is among the changed files)
    1: Validation not needed

Environment Variables:
    INPUT_CONFIG: Path of the reviewers document (default: .github/reviewers.yml)
    INPUT_TOKEN / GITHUB_TOKEN, GITHUB_REPOSITORY, GITHUB_EVENT_PATH
"""

import sys
from pathlib import Path, PurePosixPath

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from request_review.env_constants import get_settings  # noqa: E402
from request_review.github_client import GitHubClient  # noqa: E402


def main() -> None:
    """
    Check the changed files of the pull request for the reviewers document.

    Returns:
        Exit code 0 if validation is needed, 1 if not
    """
    settings = get_settings()
    config_path = str(PurePosixPath(settings.config_path))

    changed_files = GitHubClient(settings).fetch_changed_files()
    print(f"📋 Reviewers document: {config_path}")
    print(f"📊 Changed files in the pull request: {len(changed_files)}")

    if config_path in changed_files:
        print("✅ Reviewers document changed - validation is needed")
        sys.exit(0)
    else:
        print("⏳ Reviewers document unchanged - validation not needed")
        sys.exit(1)


if __name__ == "__main__":
    main()
