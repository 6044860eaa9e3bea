"""
Reviewer Resolution

Pure rules that decide who should review a pull request, given the
reviewers document, the changed files and the author.

BUSINESS LOGIC:
1. Gate: nothing is requested when the PR is a draft and
   `options.ignore_draft` is on, or when its title contains any of
   `options.ignored_keywords` (case-sensitive substring).

2. Reviewer sources (all unioned, no priority between them):
   a) FILES: every `files` pattern matching at least one changed file
      contributes its aliases. The author is excluded.
   b) PER AUTHOR: `reviewers.per_author` entries keyed by the author, or
      by a group the author belongs to. The author is excluded.
   c) GROUP MATES: with `options.enable_group_assignment`, the other
      members of every group listing the author directly.

3. Defaults: only when a), b) and c) are all empty, `reviewers.defaults`
   is used instead (the author is excluded).

4. Groups: any alias may name a group from `reviewers.groups`; groups
   expand recursively and may reference each other (cycles stop at the
   group already being expanded).

5. Cap: with `options.number_of_reviewers`, a uniformly random subset of
   that size is picked from the validated reviewers.

EXAMPLE:
files: {"**/*.js": ["mario-brothers", "princess-peach"]}
groups: {"mario-brothers": ["mario", "luigi"]}
Changed: path/to/file.js, author: luigi
Result: mario, princess-peach (luigi never reviews their own PR)
"""

import random
from itertools import chain
from typing import Dict, Iterable, List, Optional, Sequence, Set

from request_review.data_types import ReviewConfig
from request_review.utilities import matches, unique


def expand_group(
    reference: str,
    groups: Dict[str, List[str]],
    expanding: Optional[Set[str]] = None,
) -> List[str]:
    """
    Replace a group name with the aliases it stands for.

    Args:
        reference: An alias or a group name
        groups: The `reviewers.groups` mapping
        expanding: Group names currently being expanded (cycle guard)

    Returns:
        The reachable aliases, deduplicated in config order. A name that
        is not a group key is returned as-is.
    """
    if reference not in groups:
        return [reference]

    expanding = set() if expanding is None else expanding
    if reference in expanding:
        return []

    expanding.add(reference)
    aliases: List[str] = []
    for member in groups[reference]:
        aliases.extend(expand_group(member, groups, expanding))
    expanding.discard(reference)

    return unique(aliases)


def _expand_all(references: Iterable[str], config: ReviewConfig) -> List[str]:
    groups = config.reviewers.groups
    return unique(
        chain.from_iterable(
            expand_group(reference, groups) for reference in references
        )
    )


def should_request_review(
    title: str, is_draft: bool, config: ReviewConfig
) -> bool:
    options = config.options

    if options.ignore_draft and is_draft:
        return False

    if any(keyword in title for keyword in options.ignored_keywords):
        return False

    return True


def identify_reviewers_by_changed_files(
    config: ReviewConfig,
    changed_files: Sequence[str],
    excludes: Iterable[str] = (),
) -> List[str]:
    matching_targets = [
        targets
        for pattern, targets in config.files.items()
        if any(matches(pattern, path) for path in changed_files)
    ]
    excluded = set(excludes)

    return [
        alias
        for alias in _expand_all(chain.from_iterable(matching_targets), config)
        if alias not in excluded
    ]


def identify_reviewers_by_author(config: ReviewConfig, author: str) -> List[str]:
    """
    Reviewers configured for this author in `reviewers.per_author`.

    Keys may be logins or group names; every key the author matches
    (directly or through group membership) contributes its targets.
    The author is never among the results.
    """
    groups = config.reviewers.groups
    per_author = config.reviewers.per_author

    matching_keys = [
        key
        for key in per_author
        if key == author
        or (key in groups and author in expand_group(key, groups))
    ]

    return [
        alias
        for alias in _expand_all(
            chain.from_iterable(per_author[key] for key in matching_keys), config
        )
        if alias != author
    ]


def fetch_other_group_members(config: ReviewConfig, author: str) -> List[str]:
    """
    The author's group mates, when `options.enable_group_assignment` is on.

    Only groups listing the author as a direct member count. Nested
    group names among the members are expanded.
    """
    if not config.options.enable_group_assignment:
        return []

    belonging_groups = [
        members
        for members in config.reviewers.groups.values()
        if author in members
    ]

    return [
        alias
        for alias in _expand_all(chain.from_iterable(belonging_groups), config)
        if alias != author
    ]


def fetch_default_reviewers(
    config: ReviewConfig, excludes: Iterable[str] = ()
) -> List[str]:
    excluded = set(excludes)
    return [
        alias
        for alias in _expand_all(config.reviewers.defaults, config)
        if alias not in excluded
    ]


def fetch_all_reviewers(config: ReviewConfig) -> List[str]:
    """
    Every alias mentioned anywhere in the document, groups expanded.

    Used by the validate-all pass only; it does not depend on the PR.
    """
    reviewers = config.reviewers
    references = chain(
        reviewers.defaults,
        chain.from_iterable(reviewers.groups.values()),
        chain.from_iterable(config.files.values()),
        chain.from_iterable(reviewers.per_author.values()),
    )
    return _expand_all(references, config)


def randomly_pick_reviewers(
    reviewers: Sequence[str],
    config: ReviewConfig,
    rng: Optional[random.Random] = None,
) -> List[str]:
    """
    Apply `options.number_of_reviewers`.

    Args:
        reviewers: Validated reviewers
        config: The reviewers document
        rng: Source of randomness (defaults to the `random` module);
            pass a seeded `random.Random` for reproducible picks

    Returns:
        The reviewers unchanged when no cap applies, otherwise exactly
        `number_of_reviewers` distinct reviewers picked without
        replacement.
    """
    number_of_reviewers = config.options.number_of_reviewers
    if number_of_reviewers is None or number_of_reviewers >= len(reviewers):
        return list(reviewers)

    picker = rng if rng is not None else random
    return picker.sample(list(reviewers), number_of_reviewers)
