import re
from typing import Iterable, List, Tuple

from wcmatch import glob

from request_review.env_constants import TEAM_PREFIX

# `**` spans directories, `{a,b}` alternates, wildcards match dot-files.
# Paths from GitHub always use "/" and are case-sensitive.
GLOB_FLAGS = glob.GLOBSTAR | glob.BRACE | glob.DOTGLOB | glob.FORCEUNIX


def unique(aliases: Iterable[str]) -> List[str]:
    """Drop duplicates, keeping the first-seen order."""
    return list(dict.fromkeys(aliases))


def is_team(alias: str) -> bool:
    return alias.startswith(TEAM_PREFIX)


def strip_team_prefix(alias: str) -> str:
    """"team:koopa-troop" -> "koopa-troop" (individuals are unchanged)"""
    return alias[len(TEAM_PREFIX):] if is_team(alias) else alias


def partition_aliases(aliases: Iterable[str]) -> Tuple[List[str], List[str]]:
    """
    Split aliases into individuals and teams.

    Returns:
        Tuple of (individual logins, team slugs without the prefix)
    """
    individuals: List[str] = []
    teams: List[str] = []
    for alias in aliases:
        if is_team(alias):
            teams.append(strip_team_prefix(alias))
        else:
            individuals.append(alias)
    return individuals, teams


def format_aliases(aliases: Iterable[str]) -> str:
    text = ", ".join(aliases)
    return text if text else "(none)"


def matches(pattern: str, path: str) -> bool:
    """
    Tell whether a changed file path matches a `files` pattern.

    `*` stays inside one path segment, `**` as a whole segment spans any
    number of them (including none), `?` is one character other than
    "/", and `[...]` / `[!...]` are character classes. A pattern the
    regex engine rejects (e.g. the range `[z-a]`) only matches itself.
    """
    try:
        return glob.globmatch(path, pattern, flags=GLOB_FLAGS)
    except re.error:
        return pattern == path
