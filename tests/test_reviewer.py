import random
from typing import List

import pytest

from request_review.data_types import ReviewConfig
from request_review.reviewer import (
    fetch_all_reviewers,
    fetch_default_reviewers,
    fetch_other_group_members,
    identify_reviewers_by_author,
    identify_reviewers_by_changed_files,
    randomly_pick_reviewers,
    should_request_review,
)
from tests.utils import build_config


class TestShouldRequestReview:
    """Gate on draft state and ignored keywords"""

    @pytest.mark.parametrize(
        "ignore_draft,is_draft,expected",
        [
            (True, True, False),
            (True, False, True),
            (False, True, True),
            (False, False, True),
        ],
        ids=[
            "Draft ignored",
            "Ready PR with ignore_draft",
            "Draft without ignore_draft",
            "Ready PR without options",
        ],
    )
    def test_draft(self, ignore_draft: bool, is_draft: bool, expected: bool):
        config = build_config(options={"ignore_draft": ignore_draft})
        assert (
            should_request_review(title="Nice Pull Request", is_draft=is_draft, config=config)
            is expected
        )

    def test_ignored_keyword_in_title(self):
        config = build_config(options={"ignored_keywords": ["NOT NICE"]})
        assert not should_request_review(
            title="[NOT NICE] Nice Pull Request", is_draft=False, config=config
        )

    def test_ignored_keywords_are_case_sensitive(self):
        config = build_config(options={"ignored_keywords": ["NOT NICE"]})
        assert should_request_review(
            title="[not nice] Nice Pull Request", is_draft=False, config=config
        )

    def test_any_keyword_is_enough(self):
        config = build_config(options={"ignored_keywords": ["WIP", "DO NOT REVIEW"]})
        assert not should_request_review(title="WIP: refactor", is_draft=False, config=config)

    def test_no_options(self):
        assert should_request_review(title="WIP", is_draft=True, config=ReviewConfig())

    def test_empty_keyword_matches_every_title(self):
        config = build_config(options={"ignored_keywords": [""]})
        assert not should_request_review(title="Nice Pull Request", is_draft=False, config=config)


class TestIdentifyReviewersByChangedFiles:
    def test_excludes_author(self, config: ReviewConfig):
        reviewers = identify_reviewers_by_changed_files(
            config=config, changed_files=["path/to/file.js"], excludes=["luigi"]
        )
        assert sorted(reviewers) == ["mario", "princess-peach"]

    def test_union_of_matching_patterns(self, config: ReviewConfig):
        reviewers = identify_reviewers_by_changed_files(
            config=config,
            changed_files=["path/to/file.js", "path/to/file.rb"],
            excludes=["luigi"],
        )
        assert sorted(reviewers) == ["mario", "princess-peach", "waluigi", "wario"]

    def test_no_matching_pattern(self, config: ReviewConfig):
        assert (
            identify_reviewers_by_changed_files(
                config=config, changed_files=["path/to/file.py"], excludes=[]
            )
            == []
        )

    def test_no_duplicates(self):
        config = build_config(
            reviewers={"groups": {"js-lovers": ["mario", "luigi"]}},
            files={
                "**/*.js": ["js-lovers", "mario"],
                "src/**": ["mario", "team:koopa-troop"],
            },
        )
        reviewers = identify_reviewers_by_changed_files(
            config=config, changed_files=["src/index.js", "src/app.js"]
        )
        assert len(reviewers) == len(set(reviewers))
        assert set(reviewers) == {"mario", "luigi", "team:koopa-troop"}

    def test_author_excluded_even_when_named_directly(self):
        config = build_config(files={"**": ["luigi", "mario"]})
        reviewers = identify_reviewers_by_changed_files(
            config=config, changed_files=["README.md"], excludes=["luigi"]
        )
        assert reviewers == ["mario"]

    def test_idempotent(self, config: ReviewConfig):
        kwargs = dict(
            config=config,
            changed_files=["path/to/file.js", "path/to/file.rb"],
            excludes=["luigi"],
        )
        assert identify_reviewers_by_changed_files(**kwargs) == (
            identify_reviewers_by_changed_files(**kwargs)
        )


class TestIdentifyReviewersByAuthor:
    GROUPS = {
        "mario-brothers": ["mario", "dr-mario", "luigi"],
        "mario-alike": ["mario", "dr-mario", "wario"],
    }

    def test_per_author_login(self):
        config = build_config(
            reviewers={"groups": self.GROUPS, "per_author": {"luigi": ["mario", "waluigi"]}}
        )
        assert sorted(identify_reviewers_by_author(config=config, author="luigi")) == [
            "mario",
            "waluigi",
        ]

    def test_per_author_group_key(self):
        config = build_config(
            reviewers={
                "groups": self.GROUPS,
                "per_author": {"mario-brothers": ["mario-brothers", "waluigi"]},
            }
        )
        assert sorted(identify_reviewers_by_author(config=config, author="luigi")) == [
            "dr-mario",
            "mario",
            "waluigi",
        ]

    def test_group_key_not_containing_author(self):
        config = build_config(
            reviewers={"groups": self.GROUPS, "per_author": {"mario-alike": ["waluigi"]}}
        )
        assert identify_reviewers_by_author(config=config, author="luigi") == []

    def test_login_and_group_keys_are_unioned(self):
        config = build_config(
            reviewers={
                "groups": self.GROUPS,
                "per_author": {
                    "luigi": ["princess-peach"],
                    "mario-brothers": ["team:toads"],
                },
            }
        )
        assert sorted(identify_reviewers_by_author(config=config, author="luigi")) == [
            "princess-peach",
            "team:toads",
        ]

    def test_no_per_author(self, config: ReviewConfig):
        assert identify_reviewers_by_author(config=config, author="luigi") == []


class TestFetchOtherGroupMembers:
    GROUPS = {
        "mario-brothers": ["mario", "dr-mario", "luigi"],
        "mario-alike": ["mario", "dr-mario", "wario"],
    }

    def test_disabled_by_default(self):
        config = build_config(reviewers={"groups": self.GROUPS})
        assert fetch_other_group_members(config=config, author="luigi") == []

    def test_enabled(self):
        config = build_config(
            reviewers={"groups": self.GROUPS},
            options={"enable_group_assignment": True},
        )
        assert sorted(fetch_other_group_members(config=config, author="luigi")) == [
            "dr-mario",
            "mario",
        ]

    def test_author_in_several_groups(self):
        config = build_config(
            reviewers={"groups": self.GROUPS},
            options={"enable_group_assignment": True},
        )
        assert sorted(fetch_other_group_members(config=config, author="mario")) == [
            "dr-mario",
            "luigi",
            "wario",
        ]

    def test_author_in_no_group(self):
        config = build_config(
            reviewers={"groups": self.GROUPS},
            options={"enable_group_assignment": True},
        )
        assert fetch_other_group_members(config=config, author="yoshi") == []

    def test_teams_in_author_group_are_kept(self):
        config = build_config(
            reviewers={"groups": {"plumbers": ["luigi", "team:plumbers"]}},
            options={"enable_group_assignment": True},
        )
        assert fetch_other_group_members(config=config, author="luigi") == ["team:plumbers"]


class TestFetchDefaultReviewers:
    def test_expands_groups_and_excludes_author(self):
        config = build_config(
            reviewers={
                "defaults": ["dr-mario", "mario-brothers"],
                "groups": {"mario-brothers": ["mario", "luigi"]},
            }
        )
        assert sorted(fetch_default_reviewers(config=config, excludes=["luigi"])) == [
            "dr-mario",
            "mario",
        ]

    def test_no_defaults(self):
        assert fetch_default_reviewers(config=ReviewConfig(), excludes=["luigi"]) == []


class TestFetchAllReviewers:
    def test_every_section_is_included(self):
        config = build_config(
            reviewers={
                "defaults": ["dr-mario"],
                "groups": {"mario-brothers": ["mario", "luigi"]},
                "per_author": {"luigi": ["yoshi", "mario-brothers"]},
            },
            files={
                "**/*.js": ["mario-brothers", "team:peach-alliance"],
                "**/*.rb": ["wario", "waluigi", "team:bowser-and-co"],
            },
        )
        assert sorted(fetch_all_reviewers(config)) == sorted(
            [
                "dr-mario",
                "mario",
                "luigi",
                "team:peach-alliance",
                "wario",
                "waluigi",
                "team:bowser-and-co",
                "yoshi",
            ]
        )

    def test_group_names_are_not_aliases(self, config: ReviewConfig):
        assert "mario-brothers" not in fetch_all_reviewers(config)

    def test_empty_config(self):
        assert fetch_all_reviewers(ReviewConfig()) == []


class TestRandomlyPickReviewers:
    REVIEWERS = ["dr-mario", "mario", "waluigi"]

    def test_no_cap(self):
        assert randomly_pick_reviewers(self.REVIEWERS, ReviewConfig()) == self.REVIEWERS

    @pytest.mark.parametrize("cap", [3, 5], ids=["Cap equals size", "Cap above size"])
    def test_cap_not_below_size(self, cap: int):
        config = build_config(options={"number_of_reviewers": cap})
        assert randomly_pick_reviewers(self.REVIEWERS, config) == self.REVIEWERS

    @pytest.mark.parametrize("seed", range(20))
    def test_cap_picks_distinct_subset(self, seed: int):
        config = build_config(options={"number_of_reviewers": 2})
        picked: List[str] = randomly_pick_reviewers(
            self.REVIEWERS, config, rng=random.Random(seed)
        )
        assert len(picked) == 2
        assert len(set(picked)) == 2
        assert set(picked) <= set(self.REVIEWERS)

    def test_seeded_picks_are_reproducible(self):
        config = build_config(options={"number_of_reviewers": 1})
        first = randomly_pick_reviewers(self.REVIEWERS, config, rng=random.Random(42))
        second = randomly_pick_reviewers(self.REVIEWERS, config, rng=random.Random(42))
        assert first == second

    def test_every_reviewer_can_be_picked(self):
        config = build_config(options={"number_of_reviewers": 1})
        rng = random.Random(7)
        picked = {
            randomly_pick_reviewers(self.REVIEWERS, config, rng=rng)[0]
            for _ in range(200)
        }
        assert picked == set(self.REVIEWERS)

    def test_input_is_not_mutated(self):
        reviewers = list(self.REVIEWERS)
        config = build_config(options={"number_of_reviewers": 1})
        randomly_pick_reviewers(reviewers, config, rng=random.Random(1))
        assert reviewers == self.REVIEWERS
