"""
tests/test_badge_rules.py — Unit Tests for Badge Naming & Milestone Detection
==============================================================================

Pure functions only; no database.
"""

from __future__ import annotations

import pytest

from kudos.config import KudosConfig
from kudos.engine.badges import (
    PLACEMENT_BADGES,
    community_badge_name,
    duplicate_positions,
    milestone_badge_name,
)

MILESTONES = KudosConfig().milestones


class TestMilestoneBadgeName:
    @pytest.mark.parametrize("count,expected", [
        (50, "50 Questions"),
        (100, "100 Questions"),
    ])
    def test_question_thresholds(self, count, expected):
        assert milestone_badge_name("question", count, MILESTONES) == expected

    @pytest.mark.parametrize("count,expected", [
        (50, "50 Answers"),
        (100, "100 Answers"),
    ])
    def test_answer_thresholds(self, count, expected):
        assert milestone_badge_name("answer", count, MILESTONES) == expected

    @pytest.mark.parametrize("count", [0, 1, 49, 51, 99, 101, 150, 200])
    def test_non_threshold_counts_earn_nothing(self, count):
        assert milestone_badge_name("question", count, MILESTONES) is None
        assert milestone_badge_name("answer", count, MILESTONES) is None

    def test_unknown_activity(self):
        assert milestone_badge_name("comment", 50, MILESTONES) is None

    def test_custom_table_and_template(self):
        table = {"question": {10: "Curious ({threshold})", 25: "Inquisitive"}}
        assert milestone_badge_name("question", 10, table) == "Curious (10)"
        assert milestone_badge_name("question", 25, table) == "Inquisitive"
        assert milestone_badge_name("question", 50, table) is None


class TestNames:
    def test_community_badge_name(self):
        assert community_badge_name("Pythonistas") == "Community Member: Pythonistas"

    def test_placement_badges_in_rank_order(self):
        assert PLACEMENT_BADGES == ("1st Place", "2nd Place", "3rd Place")


class TestDuplicatePositions:
    def test_keeps_first_occurrence(self):
        assert duplicate_positions(["1st Place", "1st Place", "50 Questions"]) == [1]

    def test_multiple_duplicates(self):
        names = ["a", "b", "a", "c", "b", "a"]
        assert duplicate_positions(names) == [2, 4, 5]

    def test_no_duplicates(self):
        assert duplicate_positions(["a", "b", "c"]) == []

    def test_empty(self):
        assert duplicate_positions([]) == []
