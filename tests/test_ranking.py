"""
Tests for the ranker: name tiers, usage boost and file heuristics.
"""

import math
from pathlib import Path

import pytest

from pulse.search.provider import Candidate, Kind
from pulse.search.ranking import Ranker, RankingWeights
from conftest import make_app

HOME = Path("/home/user")


def _file(path, folder=False):
    return Candidate(
        stable_id="file_" + path,
        display_name=Path(path).name,
        payload=path,
        kind=Kind.FILE,
        is_container=folder,
    )


@pytest.fixture
def ranker(store, clock):
    return Ranker(store, home=HOME, clock=clock)


class TestNameTiers:
    """Test exact > prefix > contains > none."""

    def test_exact_match(self, ranker):
        assert ranker.score(make_app("s", "Safari"), "safari") == 100

    def test_prefix_match(self, ranker):
        assert ranker.score(make_app("s", "Safari"), "saf") == 50

    def test_contains_match(self, ranker):
        assert ranker.score(make_app("s", "Safari"), "far") == 10

    def test_fuzzy_only_match_scores_zero(self, ranker):
        assert ranker.score(make_app("s", "Safari"), "sfr") == 0

    def test_empty_query_scores_zero(self, ranker):
        assert ranker.score(make_app("s", "Safari"), "") == 0


class TestUsageBoost:
    """Test the logarithmic frequency boost and recency steps."""

    def test_used_within_the_hour(self, ranker, store):
        store.record_execution("s")
        expected = math.log(2) * 10 + 20
        assert ranker.score(make_app("s", "Safari"), "") == pytest.approx(expected)

    def test_used_within_the_day(self, ranker, store, clock):
        store.record_execution("s")
        clock.advance(2 * 3600)
        expected = math.log(2) * 10 + 10
        assert ranker.score(make_app("s", "Safari"), "") == pytest.approx(expected)

    def test_old_use_has_no_recency_bonus(self, ranker, store, clock):
        store.record_execution("s")
        clock.advance(3 * 86400)
        assert ranker.score(make_app("s", "Safari"), "") == pytest.approx(math.log(2) * 10)

    def test_frequency_is_damped(self, ranker, store, clock):
        for _ in range(50):
            store.record_execution("heavy")
        clock.advance(3 * 86400)
        heavy = ranker.score(make_app("heavy", "Heavy"), "")
        # 50 uses do not outweigh one exact name match
        assert 0 < heavy < RankingWeights().exact_match

    def test_usage_does_not_change_other_candidates(self, ranker, store):
        store.record_execution("s")
        assert ranker.score(make_app("t", "Terminal"), "term") == 50


class TestFileHeuristics:
    """Test depth decay, home bias, folder multiplier and penalties."""

    def test_shallower_paths_score_higher(self, ranker):
        shallow = ranker.score(_file("/home/user/notes.txt"), "")
        deep = ranker.score(_file("/home/user/a/b/c/notes.txt"), "")
        assert shallow > deep

    def test_depth_decay_and_home_bias_values(self, ranker):
        # depth 3 -> 20/4, one level below home -> 10/2
        assert ranker.score(_file("/home/user/notes.txt"), "") == pytest.approx(5 + 5)

    def test_home_paths_beat_equal_depth_elsewhere(self, ranker):
        home = ranker.score(_file("/home/user/notes.txt"), "")
        other = ranker.score(_file("/srv/data/notes.txt"), "")
        assert home > other

    def test_folder_multiplier(self, ranker):
        folder = ranker.score(_file("/home/user/Projects", folder=True), "")
        plain = ranker.score(_file("/home/user/Projects"), "")
        assert folder == pytest.approx(plain * 1.2)

    @pytest.mark.parametrize("marker", ["Archive", "backup", "snapshot"])
    def test_penalty_markers(self, ranker, marker):
        normal = ranker.score(_file("/home/user/docs/report.pdf"), "")
        penalized = ranker.score(_file(f"/home/user/{marker}/report.pdf"), "")
        assert penalized == pytest.approx(normal * 0.1)

    def test_heuristics_only_apply_to_files(self, ranker):
        app = make_app("archive.app", "Archive Utility", payload="/Applications/Archive Utility.app")
        assert ranker.score(app, "") == 0


class TestSortAndWeights:
    """Test sort stability and configurable weights."""

    def test_sort_descending_and_stable(self, ranker):
        a = make_app("a", "Alpha")
        b = make_app("b", "Alphabet")
        c = make_app("c", "Also Alpha")
        d = make_app("d", "Beta")
        ordered = ranker.sort([d, c, b, a], "alpha")
        # exact, then prefix, then contains, then no match
        assert [x.stable_id for x in ordered] == ["a", "b", "c", "d"]

    def test_ties_preserve_source_order(self, ranker):
        items = [make_app(str(i), f"Item {i}") for i in range(5)]
        assert ranker.sort(items, "zzz") == items

    def test_weights_from_settings(self, store, clock):
        weights = RankingWeights.from_settings({
            "exact_match": 500,
            "penalty_markers": ["OLD"],
            "not_a_weight": 1,
        })
        assert weights.exact_match == 500
        assert weights.prefix_match == 50
        assert weights.penalty_markers == ("old",)

        ranker = Ranker(store, weights, home=HOME, clock=clock)
        assert ranker.score(make_app("s", "Safari"), "safari") == 500
