"""Tests for the magnitude ranking."""

from quakemap.ranking import QuakeRanker, rank

from .helpers import make_quake


def _quakes(mags):
    return [make_quake(lon=i, mag=m, name=f"q{i}") for i, m in enumerate(mags)]


class TestRank:
    def test_descending(self):
        ranked = rank(_quakes([4.2, 7.1, 5.0, 6.8]))
        assert [q.magnitude for q in ranked] == [7.1, 6.8, 5.0, 4.2]

    def test_stable_on_ties(self):
        quakes = _quakes([5.0, 6.0, 5.0, 6.0, 5.0])
        ranked = rank(quakes)
        assert [q.name for q in ranked] == ["q1", "q3", "q0", "q2", "q4"]

    def test_repeatable(self):
        quakes = _quakes([3.3, 3.3, 8.0, 1.0, 3.3])
        assert rank(quakes) == rank(quakes)
        assert rank(rank(quakes)) == rank(quakes)


class TestQuakeRanker:
    def test_top_n_scenario(self):
        quakes = _quakes([5.0, 6.8, 4.2, 7.1, 6.8])
        ranker = QuakeRanker(quakes)
        top = ranker.top_n(3)
        assert [q.magnitude for q in top] == [7.1, 6.8, 6.8]
        assert top[1] is quakes[1]
        assert top[2] is quakes[4]

    def test_top_n_bounds(self):
        ranker = QuakeRanker(_quakes([1.0, 2.0]))
        assert len(ranker.top_n(20)) == 2
        assert ranker.top_n(0) == []
        assert ranker.top_n(-3) == []

    def test_row_lookup(self):
        quakes = _quakes([1.0, 2.0])
        ranker = QuakeRanker(quakes)
        assert ranker.row(0) is quakes[1]
        assert ranker.row(1) is quakes[0]
        assert ranker.row(2) is None
        assert ranker.row(-1) is None

    def test_cached_until_rebuild(self):
        quakes = _quakes([1.0, 2.0])
        ranker = QuakeRanker(quakes)
        quakes.append(make_quake(mag=9.0))
        assert len(ranker) == 2
        ranker.rebuild(quakes)
        assert len(ranker) == 3
        assert ranker.row(0).magnitude == 9.0

    def test_empty(self):
        ranker = QuakeRanker()
        assert len(ranker) == 0
        assert ranker.top_n(5) == []
        assert ranker.row(0) is None
