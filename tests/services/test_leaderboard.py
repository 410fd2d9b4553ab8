"""
Unit tests for leaderboard and per-member stats.
"""
from app.services.referrals.graph import ReferralGraph
from app.services.referrals.leaderboard import ReferralStats, build_leaderboard, get_referral_stats
from app.services.referrals.models import ReferralRecord


def fan_out(graph, referrer, count, prefix):
    for i in range(count):
        graph.record_referral(f"{prefix}{i}", referrer)


class TestGetReferralStats:
    """Tests for get_referral_stats function"""

    def test_total_and_direct(self, graph):
        """A→B→C: total 2, direct 1"""
        graph.record_referral("B", "A")
        graph.record_referral("C", "B")

        assert get_referral_stats(graph, "A") == ReferralStats("A", total=2, direct=1)

    def test_unknown_member(self, graph):
        """Untracked member reports zeros"""
        assert get_referral_stats(graph, "ghost") == ReferralStats("ghost", total=0, direct=0)


class TestBuildLeaderboard:
    """Tests for build_leaderboard function"""

    def test_ranked_descending_ties_in_mapping_order(self, store):
        """Counts 3, 10, 3 rank as 10, then the two 3s in enumeration order"""
        records = {
            "X": ReferralRecord(referred_members=["x0", "x1", "x2"]),
            "Y": ReferralRecord(referred_members=[f"y{i}" for i in range(10)]),
            "Z": ReferralRecord(referred_members=["z0", "z1", "z2"]),
        }
        graph = ReferralGraph(store, records)

        board = build_leaderboard(graph)

        assert [(entry.member_id, entry.total) for entry in board] == [("Y", 10), ("X", 3), ("Z", 3)]

    def test_limited_to_ten(self, graph):
        """Only the top ten members are listed"""
        for i in range(15):
            fan_out(graph, f"r{i}", i + 1, f"c{i}_")

        board = build_leaderboard(graph)

        assert len(board) == 10
        assert board[0] == ReferralStats("r14", total=15, direct=15)
        assert board[-1].total == 6

    def test_custom_limit(self, graph):
        """Smaller limit truncates further"""
        fan_out(graph, "A", 2, "a")
        fan_out(graph, "B", 1, "b")

        assert [entry.member_id for entry in build_leaderboard(graph, limit=1)] == ["A"]

    def test_non_positive_limit(self, graph):
        """Zero or negative limit lists nobody"""
        fan_out(graph, "A", 2, "a")

        assert build_leaderboard(graph, limit=0) == []
        assert build_leaderboard(graph, limit=-3) == []

    def test_empty_forest(self, graph):
        """Nothing tracked yet"""
        assert build_leaderboard(graph) == []

    def test_members_with_zero_are_ranked_last(self, graph):
        """Referred members appear after referrers"""
        graph.record_referral("B", "A")

        board = build_leaderboard(graph)

        assert [(entry.member_id, entry.total) for entry in board] == [("A", 1), ("B", 0)]
