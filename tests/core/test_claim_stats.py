"""Tests for claim stats projection — pure shaping, no IO."""

from types import SimpleNamespace

from claimgraph.core.claim_stats import (
    as_percent, average_claims_per_debate, project_stats, raw_stats,
    round_half_up, success_rate, summarize_counter, summarize_related,
)


def _claim(**overrides):
    values = {
        "original_text": "Carbon taxes reduce pollution",
        "total_uses": 3,
        "times_refuted": 1,
        "wins_with_claim": 2,
        "losses_with_claim": 1,
        "avg_quality_score": 6.5,
    }
    values.update(overrides)
    return SimpleNamespace(**values)


def test_round_half_up_rounds_halves_upward():
    assert round_half_up(0.5) == 1
    assert round_half_up(2.5) == 3
    assert round_half_up(66.4) == 66
    assert round_half_up(66.6) == 67


def test_success_rate_without_outcomes_is_zero():
    assert success_rate(0, 0) == 0.0


def test_success_rate_ratio():
    assert success_rate(2, 1) == 2 / 3
    assert success_rate(0, 4) == 0.0


def test_as_percent():
    assert as_percent(2 / 3) == 67
    assert as_percent(0.8) == 80
    assert as_percent(1.0) == 100


def test_project_stats_rounds_rate_and_average():
    stats = project_stats(_claim())
    assert stats["success_rate"] == 67
    assert stats["avg_quality_score"] == 7  # 6.5 rounds up
    assert stats["total_uses"] == 3
    assert stats["times_refuted"] == 1


def test_project_stats_recomputes_rate_from_counters():
    stats = project_stats(_claim(wins_with_claim=0, losses_with_claim=0))
    assert stats["success_rate"] == 0


def test_raw_stats_keeps_fractions():
    stats = raw_stats(_claim())
    assert stats["success_rate"] == 2 / 3
    assert stats["avg_quality_score"] == 6.5


def test_summarize_related_uses_target_text_and_uses():
    relation = SimpleNamespace(relationship="similar", similarity=0.8)
    target = _claim(original_text="Carbon taxes work", total_uses=5)
    assert summarize_related(relation, target) == {
        "text": "Carbon taxes work",
        "relationship": "similar",
        "similarity": 80,
        "uses": 5,
    }


def test_summarize_counter():
    counter = SimpleNamespace(effectiveness=7)
    target = _claim(original_text="Taxes hurt the poor", total_uses=2)
    assert summarize_counter(counter, target) == {
        "text": "Taxes hurt the poor",
        "effectiveness": 7,
        "uses": 2,
    }


def test_average_claims_per_debate():
    assert average_claims_per_debate(0, 0) == 0.0
    assert average_claims_per_debate(3, 2) == 1.5
