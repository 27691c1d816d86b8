"""
Creator gating tests.

Covers:
  - follower string parsing ("15K", "1.2M", "12,400")
  - active-creator rules (followers, recency, post count, missing data)
  - verified vs estimated sources (fixed 0.7 ratio, capped)
  - < 2 active ⇒ score 0 and hidden; the three-tier curve otherwise
  - display payload only when shown, top 5 creators
"""

import pytest

from app.services.recommendation.creator_gating import (
    collaboration_score,
    count_active,
    display_payload,
    gate,
    is_active,
    parse_follower_count,
)
from app.services.recommendation.models import CreatorCommunity, CreatorRecord
from tests.conftest import TODAY, active_creator


# ---------------------------------------------------------------------------
# Follower parsing
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "raw, expected",
    [
        ("15K", 15_000),
        ("1.2M", 1_200_000),
        ("12,400", 12_400),
        ("850", 850),
        (5000, 5000),
        ("", 0),
        ("lots", 0),
        (None, 0),
        (float("nan"), 0),
        (True, 0),
    ],
)
def test_parse_follower_count(raw, expected):
    assert parse_follower_count(raw) == expected


# ---------------------------------------------------------------------------
# Active rules
# ---------------------------------------------------------------------------

def test_active_creator():
    assert is_active(active_creator("a"), TODAY) is True


def test_too_few_followers():
    assert is_active(active_creator("a", followers="999"), TODAY) is False


def test_stale_last_post():
    assert is_active(active_creator("a", days_ago=91), TODAY) is False
    assert is_active(active_creator("a", days_ago=90), TODAY) is True


def test_too_few_posts():
    assert is_active(active_creator("a", posts=4), TODAY) is False


def test_missing_activity_data_not_held_against_creator():
    creator = CreatorRecord(name="a", platform="youtube", followers="2K")
    assert is_active(creator, TODAY) is True


# ---------------------------------------------------------------------------
# Counting
# ---------------------------------------------------------------------------

def test_verified_source_checks_each_record():
    community = CreatorCommunity(
        total_reported=50,
        records=(active_creator("a"), active_creator("b", followers="500"), active_creator("c")),
        data_source="qloo-api",
    )
    assert count_active(community, TODAY) == 2


def test_estimated_source_uses_fixed_ratio_capped_by_records():
    records = tuple(active_creator(str(i)) for i in range(20))
    community = CreatorCommunity(total_reported=10, records=records, data_source="estimated")
    assert count_active(community) == 7

    capped = CreatorCommunity(total_reported=100, records=records[:3], data_source="estimated")
    assert count_active(capped) == 3


def test_estimated_count_is_deterministic():
    community = CreatorCommunity(
        total_reported=13,
        records=tuple(active_creator(str(i)) for i in range(13)),
        data_source="estimated",
    )
    assert {count_active(community) for _ in range(20)} == {9}


# ---------------------------------------------------------------------------
# Gating + curve
# ---------------------------------------------------------------------------

def test_single_active_creator_hides_collaboration():
    community = CreatorCommunity(
        total_reported=1,
        records=(active_creator("solo", followers=5000, days_ago=10, posts=8),),
        data_source="social-apis",
    )
    result = gate(community, TODAY)
    assert result.active_creator_count == 1
    assert result.should_show_collaboration is False
    assert result.collaboration_score == 0.0
    assert result.reason == "Only 1 active creators found (minimum 2 required)"


def test_no_community_data_is_gated_off():
    result = gate(None, TODAY)
    assert result.should_show_collaboration is False
    assert result.collaboration_score == 0.0


@pytest.mark.parametrize(
    "count, expected",
    [
        (0, 0.0),
        (1, 0.0),
        (2, 0.5),
        (5, 0.6),
        (6, 0.7),
        (15, 0.85),
        (16, 0.85),
        (36, 1.0),
        (500, 1.0),
    ],
)
def test_collaboration_curve(count, expected):
    assert collaboration_score(count) == pytest.approx(expected)


def test_curve_is_monotonic():
    scores = [collaboration_score(n) for n in range(0, 60)]
    assert scores == sorted(scores)


def test_two_active_creators_show_collaboration():
    community = CreatorCommunity(
        total_reported=2,
        records=(active_creator("a"), active_creator("b")),
        data_source="social-apis",
    )
    result = gate(community, TODAY)
    assert result.should_show_collaboration is True
    assert result.collaboration_score == pytest.approx(0.5)
    assert result.reason is None


# ---------------------------------------------------------------------------
# Display payload
# ---------------------------------------------------------------------------

def test_payload_hidden_when_gated_off():
    community = CreatorCommunity(total_reported=1, records=(active_creator("a"),), data_source="qloo-api")
    assert display_payload(community, gate(community, TODAY)) is None


def test_payload_shows_top_five():
    records = tuple(active_creator(f"c{i}") for i in range(8))
    community = CreatorCommunity(
        total_reported=8,
        records=records,
        data_source="social-apis",
        opportunities=("Food tour collab",),
    )
    payload = display_payload(community, gate(community, TODAY))
    assert payload["total_active_creators"] == 8
    assert [c["name"] for c in payload["top_creators"]] == ["c0", "c1", "c2", "c3", "c4"]
    assert payload["opportunities"] == ["Food tour collab"]
