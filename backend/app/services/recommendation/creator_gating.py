"""Creator gating — decides whether a destination's creator-collaboration block is shown.

Active creator = ≥1k followers, last post within 90 days, ≥5 posts in 90 days.
Fewer than 2 active creators ⇒ collaboration score 0 and no collaboration block.
"""

import logging
import math
import re
from datetime import date

from app.services.recommendation.config import recommendation_config
from app.services.recommendation.models import (
    CreatorCommunity,
    CreatorGatingResult,
    CreatorRecord,
)

logger = logging.getLogger(__name__)

criteria = recommendation_config.creators
curve = recommendation_config.collaboration

_FOLLOWER_RE = re.compile(r"^\s*([0-9]*\.?[0-9]+)\s*([km]?)\s*$")


def parse_follower_count(followers) -> int:
    """Follower counts arrive as ints or as strings like "15K", "1.2M", "12,400"."""
    if isinstance(followers, bool):
        return 0
    if isinstance(followers, (int, float)):
        return int(followers) if math.isfinite(followers) and followers > 0 else 0
    if not isinstance(followers, str):
        return 0

    match = _FOLLOWER_RE.match(followers.lower().replace(",", ""))
    if not match:
        return 0
    number, suffix = float(match.group(1)), match.group(2)
    multiplier = {"k": 1_000, "m": 1_000_000}.get(suffix, 1)
    return int(number * multiplier)


def is_active(creator: CreatorRecord, today: date | None = None) -> bool:
    """Missing last-post date or post count is not held against the creator."""
    today = today or date.today()

    if parse_follower_count(creator.followers) < criteria.min_followers:
        return False

    if creator.last_post_date is not None:
        if (today - creator.last_post_date).days > criteria.max_days_since_last_post:
            return False

    if creator.posts_last_90_days is not None:
        if creator.posts_last_90_days < criteria.min_posts_in_period:
            return False

    return True


def count_active(community: CreatorCommunity, today: date | None = None) -> int:
    """Verified sources are checked creator by creator; estimates take a fixed
    share of the reported total, capped by what was actually returned."""
    if community.data_source in criteria.verified_sources:
        return sum(1 for c in community.records if is_active(c, today))

    total = max(0, int(community.total_reported or 0))
    estimated = math.floor(total * criteria.estimated_active_ratio)
    return min(estimated, len(community.records), total)


def collaboration_score(active_count: int) -> float:
    """Piecewise-linear score by active creator count, 0 below the minimum."""
    if active_count < criteria.min_active_creators:
        return 0.0
    if active_count <= curve.small_max:
        steps = curve.small_max - criteria.min_active_creators
        return curve.small_base + (active_count - criteria.min_active_creators) * curve.small_span / steps
    if active_count <= curve.medium_max:
        first = curve.small_max + 1
        steps = curve.medium_max - first
        return curve.medium_base + (active_count - first) * curve.medium_span / steps
    first = curve.medium_max + 1
    return min(curve.large_base + (active_count - first) * curve.large_span / curve.large_steps, 1.0)


def gate(community: CreatorCommunity | None, today: date | None = None) -> CreatorGatingResult:
    if community is None:
        community = CreatorCommunity()

    active = count_active(community, today)
    logger.debug(
        f"Creator gating: {active} active of {community.total_reported} reported "
        f"({community.data_source})"
    )

    if active < criteria.min_active_creators:
        return CreatorGatingResult(
            active_creator_count=active,
            should_show_collaboration=False,
            collaboration_score=0.0,
            reason=(
                f"Only {active} active creators found "
                f"(minimum {criteria.min_active_creators} required)"
            ),
        )

    return CreatorGatingResult(
        active_creator_count=active,
        should_show_collaboration=True,
        collaboration_score=collaboration_score(active),
    )


def display_payload(community: CreatorCommunity | None, result: CreatorGatingResult) -> dict | None:
    """Collaboration block for display, or None when gating hides it."""
    if not result.should_show_collaboration or community is None:
        return None

    return {
        "total_active_creators": result.active_creator_count,
        "collaboration_score": round(result.collaboration_score, 3),
        "top_creators": [
            {
                "name": c.name,
                "platform": c.platform,
                "followers": c.followers,
                "niche": c.niche,
            }
            for c in community.records[:curve.display_limit]
        ],
        "opportunities": list(community.opportunities),
        "data_source": community.data_source,
    }
