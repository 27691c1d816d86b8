"""Recommendations router — enrich candidates, then filter, score, gate and rank them."""

import logging

from fastapi import APIRouter, Depends

from app.schemas.recommendation import RecommendationRequest
from app.services.capability_matrix import get_capability_matrix
from app.services.fallback_resolver import FallbackResolver
from app.services.recommendation.enrichment import SignalEnricher
from app.services.recommendation.processor import RecommendationProcessor

logger = logging.getLogger(__name__)

router = APIRouter()


def get_resolver() -> FallbackResolver:
    return FallbackResolver(get_capability_matrix())


@router.post("")
async def recommend(
    req: RecommendationRequest,
    resolver: FallbackResolver = Depends(get_resolver),
):
    """Top-3 destinations for the given preferences, or a no-fit payload."""
    preferences = req.preferences.to_domain()
    seeds = [d.to_domain() for d in req.destinations]

    enriched = await SignalEnricher(resolver).enrich(seeds, preferences)

    processor = RecommendationProcessor(resolver)
    result = processor.process(enriched.destinations, preferences)
    result.total_processed = len(seeds)
    result.dropped = {**enriched.dropped, **result.dropped}

    validation = processor.validate(result)
    if not validation["valid"]:
        logger.warning(f"Recommendation result failed validation: {validation['issues']}")

    return {
        **result.to_dict(),
        "fallbacks_used": enriched.fallbacks_used,
        "validation": validation,
    }
