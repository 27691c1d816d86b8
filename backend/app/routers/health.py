from fastapi import APIRouter

from app.services.capability_matrix import get_capability_matrix

router = APIRouter()


@router.get("/health")
async def health_check():
    matrix = get_capability_matrix()
    return {
        "status": "ok",
        "service": "creatorscout",
        "enabled": matrix.enabled(),
        "fallbacks": matrix.fallbacks(),
        **matrix.metrics(),
    }


@router.get("/capabilities")
async def capabilities():
    return get_capability_matrix().to_dict()
