from fastapi import APIRouter, Depends, Query

from lead_router.deps import get_store
from lead_router.store import LeadStore

router = APIRouter(prefix="/assignments", tags=["assignments"])


@router.get("")
def list_assignments(
    limit: int = Query(100, ge=1, le=500),
    store: LeadStore = Depends(get_store),
):
    return {
        "success": True,
        "assignments": store.list_recent_assignments_with_agent(limit),
    }
