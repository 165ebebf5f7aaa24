from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from api.dependencies import get_trade_store, require_api_key
from api.models import LeaderboardResponse, LeaderboardUser, UserAnalyticsResponse
from leaderboard import build_leaderboard, user_analytics
from trades import TradeStore

router = APIRouter(prefix="/gm", tags=["leaderboard"], dependencies=[Depends(require_api_key)])


@router.get("/leaderboard", response_model=LeaderboardResponse, summary="Rank users by GM score")
async def get_leaderboard(
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    search: str | None = Query(None),
    sort_by: str = Query("total_gm_score", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder"),
    store: TradeStore = Depends(get_trade_store),
) -> LeaderboardResponse:
    try:
        board = build_leaderboard(
            store.list_trades(),
            page=page,
            limit=limit,
            search=search,
            sort_by=sort_by,
            sort_order=sort_order,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    return LeaderboardResponse(
        users=[LeaderboardUser(**row.to_dict()) for row in board.users],
        total=board.total,
        page=board.page,
        limit=board.limit,
        total_pages=board.total_pages,
    )


@router.get("/analytics/{user_id}", response_model=UserAnalyticsResponse, summary="Trade analytics for one user")
async def get_user_analytics(
    user_id: str,
    store: TradeStore = Depends(get_trade_store),
) -> UserAnalyticsResponse:
    summary = user_analytics(store.list_trades(), user_id)
    if summary["total_trades"] == 0:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"No trades recorded for user '{user_id}'")
    return UserAnalyticsResponse(user_id=user_id, **summary)
