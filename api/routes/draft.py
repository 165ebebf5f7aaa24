from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends

from api.dependencies import require_api_key
from api.models import DraftCapitalRequest, DraftCapitalResponse, DraftCapitalSide, DraftPickInput, DraftPickValue
from draft_values import DraftCapital, draft_capital, net_draft_capital
from trades import DraftPickAsset

router = APIRouter(prefix="/gm", tags=["draft"], dependencies=[Depends(require_api_key)])


def _to_assets(picks: List[DraftPickInput]) -> List[DraftPickAsset]:
    return [DraftPickAsset(**pick.model_dump()) for pick in picks]


def _side(capital: DraftCapital) -> DraftCapitalSide:
    picks = [
        DraftPickValue(
            label=pick.label,
            year=pick.year,
            round=pick.round,
            pick_number=pick.pick_number,
            legacy=pick.legacy,
            modern=pick.modern,
            surplus=pick.surplus,
            academic=pick.academic,
            synthesized=pick.synthesized,
            condition=pick.condition,
        )
        for pick in capital.picks
    ]
    return DraftCapitalSide(
        picks=picks,
        total=capital.total,
        valued_picks=capital.valued_picks,
        unvalued_picks=capital.unvalued_picks,
    )


@router.post("/draft-capital", response_model=DraftCapitalResponse, summary="Synthesize draft pick values for a trade")
async def evaluate_draft_capital(payload: DraftCapitalRequest) -> DraftCapitalResponse:
    sent = draft_capital(_to_assets(payload.picks_sent))
    received = draft_capital(_to_assets(payload.picks_received))
    return DraftCapitalResponse(
        sent=_side(sent),
        received=_side(received),
        net=net_draft_capital(sent, received),
    )
