from __future__ import annotations

from fastapi import FastAPI

from api.routes import config, draft, gm, health, leaderboard

app = FastAPI(title="GM Trade Evaluation API", version="0.1.0")
app.include_router(health.router)
app.include_router(config.router)
app.include_router(gm.router)
app.include_router(leaderboard.router)
app.include_router(draft.router)


@app.get("/", summary="Root endpoint", tags=["health"])
async def root() -> dict[str, str]:
    return {"message": "GM Trade Evaluation API"}
