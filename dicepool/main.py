from __future__ import annotations

from fastapi import FastAPI

from dicepool.routers import rolls

app = FastAPI(title="dicepool")

app.include_router(rolls.router)
