"""
FastAPI backend for the voice gym tracker.

Routers live in routes/; shared utilities in routes/helpers.py.
Run with: python api.py   (or uvicorn api:app --port 3001)
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

import config
from db_utils import get_conn_str
from routes import ai, exercises, workout_split, workouts
from routes.helpers import limiter
from schema import ensure_schema

log = logging.getLogger("api")


@asynccontextmanager
async def lifespan(_app: FastAPI):
    if config.AUTO_MIGRATE and get_conn_str():
        try:
            ensure_schema()
        except Exception as e:
            log.error("Startup schema migration failed: %s", e)
    yield


# ─── App setup ─────────────────────────────────────────────

app = FastAPI(title="Gym Tracker API", version="1.0.0", lifespan=lifespan)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.FRONTEND_ORIGINS,
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = []
    for err in exc.errors():
        where = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        problems.append(f"{where}: {err.get('msg')}" if where else str(err.get("msg")))
    return JSONResponse(
        status_code=400,
        content={"error": "Missing required fields", "details": "; ".join(problems)},
    )


app.include_router(workouts.router)
app.include_router(ai.router)
app.include_router(exercises.router)
app.include_router(workout_split.router)


# ─── Routes ────────────────────────────────────────────────

@app.get("/health")
def health() -> Dict[str, Any]:
    return {"status": "ok", "message": "Gym Tracker API is running"}


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s  %(levelname)-8s  %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    log.info("Server running on port %d", config.API_PORT)
    uvicorn.run(app, host="0.0.0.0", port=config.API_PORT)
