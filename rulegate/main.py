"""
Rulegate FastAPI Application.

  POST /analyze        → one source unit → report
  POST /analyze/batch  → many units, analysed concurrently → reports
  GET  /rules          → rule metadata for a profile
  GET  /profiles       → available rule set profiles
  GET  /health         → {"status": "ok", ...}
"""

from __future__ import annotations

import logging

from dotenv import load_dotenv
load_dotenv()

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from rulegate.api.routes.analyze import router as analyze_router
from rulegate.api.routes.health import router as health_router
from rulegate.api.routes.rules import router as rules_router
from rulegate.core.registry import load_profiles

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("rulegate")

# Duplicate rule ids must fail here, before any analysis runs
load_profiles()

app = FastAPI(
    title="Rulegate",
    description="Deterministic compliance analysis for diffs and generated test files",
    version="1.0.0",
)

app.include_router(health_router)
app.include_router(rules_router)
app.include_router(analyze_router)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    body = await request.body()
    logger.error(f"Validation Error. Raw body: {body.decode('utf-8', 'replace')[:500]} | Errors: {exc.errors()}")
    return JSONResponse(
        status_code=422,
        content={"detail": jsonable_encoder(exc.errors()), "body": body.decode("utf-8", "replace")[:100]},
    )
