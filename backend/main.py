from __future__ import annotations

import logging
import os
import time
import uuid
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

# Load .env from backend directory so ALLOWED_ORIGINS etc. are available
load_dotenv(Path(__file__).resolve().parent / ".env")

from fastapi import FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from starlette.middleware.base import BaseHTTPMiddleware

from engine.compare import compare_proposals
from engine.compute import calculate_metrics, generate_timeline
from models import CashFlowMonth, ComparisonMetrics, ComparisonResult, LeaseProposal
from services.lease_session import (
    MAX_PROPOSALS,
    MIN_PROPOSALS,
    LeaseSession,
    clamp_discount_rate,
)

# Same logger as uvicorn so the server log shows all lines
_LOG = logging.getLogger("uvicorn.error")

# Version for /health (Render sets RENDER_GIT_COMMIT)
VERSION = (os.environ.get("RENDER_GIT_COMMIT") or "").strip() or "unknown"


def _default_discount_rate() -> float:
    raw = (os.environ.get("DEFAULT_DISCOUNT_RATE") or "").strip()
    if not raw:
        return 5.0
    try:
        return clamp_discount_rate(float(raw))
    except ValueError:
        _LOG.warning("DEFAULT_DISCOUNT_RATE=%r is not a number; using 5", raw)
        return 5.0


DEFAULT_DISCOUNT_RATE = _default_discount_rate()

app = FastAPI(title="Lease Lens Backend", version="0.1.0")

# CORS: use ALLOWED_ORIGINS env (comma-separated) if set, else default
_origins_env = os.environ.get("ALLOWED_ORIGINS", "").strip()
if _origins_env:
    ALLOWED_ORIGINS = [o.strip() for o in _origins_env.split(",") if o.strip()]
else:
    ALLOWED_ORIGINS = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = str(uuid.uuid4())[:8]
        request.state.request_id = request_id
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000
        _LOG.info(
            "request_id=%s method=%s path=%s status=%s duration_ms=%.0f",
            request_id,
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
        )
        response.headers["X-Request-Id"] = request_id
        return response


app.add_middleware(RequestLogMiddleware)


@app.exception_handler(RequestValidationError)
async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    rid = getattr(request.state, "request_id", None) or "no-rid"
    err = str(exc.errors())[:400]
    _LOG.info("COMPUTE_ERR rid=%s path=%s err=%s", rid, request.url.path, err)
    return JSONResponse(
        status_code=422,
        content={
            "error": "compute_validation_failed",
            "rid": rid,
            "details": err,
        },
    )


class CompareRequest(BaseModel):
    """Proposals to compare, plus the annual discount rate in percent."""
    proposals: List[LeaseProposal] = Field(min_length=MIN_PROPOSALS, max_length=MAX_PROPOSALS)
    discount_rate: Optional[float] = None


class TimelineResponse(BaseModel):
    cash_flows: List[CashFlowMonth] = Field(default_factory=list)


class SessionResponse(BaseModel):
    session: LeaseSession
    comparison: ComparisonResult


@app.on_event("startup")
def startup_log() -> None:
    port = os.environ.get("PORT", "8010")
    host = os.environ.get("HOST", "127.0.0.1")
    _LOG.info(
        "Backend starting on http://%s:%s default_discount_rate=%s version=%s",
        host, port, DEFAULT_DISCOUNT_RATE, VERSION,
    )


@app.get("/health")
def health():
    return {"status": "ok", "version": VERSION}


@app.post("/compute", response_model=ComparisonMetrics)
def compute_proposal(
    proposal: LeaseProposal,
    discount_rate: Optional[float] = Query(None, description="Annual discount rate in percent"),
) -> ComparisonMetrics:
    """
    Compute cash flows and summary metrics for a single proposal.
    """
    rate = DEFAULT_DISCOUNT_RATE if discount_rate is None else clamp_discount_rate(discount_rate)
    return calculate_metrics(proposal, rate)


@app.post("/timeline", response_model=TimelineResponse)
def timeline(proposal: LeaseProposal) -> TimelineResponse:
    """
    Return the month-by-month schedule only (same body as /compute).
    """
    return TimelineResponse(cash_flows=generate_timeline(proposal))


@app.post("/compare", response_model=ComparisonResult)
def compare(req: CompareRequest) -> ComparisonResult:
    """
    Compute metrics for up to four proposals and mark the lowest NPV and
    lowest effective monthly rent.
    """
    rate = DEFAULT_DISCOUNT_RATE if req.discount_rate is None else clamp_discount_rate(req.discount_rate)
    return compare_proposals(req.proposals, rate)


@app.get("/session/default", response_model=SessionResponse)
def default_session() -> SessionResponse:
    """
    Starter session (two default proposals) with its comparison, for clients
    bootstrapping their own state.
    """
    session = LeaseSession(discount_rate=DEFAULT_DISCOUNT_RATE)
    return SessionResponse(session=session, comparison=session.compare())


def get_app() -> FastAPI:
    """
    Convenience accessor for ASGI servers.
    """
    return app


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=os.environ.get("HOST", "127.0.0.1"),
        port=int(os.environ.get("PORT", "8010")),
        reload=True,
    )
