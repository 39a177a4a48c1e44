import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from climatology import ClimatologyUnavailableError, fetch_climatology
from config import POWER_BASE_URL, PROBABILITY_PORT
from estimator import estimate_probabilities, month_from_iso
from models import ErrorResponse, HealthResponse, ProbabilityResult

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

MISSING_PARAMS_MESSAGE = "lat, lon and date are required."
SERVER_ERROR_MESSAGE = "Server error / data unavailable."


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Probability API ready on http://localhost:%d", PROBABILITY_PORT)
    yield


app = FastAPI(
    title="Extreme Weather Probability API",
    description="Heuristic extreme-weather likelihoods from NASA POWER monthly climatology.",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Custom exception handlers ────────────────────────────────────────────────

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Return 400 (not FastAPI's default 422) for invalid parameters."""
    return JSONResponse(status_code=400, content={"error": "Invalid request parameters."})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Normalise all HTTP errors to {"error": "..."} instead of {"detail": ...}."""
    if isinstance(exc.detail, dict) and "error" in exc.detail:
        content = exc.detail
    elif isinstance(exc.detail, str):
        content = {"error": exc.detail}
    else:
        content = {"error": str(exc.detail)}
    return JSONResponse(status_code=exc.status_code, content=content)


# ── Endpoints ────────────────────────────────────────────────────────────────

@app.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(status="ok", upstream=POWER_BASE_URL)


@app.get(
    "/api/probabilities",
    response_model=ProbabilityResult,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def get_probabilities(
    lat: str | None = Query(None),
    lon: str | None = Query(None),
    date: str | None = Query(None),
):
    logger.info("Incoming request: lat=%r lon=%r date=%r", lat, lon, date)

    # Empty strings count as missing
    if not lat or not lon or not date:
        raise HTTPException(status_code=400, detail={"error": MISSING_PARAMS_MESSAGE})

    month = month_from_iso(date)

    try:
        record = await fetch_climatology(lat, lon)
        return estimate_probabilities(month, record)
    except ClimatologyUnavailableError as exc:
        logger.error("Climatology unavailable for lat=%r lon=%r: %s", lat, lon, exc)
        return JSONResponse(status_code=500, content={"error": SERVER_ERROR_MESSAGE})
    except Exception:
        logger.error("Unexpected exception in /api/probabilities", exc_info=True)
        return JSONResponse(status_code=500, content={"error": SERVER_ERROR_MESSAGE})


if __name__ == "__main__":
    uvicorn.run(
        "server:app",
        host="0.0.0.0",
        port=PROBABILITY_PORT,
        reload=False,
    )
