"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from loancalc.api.routes import calculation, comparison, optimization, tools
from loancalc.config import settings
from loancalc.exceptions import LoanCalcError
from loancalc.logging_config import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    logger.info("Starting %s v%s", settings.app_name, settings.app_version)
    yield


app = FastAPI(
    title=settings.app_name,
    description="Mortgage amortization, overpayment and APR calculations",
    version=settings.app_version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(calculation.router)
app.include_router(optimization.router)
app.include_router(comparison.router)
app.include_router(tools.router)


@app.exception_handler(LoanCalcError)
async def loan_calc_error_handler(request: Request, exc: LoanCalcError):
    return JSONResponse(
        status_code=400,
        content={"error": type(exc).__name__, "message": exc.message, "details": exc.details},
    )


@app.get("/health")
async def health():
    return {"status": "ok"}
