import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from splitpal.api.v1.routes.balance import router as balance_router
from splitpal.api.v1.routes.bill import router as bill_router
from splitpal.api.v1.routes.currency import router as currency_router
from splitpal.api.v1.routes.expense import router as expense_router
from splitpal.api.v1.routes.group import router as group_router
from splitpal.api.v1.routes.payment import router as payment_router
from splitpal.api.v1.routes.settlement import router as settlement_router
from splitpal.api.v1.routes.system import router as system_router
from splitpal.core.config import settings
from splitpal.core.db_check import wait_for_db
from splitpal.core.exceptions import (
    DataSourceUnavailable,
    InvalidStatusTransition,
    LedgerDataError,
    LedgerIntegrityError,
    NotFoundError,
    ValidationError,
)
from splitpal.db.init_db import init_models

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await wait_for_db()
    await init_models()
    yield


app = FastAPI(title="SplitPal Backend", lifespan=lifespan)

@app.get("/")
async def root():
    return {"message": "SplitPal Backend is live"}


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(
        status_code=400,
        content={"detail": {"field": exc.field, "message": exc.message}},
    )

@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})

@app.exception_handler(InvalidStatusTransition)
async def status_transition_handler(request: Request, exc: InvalidStatusTransition):
    return JSONResponse(status_code=409, content={"detail": str(exc)})

@app.exception_handler(LedgerDataError)
async def ledger_data_handler(request: Request, exc: LedgerDataError):
    logger.error("Balance computation failed on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=500, content={"detail": "Could not compute balances"})

@app.exception_handler(LedgerIntegrityError)
async def integrity_handler(request: Request, exc: LedgerIntegrityError):
    return JSONResponse(status_code=500, content={"detail": str(exc)})

@app.exception_handler(DataSourceUnavailable)
async def unavailable_handler(request: Request, exc: DataSourceUnavailable):
    return JSONResponse(status_code=503, content={"detail": "Ledger store is unavailable, try again later"})


app.include_router(system_router, prefix="/api/v1/system")
app.include_router(group_router, prefix="/api/v1/groups")
app.include_router(expense_router, prefix="/api/v1/groups")
app.include_router(settlement_router, prefix="/api/v1/groups")
app.include_router(balance_router, prefix="/api/v1/groups")
app.include_router(payment_router, prefix="/api/v1")
app.include_router(currency_router, prefix="/api/v1/currency")
app.include_router(bill_router, prefix="/api/v1/bills")
