"""
Finance Tracker API Application Factory
"""

from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import uvicorn

from .. import __version__
from ..exceptions import CapacityExceededError, NotFoundError, StorageError, ValidationError
from ..config import get_config
from ..logging_config import get_logger, setup_logging
from ..tracker import FinanceTracker
from .accounts import router as accounts_router
from .allocations import router as allocations_router
from .budgets import router as budgets_router
from .categories import router as categories_router
from .goals import router as goals_router
from .holdings import router as holdings_router
from .reports import router as reports_router
from .tactics import router as tactics_router
from .transactions import router as transactions_router


logger = get_logger("finance_tracker.api")


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": exc.message, "field_errors": exc.field_errors}
        )

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})

    @app.exception_handler(CapacityExceededError)
    async def capacity_exceeded_handler(request: Request, exc: CapacityExceededError):
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={
                "detail": str(exc),
                "account_id": exc.account_id,
                "available": str(exc.available),
                "requested": str(exc.requested)
            }
        )

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError):
        logger.error(f"Storage failure handling {request.method} {request.url.path}: {exc}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal storage error"}
        )


def create_app(tracker: Optional[FinanceTracker] = None) -> FastAPI:
    """Create and configure the FastAPI application"""
    app = FastAPI(
        title="Finance Tracker API",
        description="Personal finance ledger with derived balances, budgets and goal allocations",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc"
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.tracker = tracker or FinanceTracker.from_config()
    _register_exception_handlers(app)

    app.include_router(accounts_router, prefix="/accounts", tags=["Accounts"])
    app.include_router(categories_router, prefix="/categories", tags=["Categories"])
    app.include_router(transactions_router, prefix="/transactions", tags=["Transactions"])
    app.include_router(holdings_router, prefix="/holdings", tags=["Holdings"])
    app.include_router(goals_router, prefix="/goals", tags=["Goals"])
    app.include_router(allocations_router, prefix="/goal-allocations", tags=["Goal Allocations"])
    app.include_router(budgets_router, prefix="/budgets", tags=["Budgets"])
    app.include_router(tactics_router, prefix="/saving-tactics", tags=["Saving Tactics"])
    app.include_router(reports_router, prefix="/reports", tags=["Reports"])

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "service": "finance_tracker_api",
            "version": __version__,
            "storage_backend": app.state.tracker.config.storage_backend
        }

    return app


def run_server(host: Optional[str] = None, port: Optional[int] = None):
    """Run the FastAPI server with the configured storage backend"""
    config = get_config()
    setup_logging(config.log_level, config.log_format)
    uvicorn.run(
        create_app(FinanceTracker.from_config(config)),
        host=host or config.api_host,
        port=port or config.api_port,
        log_level=config.log_level.lower()
    )
