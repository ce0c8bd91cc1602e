"""
Swipe Ledger API Application Factory
"""

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..config import get_config
from .capture import router as capture_router
from .columns import router as columns_router
from .ledger import router as ledger_router
from .records import router as records_router


def create_app() -> FastAPI:
    """Create and configure the FastAPI application"""
    app = FastAPI(
        title="Swipe Ledger API",
        description="Card swipe capture and deduplicated account ledger",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc"
    )

    # The UI shell runs locally
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(ledger_router, prefix="/ledger", tags=["Ledger"])
    app.include_router(records_router, prefix="/records", tags=["Records"])
    app.include_router(columns_router, prefix="/columns", tags=["Columns"])
    app.include_router(capture_router, prefix="/capture", tags=["Capture"])

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "service": "swipe_ledger_api",
            "version": __version__
        }

    @app.get("/")
    async def get_api_info():
        """Get API information"""
        return {
            "name": "Swipe Ledger API",
            "version": __version__,
            "endpoints": {
                "docs": "/docs",
                "health": "/health",
                "ledger": "/ledger",
                "records": "/records",
                "columns": "/columns",
                "capture": "/capture",
            }
        }

    return app


app = create_app()


def run_server(host: str = None, port: int = None, debug: bool = False):
    """Run the FastAPI server"""
    config = get_config()
    uvicorn.run(
        "swipe_ledger.api:app",
        host=host or config.api_host,
        port=port or config.api_port,
        reload=debug,
        log_level=config.log_level.lower()
    )
