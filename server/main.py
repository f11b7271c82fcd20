"""
Portfolio site server.

Serves a single-page portfolio whose content lives in Baserow tables,
with live project search over WebSocket.
"""

from datetime import datetime
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from core.container import container
from core.logging import configure_logging, get_logger
from routers import search, site
from services.scheduler import start_scheduler, shutdown_scheduler

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management."""
    settings = container.settings()
    configure_logging(settings)
    logger.info("Starting portfolio site",
                mode="static" if settings.static_mode else
                ("cached" if settings.cache_enabled else "live"),
                projects_table_id=settings.projects_table_id)

    await container.cache().startup()
    start_scheduler()

    # Build sections and load projects before serving the first page
    await container.site_session().initialize()

    logger.info("Services started successfully")
    yield

    await container.site_session().dispose()
    shutdown_scheduler()
    await container.baserow().close()
    await container.cache().shutdown()
    logger.info("Services shutdown complete")


app = FastAPI(
    title="Portfolio CMS",
    version="1.0.0",
    description="Portfolio website backed by Baserow tables",
    lifespan=lifespan
)


class CatchAllExceptionsMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as e:
            logger.error(f"Unhandled exception: {type(e).__name__}: {str(e)}", exc_info=True)
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={
                    "success": False,
                    "error": f"{type(e).__name__}: {str(e)}",
                    "detail": "Internal server error"
                }
            )


app.add_middleware(CatchAllExceptionsMiddleware)

app.include_router(site.router)
app.include_router(search.router)


@app.get("/health")
async def health_check():
    """Service health."""
    settings = container.settings()
    session = container.site_session()
    return {
        "status": "OK",
        "initialized": session.initialized,
        "loading": session.loading,
        "grid_state": session.grid_state.value,
        "loaded": session.store.loaded,
        "projects": len(session.store),
        "static_mode": settings.static_mode,
        "cache_enabled": settings.cache_enabled,
        "timestamp": datetime.now().isoformat()
    }


if __name__ == "__main__":
    import uvicorn
    settings = container.settings()
    configure_logging(settings)
    logger.info("Starting portfolio site",
                host=settings.host, port=settings.port, debug=settings.debug)
    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level="warning"
    )
