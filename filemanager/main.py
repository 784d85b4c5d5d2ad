from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from filemanager.core.config import settings
from filemanager.core.errors import register_exception_handlers
from filemanager.core.logging_config import setup_logging
from filemanager.db.session import check_connection, close_db, init_db

# Import routers
from filemanager.api import auth, file_manager

logger = setup_logging("filemanager", settings.LOG_LEVEL)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables on startup, drain the connection pool on shutdown."""
    logger.info("Starting %s", settings.PROJECT_NAME)
    init_db()
    yield
    logger.info("Shutting down %s", settings.PROJECT_NAME)
    close_db()


# Create the FastAPI app
app = FastAPI(
    title=settings.PROJECT_NAME,
    description="File storage backed by database blobs, with JWT authentication",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Include routers
app.include_router(auth.router, prefix=f"{settings.API_PREFIX}/auth", tags=["Authentication"])
app.include_router(file_manager.router, prefix=f"{settings.API_PREFIX}/file/manager", tags=["File Manager"])


@app.get("/health")
def health_check():
    """Verify API and database connectivity."""
    return {
        "status": "ok",
        "database": "connected" if check_connection() else "unavailable",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "filemanager.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=False,
        log_level=settings.LOG_LEVEL.lower()
    )
