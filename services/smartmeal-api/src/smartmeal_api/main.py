"""FastAPI application entry point"""

import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from smartmeal_api import configure_logging, logger
from smartmeal_api.config import get_settings
from smartmeal_api.database import close_db, init_db


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler"""
    # Startup
    os.makedirs("data", exist_ok=True)
    await init_db()
    logger.info({"message": "Starting SmartMeal API"})
    yield
    # Shutdown
    await close_db()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application"""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Health check endpoint
    @app.get("/health")
    async def health_check():
        return {"status": "healthy", "version": settings.api_version}

    # Import and include routers
    from smartmeal_api.routers import auth, menus, recipes, users

    app.include_router(auth.router, prefix="/auth", tags=["Authentication"])
    app.include_router(users.router, prefix="/users", tags=["Users"])
    app.include_router(recipes.router, prefix="/recipes", tags=["Recipes"])
    app.include_router(menus.router, prefix="/menus", tags=["Menus"])

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("smartmeal_api.main:app", host="0.0.0.0", port=8080, reload=True)
