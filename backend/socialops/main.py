import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.engine.url import make_url

from socialops.admin.router import router as super_admin_router
from socialops.auth.router import router as auth_router
from socialops.auth.security import jwt_secret
from socialops.billing.router import pricing_router, subscription_router
from socialops.core.config import Settings, settings as default_settings
from socialops.core.errors import register_error_handlers
from socialops.core.services import Services
from socialops.db.init_db import init_db
from socialops.db.session import Database
from socialops.integrations.router import drive_router, linkedin_router
from socialops.media.router import router as media_router
from socialops.posts.router import router as posts_router
from socialops.system.router import router as health_router
from socialops.team.router import router as team_router

logging.basicConfig(level=getattr(logging, default_settings.LOG_LEVEL, logging.INFO))
logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    database: Database | None = None,
    services: Services | None = None,
) -> FastAPI:
    settings = settings or default_settings
    # raises outside dev when JWT_SECRET is unset
    jwt_secret(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        db = database or Database.from_settings(settings)
        app.state.database = db
        app.state.services = services or Services.from_settings(settings)

        db_url = make_url(db.url)
        logger.info(
            "Config sanity: env=%s db_host=%s cors_origins=%s stripe=%s drive=%s linkedin=%s",
            settings.ENV,
            db_url.host or "local",
            len(settings.CORS_ORIGINS),
            app.state.services.stripe is not None,
            app.state.services.google_drive.configured,
            app.state.services.linkedin.configured,
        )
        if settings.AUTO_CREATE_TABLES or db_url.get_backend_name() == "sqlite":
            init_db(db)

        yield

        logger.info("Shutting down, disposing DB engine")
        db.dispose()

    app = FastAPI(
        title="SocialOps API",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type"],
    )
    register_error_handlers(app)

    # --- Routers ---
    app.include_router(auth_router, prefix="/api/auth", tags=["auth"])
    app.include_router(pricing_router, prefix="/api/pricing", tags=["billing"])
    app.include_router(subscription_router, prefix="/api/subscription", tags=["billing"])
    app.include_router(team_router, prefix="/api/team", tags=["team"])
    app.include_router(media_router, prefix="/api/drive-media", tags=["media"])
    app.include_router(posts_router, prefix="/api/posts", tags=["posts"])
    app.include_router(drive_router, prefix="/api/integrations/google-drive", tags=["integrations"])
    app.include_router(linkedin_router, prefix="/api/integrations/linkedin", tags=["integrations"])
    app.include_router(super_admin_router, prefix="/api/super-admin", tags=["super-admin"])
    app.include_router(health_router, prefix="/api/health", tags=["system"])

    return app


app = create_app()
