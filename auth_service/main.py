from datetime import timedelta
from typing import Optional
from fastapi import FastAPI
from contextlib import asynccontextmanager
from sqlalchemy.ext.asyncio import AsyncEngine

from auth_service.base_microservice import BaseMicroservice, ServiceConfig
from auth_service.auth import models  # noqa: F401  registers tables on Base.metadata
from auth_service.auth.jwt import TokenIssuer
from auth_service.auth.middleware import register_error_handlers
from auth_service.auth.repository import seed_roles
from auth_service.auth.router import router as auth_router


def create_app(config: Optional[ServiceConfig] = None, engine: Optional[AsyncEngine] = None) -> FastAPI:
    """
    Build the auth service application.

    Args:
        config: Service configuration, read from the environment when omitted
        engine: Pre-built async engine, used by tests to share one database
    """
    config = config or ServiceConfig.from_env()
    config.validate_runtime()
    service = BaseMicroservice(config, engine=engine)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        service.log_event("service.startup", {"service": "auth", "port": config.port})
        if config.sync_db:
            await service.sync_schema()
            async with service.session_factory() as session:
                await seed_roles(session)
            service.logger.info("Seeded default roles")
        yield
        service.log_event("service.shutdown", {"service": "auth"})
        await service.dispose()

    app = FastAPI(
        title="Auth Service",
        description="Registers users, issues bearer tokens and checks roles",
        lifespan=lifespan,
    )
    app.state.service = service
    app.state.token_issuer = TokenIssuer(
        config.jwt_key,
        algorithm=config.jwt_algorithm,
        expires_delta=timedelta(hours=config.token_expire_hours),
    )

    register_error_handlers(app)
    app.include_router(auth_router, prefix="/api/v1")

    @app.get("/auth-service/health-check", tags=["health"])
    async def health_check():
        return {"check": True}

    return app
