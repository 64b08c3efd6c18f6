"""FastAPI application entry point.

Run with:
    uvicorn tokenguard.main:create_app --factory
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.utils import get_openapi
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tokenguard.application.exceptions import ApplicationError
from tokenguard.domain.exceptions import DomainException
from tokenguard.domain.repositories.account_store import IAccountStore
from tokenguard.domain.services.clock import IClock
from tokenguard.infrastructure.config.logging import configure_logging
from tokenguard.infrastructure.config.settings import Settings, get_settings
from tokenguard.infrastructure.persistence.database import create_schema
from tokenguard.presentation.api.v1 import admin, auth
from tokenguard.presentation.container import build_container
from tokenguard.presentation.error_schemas import ValidationErrorResponse
from tokenguard.presentation.exception_handlers import (
    application_error_handler,
    domain_exception_handler,
    generic_exception_handler,
    validation_error_handler,
)

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    *,
    account_store: IAccountStore | None = None,
    session_factory: async_sessionmaker[AsyncSession] | None = None,
    clock: IClock | None = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Configuration (loaded from the environment when omitted)
        account_store: External account collaborator replacing the reference store
        session_factory: Session factory for the reference store
        clock: Time source replacing the system clock

    Returns:
        FastAPI app whose lifespan owns the AuthContainer
    """
    settings = settings or get_settings()
    configure_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        container = build_container(
            settings,
            clock=clock,
            account_store=account_store,
            session_factory=session_factory,
        )
        if container.engine is not None and not settings.is_production:
            await create_schema(container.engine)

        container.start()
        app.state.container = container
        logger.info(f"{settings.app_name} {settings.app_version} started ({settings.environment})")
        try:
            yield
        finally:
            await container.aclose()
            logger.info(f"{settings.app_name} stopped")

    app = FastAPI(
        title=settings.app_name,
        description="Token lifecycle and account protection service",
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ApplicationError and DomainException cover every typed failure;
    # the status comes from the error code table.
    app.add_exception_handler(ApplicationError, application_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(DomainException, domain_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, generic_exception_handler)

    app.include_router(auth.router, prefix="/api/v1")
    app.include_router(admin.router, prefix="/api/v1")

    @app.get("/")
    async def root() -> dict[str, str]:
        """Health check endpoint."""
        return {
            "message": settings.app_name,
            "status": "running",
            "version": settings.app_version,
            "environment": settings.environment,
        }

    def custom_openapi():
        """Replace the default 422 schema with ValidationErrorResponse."""
        if app.openapi_schema:
            return app.openapi_schema

        openapi_schema = get_openapi(
            title=app.title,
            version=app.version,
            description=app.description,
            routes=app.routes,
        )

        schemas = openapi_schema.setdefault("components", {}).setdefault("schemas", {})
        schemas.pop("HTTPValidationError", None)
        schemas.pop("ValidationError", None)
        schemas["ValidationErrorResponse"] = ValidationErrorResponse.model_json_schema(
            ref_template="#/components/schemas/{model}"
        )
        # Nested models referenced by ValidationErrorResponse
        schemas.update(schemas["ValidationErrorResponse"].pop("$defs", {}))

        for path_data in openapi_schema.get("paths", {}).values():
            for operation in path_data.values():
                if isinstance(operation, dict) and "422" in operation.get("responses", {}):
                    operation["responses"]["422"] = {
                        "description": "Validation Error",
                        "content": {
                            "application/json": {
                                "schema": {"$ref": "#/components/schemas/ValidationErrorResponse"}
                            }
                        },
                    }

        app.openapi_schema = openapi_schema
        return app.openapi_schema

    app.openapi = custom_openapi  # type: ignore[method-assign]
    return app
