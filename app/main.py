from app.core.config import get_settings
from app.core.logging import configure_logging
from app.core.middleware import RequestIdMiddleware
from app.core.middleware_rate_limit import ApiRateLimitMiddleware
from app.core.rate_limit import InMemoryRateLimiter
from app.core.errors import ServiceError
from app.api.v1.router import v1_router
from app.services.mpesa_gateway import DarajaGateway, PaymentGateway
from app.services.sms import AfricasTalkingSms, Notifier, SmsClient

from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging

logger = logging.getLogger(__name__)


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_envelope())

    @app.exception_handler(PermissionError)
    async def permission_error_handler(request: Request, exc: PermissionError):
        return JSONResponse(status_code=403, content={"success": False, "message": str(exc)})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = [
            {
                "field": ".".join(str(p) for p in err.get("loc", ())[1:]),
                "message": err.get("msg"),
            }
            for err in exc.errors()
        ]
        return JSONResponse(status_code=400, content={"success": False, "errors": errors})

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("unhandled error", extra={"path": request.url.path})
        return JSONResponse(
            status_code=500,
            content={"success": False, "message": "Internal server error"},
        )


def create_app(
    payment_gateway: Optional[PaymentGateway] = None,
    sms_client: Optional[SmsClient] = None,
) -> FastAPI:
    settings = get_settings()
    configure_logging(settings)

    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
    )

    # Collaborators: one instance per process
    app.state.payment_gateway = payment_gateway or DarajaGateway.from_settings(settings)
    app.state.notifier = Notifier(
        sms_client or AfricasTalkingSms.from_settings(settings),
        brand=settings.sms_brand,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
        allow_headers=["*"],
        allow_credentials=True,
    )
    app.add_middleware(
        ApiRateLimitMiddleware,
        limiter=InMemoryRateLimiter(
            capacity=settings.rate_limit_capacity,
            window_seconds=settings.rate_limit_window_seconds,
        ),
        prefix=settings.api_prefix,
        exempt={f"{settings.api_prefix}/mpesa-callback"},
    )
    # Middleware: Request ID
    app.add_middleware(RequestIdMiddleware, header_name=settings.request_id_header)

    _register_error_handlers(app)

    app.include_router(v1_router, prefix=settings.api_prefix)

    return app


app = create_app()
