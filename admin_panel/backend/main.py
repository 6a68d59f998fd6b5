"""
Deals Bot Admin: FastAPI Backend

REST API for the admin dashboard (products, analytics, today's deals,
notifications) and the Telegram webhook receiver.
"""
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from shared.config.settings import Settings, settings as default_settings
from deals_bot.context import AppContext
from .api import (
    analytics_router,
    deals_router,
    notifications_router,
    products_router,
    telegram_webhook,
    users_router,
)


def create_app(context: Optional[AppContext] = None, settings: Optional[Settings] = None) -> FastAPI:
    """
    Создаёт приложение

    Args:
        context: Готовый контекст (тесты, run_app.py). Без него контекст
            собирается из настроек при старте и закрывается при остановке.
        settings: Настройки; по умолчанию из окружения
    """
    settings = settings or (context.settings if context else default_settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owns_context = getattr(app.state, "ctx", None) is None
        if owns_context:
            logger.info("🚀 Starting Deals Bot Admin...")
            ctx = AppContext.build(settings)
            await ctx.startup()
            ctx.create_dispatcher()
            app.state.ctx = ctx

            if settings.use_webhook and settings.webhook_url:
                await ctx.bot.set_webhook(settings.webhook_url)
                logger.info(f"✅ Webhook set: {settings.webhook_url}")

        logger.info(f"API at http://{settings.api_host}:{settings.api_port}")
        yield

        if owns_context:
            await app.state.ctx.shutdown()
            app.state.ctx = None

    app = FastAPI(
        title="Deals Bot Admin",
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/api/docs",
        redoc_url=None,
        openapi_url="/api/openapi.json",
    )
    app.state.ctx = context

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": exc.detail},
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
            for err in exc.errors()
        )
        logger.warning(f"Validation error on {request.url.path}: {errors}")
        return JSONResponse(
            status_code=400,
            content={"success": False, "message": "Invalid request", "error": errors},
        )

    app.include_router(products_router)
    app.include_router(analytics_router)
    app.include_router(deals_router)
    app.include_router(notifications_router)
    app.include_router(users_router)
    app.add_api_route(settings.webhook_path, telegram_webhook, methods=["POST"], include_in_schema=False)

    @app.get("/", response_class=PlainTextResponse)
    async def root():
        # Пингуется UptimeRobot
        return "Bot is running!"

    @app.get("/health")
    async def health_check():
        return {"status": "healthy", "version": "1.0.0"}

    return app


app = create_app()


def run():
    import uvicorn
    uvicorn.run(
        "admin_panel.backend.main:app",
        host=default_settings.api_host,
        port=default_settings.api_port,
    )


if __name__ == "__main__":
    run()
