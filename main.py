from datetime import datetime
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from loguru import logger

# ==================== IMPORTS ====================
from config import Settings
from deps import get_settings
from lifecycle import PlanLifecycleManager
from notifications import NotificationDispatcher
from plan_index import PlanIndex
from storage import RecordStore
import analytics
import planos
import surveys

VERSION = "1.0.0"


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings.from_env()

    if settings.log_file:
        logger.add(settings.log_file, rotation="1 week", retention="4 weeks", level=settings.log_level)

    # Criar aplicação FastAPI
    app = FastAPI(
        title="Radar360 API",
        description="API do Radar 360: formulários de segurança, Safety Voice e planos de ação",
        version=VERSION,
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Serviços montados uma única vez e compartilhados via app.state
    store = RecordStore(settings.data_dir)
    index = PlanIndex(settings.data_dir)
    dispatcher = NotificationDispatcher(settings)
    app.state.settings = settings
    app.state.store = store
    app.state.index = index
    app.state.dispatcher = dispatcher
    app.state.manager = PlanLifecycleManager(settings, store, index, dispatcher)

    app.include_router(surveys.router)
    app.include_router(planos.router)
    app.include_router(analytics.router)

    # ==================== ROTAS BÁSICAS ====================

    @app.get("/", tags=["Health Check"], response_class=PlainTextResponse)
    async def root():
        return "Radar360 API OK"

    @app.get("/health", tags=["Health Check"])
    async def health_check():
        return {
            "status": "healthy",
            "timestamp": datetime.now().isoformat(),
            "version": VERSION,
        }

    @app.get("/api/ping", tags=["Health Check"])
    async def ping():
        return {"ok": True, "msg": "pong"}

    @app.get("/api/debug-email", tags=["Health Check"])
    def debug_email(settings: Settings = Depends(get_settings)):
        """Configuração de e-mail (sem mostrar a senha)."""
        return {
            "ok": True,
            "configured": settings.email_enabled,
            "host": settings.smtp_host,
            "port": settings.smtp_port,
            "secure": settings.smtp_secure,
            "user": settings.smtp_user,
            "from": settings.mail_from,
        }

    # ==================== STARTUP/SHUTDOWN ====================

    @app.on_event("startup")
    async def startup_event():
        logger.info("🚀 API iniciando...")
        logger.info(f"📁 Dados em {store.root.resolve()}")
        if not settings.email_enabled:
            logger.warning("⚠️ SMTP não configurado: e-mails de plano serão ignorados")
        logger.info("✅ API pronta para receber requisições!")

    @app.on_event("shutdown")
    async def shutdown_event():
        logger.info("🛑 API encerrando...")

    # ==================== TRATAMENTO DE ERROS ====================

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request, exc):
        logger.error(f"HTTP Error: {exc.status_code} - {exc.detail}")
        content = {
            "ok": False,
            "error": exc.detail,
            "status_code": exc.status_code,
            "timestamp": datetime.now().isoformat(),
        }
        if isinstance(exc.detail, dict):
            content.update(exc.detail)
        return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request, exc):
        logger.warning(f"⚠️ Requisição inválida: {exc.errors()}")
        return JSONResponse(
            status_code=422,
            content={
                "ok": False,
                "error": "validation_error",
                "detail": jsonable_encoder(exc.errors()),
                "status_code": 422,
                "timestamp": datetime.now().isoformat(),
            },
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request, exc):
        logger.error(f"Erro não tratado: {str(exc)}")
        return JSONResponse(
            status_code=500,
            content={
                "ok": False,
                "error": "Erro interno do servidor",
                "status_code": 500,
                "timestamp": datetime.now().isoformat(),
            },
        )

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=app.state.settings.host, port=app.state.settings.port, log_level="info")
