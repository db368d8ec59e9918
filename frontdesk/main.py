from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from frontdesk.api import corrections, webhook
from frontdesk.api.dependencies import close_clients
from frontdesk.core.config import get_settings
from frontdesk.core.logger import logger, setup_logging

settings = get_settings()
setup_logging(settings)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("🚀 Vapi Webhook Server Started")
    logger.info(f"📅 Cal.com API: {'✅ Configured' if settings.cal_api_configured else '❌ Missing'}")
    yield
    close_clients()
    logger.info("🛑 Shutting down webhook server")


app = FastAPI(
    title=settings.PROJECT_NAME,
    version="0.1.0",
    lifespan=lifespan
)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.opt(exception=exc).error(f"🔥 UNHANDLED ERROR: {exc}")
    return JSONResponse(
        status_code=500,
        content={"success": False, "message": "Server error. Please try again."}
    )


app.include_router(webhook.router, tags=["Webhook"])
app.include_router(corrections.router, prefix="/api", tags=["Corrections"])


@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "calApiConfigured": settings.cal_api_configured,
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("frontdesk.main:app", host="0.0.0.0", port=settings.PORT)
