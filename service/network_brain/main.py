from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from network_brain.config import get_settings
from network_brain.clients import build_clients
from network_brain.errors import register_exception_handlers
from network_brain.logging_config import logger
from network_brain.api.limits import limiter
from network_brain.api.profile import router as profile_router
from network_brain.api.introductions import router as introductions_router
from network_brain.api.embeddings import router as embeddings_router
from network_brain.api.timeline import router as timeline_router
from network_brain.api.applications import router as applications_router
from network_brain.api.system_prompts import router as system_prompts_router
from network_brain.api.calendar import router as calendar_router
from network_brain.api.people import router as people_router

VERSION = "0.1.0"

app = FastAPI(
    title="Network Brain API",
    description="Community network management with AI-assisted profiles and introductions",
    version=VERSION
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
register_exception_handlers(app)


# Lifecycle events
@app.on_event("startup")
async def startup_event():
    """Build the shared datastore, LLM and HTTP clients."""
    logger.info("[STARTUP] Building service clients...")
    app.state.clients = build_clients(get_settings())
    logger.info("[STARTUP] Clients ready")


@app.on_event("shutdown")
async def shutdown_event():
    clients = getattr(app.state, "clients", None)
    if clients is not None:
        await clients.aclose()
        logger.info("[SHUTDOWN] Clients closed")


# Admin frontend and form provider call from other origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    settings = get_settings()
    return {
        "status": "ok",
        "environment": settings.environment,
        "version": VERSION
    }


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": "Network Brain API",
        "docs": "/docs"
    }


# Include routers
app.include_router(profile_router)
app.include_router(introductions_router)
app.include_router(embeddings_router)
app.include_router(timeline_router)
app.include_router(applications_router)
app.include_router(system_prompts_router)
app.include_router(calendar_router)
app.include_router(people_router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
