"""
Main FastAPI application entry point.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from advisor_crm.db import initialize_database
from advisor_crm.routers import clients, policies, global_policies, tasks, dashboard, settings
from advisor_crm.middleware import PerformanceMiddleware, RequestContextMiddleware
from advisor_crm.cache import config_cache
import logging

logger = logging.getLogger("advisor_crm")

app = FastAPI(
    title="Advisor CRM API",
    description="CRM for insurance advisors: clients, policies, commissions, pipeline and tasks",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# Add performance middleware (innermost - executes first)
app.add_middleware(PerformanceMiddleware)

# Add request context middleware
app.add_middleware(RequestContextMiddleware)

# Add CORS middleware (outermost)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def startup_event():
    """Initialize database and load seed data on startup."""
    logger.info("Starting Advisor CRM API...")

    initialize_database()

    logger.info(f"Seed cache warmed up: {len(config_cache.get_advisors())} advisors, "
                f"{len(config_cache.get_global_policies())} global policy templates")

    logger.info("Startup complete")


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"message": "Advisor CRM API", "status": "healthy"}


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": "1.0.0"}


# Include all routers
app.include_router(clients.router, prefix="/v1", tags=["clients"])
app.include_router(policies.router, prefix="/v1", tags=["policies"])
app.include_router(global_policies.router, prefix="/v1", tags=["global-policies"])
app.include_router(tasks.router, prefix="/v1", tags=["tasks"])
app.include_router(dashboard.router, prefix="/v1", tags=["dashboard"])
app.include_router(settings.router, prefix="/v1", tags=["settings"])

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
