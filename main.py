from fastapi import FastAPI
from mailshort_app.config import settings
from mailshort_app.database.connection import engine, Base
from mailshort_app.logging_config import setup_logging
from mailshort_app.api.v1 import rewrite, links, redirect

# Import models to ensure they're registered with Base
from mailshort_app.models import Job, JobLink, Link, ClickEvent

setup_logging(settings)

# Create database tables
Base.metadata.create_all(bind=engine)

# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Shortens the links in HTML emails and tracks their clicks",
    debug=settings.debug
)

@app.get("/")
def read_root():
    """Root endpoint with API information"""
    return {
        "message": f"Welcome to {settings.app_name}",
        "version": settings.app_version,
        "docs": "/docs",
        "redoc": "/redoc"
    }


@app.get("/health")
def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "environment": settings.environment}




######## Include routers
app.include_router(rewrite.router, prefix="/api/v1")
app.include_router(links.router, prefix="/api/v1")
app.include_router(redirect.router)
