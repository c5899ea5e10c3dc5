"""
FastAPI application entry point
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from backend.app.api.v1.admin import routes as admin
from backend.app.api.v1.auth import routes as auth
from backend.app.api.v1.feedback import routes as feedback
from backend.app.api.v1.upload import routes as upload
from backend.app.core.config import settings
from backend.app.core.logging_config import setup_logging
from backend.app.db.base import Base
from backend.app.db.session import engine
from backend.app.services.otp_store import TtlStore

# Import models so they register with Base.metadata
import backend.app.models  # noqa: F401

logger = setup_logging()

# Create database tables (alembic handles upgrades of existing databases)
try:
    Base.metadata.create_all(bind=engine)
except SQLAlchemyError as e:
    logger.error("Database error: %s", e)

# Initialize FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Student milestone feedback and resume dashboard API",
    version=settings.app_version,
)

# Process-wide OTP store; handlers receive it through get_otp_store
app.state.otp_store = TtlStore()

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth.router, prefix="/api")
app.include_router(feedback.router, prefix="/api")
app.include_router(upload.router, prefix="/api")
app.include_router(admin.router, prefix="/api")


@app.get("/")
def read_root():
    """Root endpoint"""
    return {"message": settings.app_name, "version": settings.app_version}


@app.get("/health")
def health_check():
    """Health check endpoint"""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.port)
