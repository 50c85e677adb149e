"""
Course Tutor Backend - FastAPI Application

Entry point for the course tutoring API: learner sessions, the classic and
agent tutors, flashcards, and the admin playground.
"""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import get_settings, validate_required_settings
from database import get_db_manager
from shared.api import health
from tutor.api import sessions
from admin.api import playground, stats, course_settings

settings = get_settings()
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("main")

# Validate configuration on startup
validate_required_settings()

app = FastAPI(
    title="Course Tutor Backend",
    description="AI course tutor with admin playground",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(sessions.router)
app.include_router(playground.router)
app.include_router(stats.router)
app.include_router(course_settings.settings_router)
app.include_router(course_settings.docs_router)
app.include_router(course_settings.public_router)


@app.on_event("startup")
async def startup_event():
    """Ensure tables exist and check database connectivity."""
    logger.info("Starting Course Tutor Backend...")

    db_manager = get_db_manager()
    db_manager.create_tables()

    if not db_manager.health_check():
        logger.warning("Database health check failed on startup")
    else:
        logger.info("Database connection healthy")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.environment == "development"
    )
