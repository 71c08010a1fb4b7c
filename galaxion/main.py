# FastAPI entry point; wires routers, middleware and startup seeding
# galaxion/main.py
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware
from contextlib import asynccontextmanager

# Import routers and services
from galaxion.endpoints import (
    auth as auth_router,
    courses as courses_router,
    progress as progress_router,
    notes as notes_router,
    quizzes as quizzes_router,
    diagnosis as diagnosis_router,
    skills_dna as skills_dna_router,
    time_saved as time_saved_router,
    gap_analysis as gap_analysis_router,
    events as events_router,
    tutor as tutor_router,
    tools as tools_router,
)
from galaxion.services.catalog_service import catalog_service
from galaxion.services.tutor_agent import ensure_llm_initialized
from galaxion.utils.config import settings
from galaxion.utils.logger import logger
from galaxion.utils.db import engine, AsyncSessionLocal
from galaxion.models.user import Base
# Register every table on Base.metadata
from galaxion.models import course, skills, time_saved  # noqa: F401

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manages application startup and shutdown events.
    """
    logger.info("Galaxion API starting up...")

    # Create database tables if they don't exist
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.info("Loading catalog...")
    catalog_service.load_catalog(settings.catalog_path)
    async with AsyncSessionLocal() as session:
        await catalog_service.seed_database(session)

    logger.info("Initializing AI tutor...")
    try:
        ensure_llm_initialized()
    except RuntimeError as e:
        # The tutor answers with a fallback message until a provider is reachable
        logger.error(f"AI tutor unavailable at startup: {e}")

    logger.info("Startup complete.")
    yield
    # On shutdown
    logger.info("Galaxion API shutting down...")
    await engine.dispose()

# --- FastAPI App Initialization ---
app = FastAPI(
    title="Galaxion API",
    description="Learning platform API for NovaAI University: courses, Skills DNA, Time Saved and an AI tutor.",
    version="1.0.0",
    lifespan=lifespan
)

# --- Middleware ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.session_secret,
    max_age=settings.session_max_age,
    same_site="lax",
)

# --- Validation errors are reported as 400 ---
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.debug(f"Rejected invalid request to {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=400,
        content={"message": "Invalid request data", "errors": jsonable_encoder(exc.errors())},
    )

# --- API Routers ---
app.include_router(auth_router.router, prefix="/api/auth", tags=["Auth"])
app.include_router(courses_router.router, prefix="/api/courses", tags=["Courses"])
app.include_router(courses_router.lesson_router, prefix="/api/lessons", tags=["Lessons"])
app.include_router(quizzes_router.router, prefix="/api/lessons", tags=["Quizzes"])
app.include_router(progress_router.router, prefix="/api", tags=["Progress"])
app.include_router(notes_router.router, prefix="/api", tags=["Lesson Notes"])
app.include_router(skills_dna_router.router, prefix="/api/skills-dna", tags=["Skills DNA"])
app.include_router(diagnosis_router.router, prefix="/api/diagnosis", tags=["Diagnosis"])
app.include_router(time_saved_router.router, prefix="/api/time-saved", tags=["Time Saved"])
app.include_router(gap_analysis_router.router, prefix="/api/gap-analysis", tags=["Gap Analysis"])
app.include_router(events_router.router, prefix="/api/events", tags=["Events"])
app.include_router(tutor_router.router, prefix="/api/ai-tutor", tags=["AI Tutor"])
app.include_router(tools_router.router, prefix="/api/tools", tags=["Business Tools"])

# --- Root Endpoint ---
@app.get("/")
async def root():
    return {"message": "Welcome to the Galaxion API"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("galaxion.main:app", host="0.0.0.0", port=8000)
