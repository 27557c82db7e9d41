"""Main FastAPI application module.

This module initializes the FastAPI application and registers all route handlers.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core.error_handlers import register_exception_handlers
from core.logging_config import setup_logging
from config import (
    CORS_ALLOWED_ORIGINS,
    API_HOST,
    API_PORT,
)
from api.routes import auth, invitations, quiz_attempts, quizzes, registration, students

# Setup logging
setup_logging()

# Initialize FastAPI application
app = FastAPI(
    title="Learning Hub API",
    description="Backend API for student invitations, quizzes and scoreboards.",
    version="1.0.0",
)

# Configure CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Register route handlers
app.include_router(auth.router)
app.include_router(registration.router)
app.include_router(invitations.router)
app.include_router(students.router)
app.include_router(quizzes.admin_router)
app.include_router(quizzes.router)
app.include_router(quiz_attempts.router)


@app.get("/", summary="服务概览", tags=["Info"])
def root() -> dict:
    """Describe the service and where each area of the API lives."""
    return {
        "name": app.title,
        "version": app.version,
        "description": app.description,
        "endpoints": {
            "auth": "/api/auth",
            "registration": "/api/registration",
            "invitations": "/api/admin/invitations",
            "students": "/api/admin/students",
            "password_resets": "/api/admin/password-resets",
            "quizzes": "/api/quizzes",
            "quiz_attempts": "/api/quiz-attempts",
            "scoreboard": "/api/quiz-attempts/scoreboard",
        },
        "docs": "/docs",
        "health": "/api/health",
    }


@app.get("/api/health", summary="存活检查", tags=["Health"])
def health() -> dict:
    return {"status": "ok"}


# --- Startup code for direct execution ---
if __name__ == "__main__":
    import uvicorn

    server_url = f"http://{API_HOST}:{API_PORT}"
    print(f"🌐 服务地址(后端服务): {server_url}")
    print(f"📚 API 文档: {server_url}/docs")
    print()

    # reload=True enables auto-reload on code changes
    uvicorn.run("app:app", host=API_HOST, port=API_PORT, reload=True)
