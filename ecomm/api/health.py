from fastapi import APIRouter, Request
from sqlalchemy import text


def create_router() -> APIRouter:
    router = APIRouter(prefix="/health", tags=["Health"])

    @router.get(
        "/",
        summary="Health check",
        description="Basic health check endpoint."
    )
    def health_check():
        """Simple health check."""
        return {"status": "healthy"}

    @router.get(
        "/ready",
        summary="Readiness check",
        description="Check that the database accepts connections."
    )
    def readiness_check(request: Request):
        checks = {"database": False}

        try:
            with request.app.state.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
                checks["database"] = True
        except Exception as e:
            checks["database_error"] = str(e)

        return {
            "status": "ready" if checks["database"] else "not_ready",
            "checks": checks
        }

    return router
