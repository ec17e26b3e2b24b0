from fastapi import APIRouter

router = APIRouter()


@router.get("/")
def root():
    return {
        "name": "Onboarding Management System API",
        "status": "ok",
        "docs": "/docs",
        "health": "/health",
    }
