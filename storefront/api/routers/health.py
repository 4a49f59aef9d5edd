from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

router = APIRouter(tags=["health"])


@router.get("/", response_class=PlainTextResponse)
def root():
    return "Ekart Backend API is Live"


@router.get("/health")
def health():
    return {"success": True, "status": "ok"}
