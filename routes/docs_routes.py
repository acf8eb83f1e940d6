from fastapi import APIRouter, Request
from settings.config import settings

router = APIRouter(tags=["Docs"])

@router.get("/")
async def welcome():
    return {"message": "welcome to JWT Pizza", "version": settings.VERSION}

@router.get("/api/docs")
async def api_docs(request: Request):
    """Endpoint listing built from the app's OpenAPI schema."""
    endpoints = []
    for path, operations in request.app.openapi().get("paths", {}).items():
        if not path.startswith("/api/"):
            continue
        for method, operation in sorted(operations.items()):
            text = operation.get("description") or operation.get("summary") or ""
            endpoints.append({
                "method": method.upper(),
                "path": path,
                "description": text.strip().splitlines()[0] if text.strip() else "",
            })
    return {
        "version": settings.VERSION,
        "endpoints": endpoints,
        "config": {"factory": settings.FACTORY_URL, "db": settings.DB_NAME},
    }
