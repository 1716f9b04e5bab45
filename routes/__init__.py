from .company import router as company_router
from fastapi import APIRouter

# Create main router
router = APIRouter()

# Include company routes
router.include_router(company_router, tags=["Companies"])


@router.get("/test", tags=["Health"])
def api_test():
    return {"message": "API is working!"}
