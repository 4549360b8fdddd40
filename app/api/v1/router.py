from fastapi import APIRouter
from api.v1.routes.auth_sync import router as auth_sync_router


# Main v1 router (includes all endpoints)
router = APIRouter()
router.include_router(auth_sync_router)
