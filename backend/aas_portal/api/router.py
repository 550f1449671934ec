from fastapi import APIRouter

router = APIRouter()

from aas_portal.api.endpoints import admin, auth, claims, identity, posts, uploads, users

router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(uploads.router, prefix="/uploads", tags=["uploads"])
router.include_router(claims.router, prefix="/claims", tags=["claims"])
router.include_router(posts.router, prefix="/posts", tags=["posts"])
router.include_router(admin.router, prefix="/admin", tags=["admin"])
router.include_router(identity.router, prefix="/identity", tags=["identity"])
