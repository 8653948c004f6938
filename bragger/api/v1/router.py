from fastapi import APIRouter

from bragger.api.v1 import achievements, auth, categories, images, milestones, tags

api_router = APIRouter()

api_router.include_router(auth.router)
api_router.include_router(achievements.router)
api_router.include_router(milestones.router)
api_router.include_router(categories.router)
api_router.include_router(tags.router)
api_router.include_router(images.router)
