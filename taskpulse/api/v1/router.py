from fastapi import APIRouter

from taskpulse.api.v1.boards import router as boards_router
from taskpulse.api.v1.employees import router as employees_router
from taskpulse.api.v1.webhooks import router as webhooks_router

v1_router = APIRouter()

v1_router.include_router(webhooks_router)
v1_router.include_router(boards_router)
v1_router.include_router(employees_router)
