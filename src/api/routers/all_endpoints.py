# File: src/api/routers/all_endpoints.py

from fastapi import APIRouter

from api.routers.admin import admin_reports
from api.routers.blocks import blocks
from api.routers.images import images
from api.routers.reports import reports
from api.routers.utility_routes import router as utility_router


# Main router
all_routers = APIRouter()

all_routers.include_router(reports.router)
all_routers.include_router(admin_reports.router)
all_routers.include_router(blocks.router)
all_routers.include_router(images.router)

all_routers.include_router(utility_router)
