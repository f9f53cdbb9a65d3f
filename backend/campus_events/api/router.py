"""
Central API router that aggregates all route modules.
"""

from fastapi import APIRouter

from campus_events.api.routes import admin, clubs, events, students

api_router = APIRouter(prefix="/api")
api_router.include_router(students.router)
api_router.include_router(clubs.router)
api_router.include_router(admin.router)
api_router.include_router(events.router)
