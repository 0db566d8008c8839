"""Productivity API Router - aggregates all /api routes."""

from fastapi import APIRouter

from productivity.api import activity_logs, daily_logs, performance, users

# Main API router - all routes will be prefixed with /api
api_router = APIRouter(prefix="/api")

# Include routers
api_router.include_router(users.router)
api_router.include_router(daily_logs.router)
api_router.include_router(activity_logs.router)
api_router.include_router(performance.router)
