"""
Top-level router for version 1 of the API.

``router`` holds the form-facing routes and is mounted under ``/api``
by ``create_app`` (the paths the quiz front end already calls, e.g.
``POST /api/register``).  ``probe_router`` holds the health checks that
live at the site root.
"""

from fastapi import APIRouter

from .endpoints import archive, health, registrations, test_results

router = APIRouter()

router.include_router(registrations.router, tags=["registrations"])
router.include_router(test_results.router, tags=["test results"])
router.include_router(archive.router, tags=["archive"])
router.include_router(health.api_router, tags=["health"])

probe_router = APIRouter()
probe_router.include_router(health.router, tags=["health"])
