"""
Endpoint subpackage for API v1.

Each module defines an APIRouter for one concern; they are aggregated
in ``router.py``.
"""
