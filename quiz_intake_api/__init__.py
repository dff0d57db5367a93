"""
Top-level package for the Quiz Intake API.

All functionality lives in the ``app`` subpackage; the ASGI
application is ``quiz_intake_api.app.main:app``.
"""

__all__ = []
