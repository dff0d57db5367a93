"""
Service layer.

Services hold the business rules and talk to a
:class:`~quiz_intake_api.app.storage.base.Storage` instead of a
concrete database, so handlers stay the same whichever backend was
selected at startup.
"""
