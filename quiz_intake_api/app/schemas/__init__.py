"""
Pydantic schema definitions for API payloads.

Schemas are kept separate from the storage records so the wire format
(camelCase keys, the ``success`` envelope) can evolve independently of
persistence.
"""
