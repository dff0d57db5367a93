"""
Cross-cutting infrastructure: settings, logging, errors, security and
the database engine.
"""
