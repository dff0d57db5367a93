"""
API package containing versioned routes and request dependencies.
"""
