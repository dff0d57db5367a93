"""
Application package.

``core`` holds configuration, logging, errors, security and the
database engine; ``storage`` the interchangeable persistence backends;
``services`` the business logic; ``schemas`` the request and response
models; ``api`` the routers.  The application object itself is built
in ``main``.
"""
