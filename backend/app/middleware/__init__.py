"""
SchoolMap Backend - Middleware Package
======================================

Middleware Chain:
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    Request ID runs first so the access log line and every service log
    entry of the request can be correlated through the same id.
"""
