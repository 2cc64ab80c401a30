# Middleware package init
"""
BugLab Backend — Middleware Package
====================================

Middleware Chain (request direction):
    Request → [CORS] → [Request ID] → [Logging] → [Security Headers]
            → [GZip] → [Timeout] → Route Handler

    Responses travel the same chain in reverse, so the request ID header,
    the access log line and the security headers also apply to error and
    timeout responses.
"""
