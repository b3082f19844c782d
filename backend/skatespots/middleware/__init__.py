# Middleware package init
"""
SkateSpots Backend - Middleware Package
========================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain:
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    - Request ID first, so every log line of the request can carry it
    - Logging sees the final status code and total duration
"""
