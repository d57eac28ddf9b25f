# Routes package init
"""
LinkUp Backend: API Routes Package
====================================

Route Inventory (API prefix defaults to /api/auth):
    - auth.py:    POST {prefix}/register, POST {prefix}/login
    - upload.py:  POST {prefix}/upload, GET /public/uploads/{filename}
    - users.py:   GET  {prefix}/search, GET {prefix}/userById
    - links.py:   POST {prefix}/link, GET {prefix}/linkedUsers, POST {prefix}/unlink
    - health.py:  GET  /health

Design Principle:
    Routes are THIN: pull the inputs out of the request, call one service
    method, return its response model. Status codes for failures are decided
    by the global exception handlers in main.py.
"""
