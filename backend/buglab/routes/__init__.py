# Routes package init
"""
BugLab Backend — API Routes Package
====================================

Route Inventory:
    - auth.py:        POST /auth/register, /auth/login, /auth/logout
                      GET  /auth/me
    - scientists.py:  GET/POST /scientists, GET/PATCH/DELETE /scientists/{id}
                      POST /scientists/{id}/assign, /scientists/{id}/unassign
                      GET  /scientists/{id}/bugs
    - bugs.py:        GET/POST /bugs, GET/PATCH/DELETE /bugs/{id}
    - health.py:      GET  /health

Routes stay thin: unpack the body, call one service method, shape the
response. Errors are raised as BugLabError subclasses and rendered by the
handlers registered in main.py.
"""
