"""
SchoolMap Backend - API Routes Package
======================================

Route Inventory:
    - schools.py:      /api/schools...      NEIS proxy + local school registry
    - departments.py:  /api/departments...  local departments
    - users.py:        /api/users...        registration, login, profile, keywords
    - keywords.py:     /api/keywords        keyword vocabulary
    - maps.py:         /api/maps..., /api/comments/{id}
    - health.py:       /health
    - static.py:       /{path}              frontend assets (registered last)

Routes stay thin: read the request, call a service, wrap the result in the
response envelope. Business rules live in app.services.
"""
