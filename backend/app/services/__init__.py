"""
SchoolMap Backend - Services Layer
==================================

What:  Business logic between the routes (HTTP) and the database / NEIS API.
How:   Stateless singletons; every persistence method receives the request's
       AsyncSession.

Service Inventory:
    - SchoolDirectory (abstract): contract for the external school directory
    - NeisDirectoryService: Open NEIS implementation (directory_service)
    - SchoolService / DepartmentService: local school registry
    - UserService: registration, login, profile updates
    - KeywordService: keyword vocabulary and per-user keyword sets
    - MapService: maps and map comments
"""
