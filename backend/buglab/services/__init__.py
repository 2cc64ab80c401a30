# Services package init
"""
BugLab Backend — Services Layer
================================

What:  Business rules and transaction boundaries, between routes and the ORM.
How:   Each service is constructed once with the shared session factory and
       stored on `app.state`; routes reach it through `buglab.dependencies`.

Service Inventory:
    - PasswordHasher:       bcrypt hash / verify (credential_service)
    - IdentityService:      User rows (identity_service)
    - ProfileService:       Scientist registration, update, delete (profile_service)
    - BugService:           Bug CRUD (bug_service)
    - AssignmentService:    Scientist ↔ Bug links (assignment_service)
    - SessionAuthenticator: login, logout, session resolution (session_service)
"""
