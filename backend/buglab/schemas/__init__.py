# Schemas package init
"""
BugLab Backend — Pydantic Request/Response Schemas
===================================================

Schemas are separate from the ORM models: they define exactly which fields
cross the HTTP boundary (password hashes never do).

Request bodies declare every field optional; presence and shape rules live
in the services so the same checks apply to HTTP callers, the seed script
and tests alike.
"""
