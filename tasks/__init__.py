"""tasks/ -- Task resource: domain model, persistence and owner-scoped service.

Layer rule: tasks/ imports from core/ and auth/ (Identity, policy).
It does NOT import from api/. api/ imports from tasks/, not the other way around.
"""
