"""auth/ -- Authentication and authorization package for Taskboard.

Token codec (tokens), identity resolution (identity), ownership/role rules
(policy), the user repository (store) and the register/login/user services
(service).

Layer rule: auth/ imports from core/ and third-party libraries only; tasks/
appears solely under TYPE_CHECKING. It does NOT import from api/.
api/ imports from auth/, not the other way around.
"""
