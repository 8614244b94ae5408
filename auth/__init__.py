"""auth/ -- Credential hashing, session tokens and request authentication for DevConnector.

Layer rule: auth/ imports only stdlib, third-party libraries and core/.
It does NOT import from api/ or social/.
api/ imports from auth/, not the other way around.
"""
