"""social/ -- Profiles, posts, and the guarded sub-collection mutation engine.

Layer rule: social/ imports only stdlib, third-party libraries and core/.
It does NOT import from api/ or auth/; callers pass identity ids in, and
denormalized author fields (name, avatar) are looked up by the route layer.
"""
