"""profiles/ -- Owner-scoped profile, skill and experience records.

Layer rule: profiles/ imports only stdlib, third-party libraries and core/.
It does NOT import from api/ or auth/. The owner id every store method takes
is supplied by the route layer from the access guard.
"""
