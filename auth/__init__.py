"""auth/ -- Accounts, password hashing, session tokens and caller identity.

Layer rule: auth/ imports only core/ + third-party libraries.
It does NOT import from api/ or posts/.
api/ and posts/ import from auth/, not the other way around.
"""
