"""Authentication and authorization.

Two authentication paths, each a named strategy:
1. "local" → email/password in the request body → user
2. "jwt"   → signed token in the authorization header → user

Both register with the Authenticator (dispatcher.py) at startup.
Routes opt in with the guards in guards.py: require_password for
sign-in, require_token for everything else.
"""
