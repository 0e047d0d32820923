"""authgate — password and token authentication for FastAPI services.

Two strategies (email/password "local" login and JWT verification)
registered with a small dispatcher, exposed to routes as two guards.
"""

__version__ = "0.1.0"
