"""
Domain‑specific endpoint modules for API v1.

Each module defines an ``APIRouter`` named ``router`` which is
included by ``api.v1.router``.
"""
