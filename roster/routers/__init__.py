"""
FastAPI routers grouped by resource (members, auth).

Each module exposes an APIRouter that the application factory includes;
shared dependencies and guards live in ``deps``.
"""
