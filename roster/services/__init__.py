"""
Use cases for the Roster API.

Each service orchestrates repositories to implement business rules (member
CRUD, registration, login). Routers call these services instead of touching
the store or the database directly.
"""
