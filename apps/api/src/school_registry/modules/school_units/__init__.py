"""
School Units Module

Administrative maintenance of school units and their homologation trail:
1. Cursor-paginated listing (keyset on id)
2. Create, partial update and physical delete
3. Append-only homologation events; the newest one is the current state

API Endpoints:
- GET/POST /school_units
- GET/PUT/DELETE /school_units/{id}
- GET/POST /school_units/{id}/homologations
"""

from .router import router

__all__ = ["router"]
