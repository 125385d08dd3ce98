"""Unit tests for CraftShare web route modules.

Structure:
    tests/unit/web/
    ├── conftest.py                    # Router app + seeded database
    ├── test_routes_project_resources.py
    ├── test_routes_completion.py
    └── ... (one per route module)

Testing pattern:
    - Mount the router under test on a bare FastAPI app with error handlers
    - Drive it with httpx.AsyncClient over ASGITransport
    - Routes share the in-memory database through the session_factory fixture
"""
