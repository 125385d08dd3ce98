"""HTTP request layer for CraftShare (FastAPI)."""
