"""
backend — FastAPI application package.

Routers: api/analyze.py, api/health.py
Schemas: schemas/response.py
Settings: config.py
Entry point: main.py → run with `uvicorn backend.main:app --reload`
"""
