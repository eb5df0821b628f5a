"""FastAPI routers for charts, profile and trade insights."""
