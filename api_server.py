#!/usr/bin/env python3
"""
API Server - standalone uvicorn entry point for the chart & trade insight API.
"""

import os

import uvicorn

if __name__ == "__main__":
    port = int(os.getenv("PORT", "8000"))
    print(f"🚀 Starting API Server on port {port}...")
    uvicorn.run("api:app", host="0.0.0.0", port=port)
