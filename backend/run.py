#!/usr/bin/env python3
# backend/run.py
"""
Development server runner for the garage booking API.

Uses the local SQLite file from DATABASE_URL (created on startup) unless a
PostgreSQL URL is configured.
"""
import os
from pathlib import Path
import sys

# Add backend to path
backend_dir = Path(__file__).parent
sys.path.insert(0, str(backend_dir))
os.chdir(backend_dir)

import uvicorn

if __name__ == "__main__":
    print("Starting garage booking API at http://localhost:8000 (docs at /docs)")

    uvicorn.run("garage_booking.main:app", host="0.0.0.0", port=8000, reload=True, log_level="info")
