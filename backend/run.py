#!/usr/bin/env python3
# backend/run.py
"""
Development server runner.

Set IS_TESTING=true to run against the in-memory SQLite database instead of
DATABASE_URL.
"""
from pathlib import Path
import sys

# Add backend to path
backend_dir = Path(__file__).parent
sys.path.insert(0, str(backend_dir))

import uvicorn

if __name__ == "__main__":
    print("Starting Digital Offices API at http://localhost:8000 (docs at /docs)")
    uvicorn.run("digital_offices.main:app", host="0.0.0.0", port=8000, reload=True, log_level="info")
