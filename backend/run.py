#!/usr/bin/env python3
# backend/run.py
"""
Development server runner.

Reloads on code changes and reads configuration from backend/.env.
"""
import os
from pathlib import Path
import sys

import uvicorn

backend_dir = Path(__file__).parent
sys.path.insert(0, str(backend_dir))
os.chdir(backend_dir)

if __name__ == "__main__":
    print("Disciplix API at http://localhost:8000 (docs at /docs)")
    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=True, log_level="info")
