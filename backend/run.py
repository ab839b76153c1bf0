#!/usr/bin/env python3
# backend/run.py
"""
Development server runner.

Listens on PORT (default 4000) with auto-reload.
"""
import os
from pathlib import Path

import uvicorn

from pkasla.core.config import settings

if __name__ == "__main__":
    os.chdir(Path(__file__).parent)
    print(f"Starting PKASLA API ({settings.environment}) on http://localhost:{settings.port}")
    print(f"API Docs: http://localhost:{settings.port}/docs")

    uvicorn.run("pkasla.main:app", host="0.0.0.0", port=settings.port, reload=True, log_level="info")
