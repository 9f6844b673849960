#!/usr/bin/env python
"""
Run the pricing API (FastAPI via uvicorn).

Host and port come from PRINTSHOP_API_HOST / PRINTSHOP_API_PORT.

Usage:
    python scripts/run_api.py
"""
import subprocess
import sys
import os
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from printshop_pricing.config.settings import get_settings


def uvicorn_command(settings) -> list[str]:
    return [
        sys.executable, "-m", "uvicorn",
        "printshop_pricing.api.main:app",
        "--host", settings.api_host,
        "--port", str(settings.api_port),
        "--reload"
    ]


def main():
    settings = get_settings()
    os.chdir(settings.project_root)

    # Ensure src is in python path
    env = os.environ.copy()
    if "PYTHONPATH" in env:
        env["PYTHONPATH"] = f"{src_path}{os.pathsep}{env['PYTHONPATH']}"
    else:
        env["PYTHONPATH"] = str(src_path)

    print(f"Starting Print-Shop Pricing API on {settings.api_host}:{settings.api_port}...")
    try:
        subprocess.run(uvicorn_command(settings), env=env)
    except KeyboardInterrupt:
        print("\nAPI stopped.")


if __name__ == "__main__":
    main()
