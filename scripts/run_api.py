#!/usr/bin/env python
"""
Runs the order pricing API with uvicorn on port 8000 (auto-reload on).

Usage:
    python scripts/run_api.py

Data and promotion paths come from the ORDER_CALCULATOR_* environment
variables (see order_calculator.config.settings).
"""
import os
import subprocess
import sys
from pathlib import Path


def main():
    project_root = Path(__file__).parent.parent
    os.chdir(project_root)

    # Ensure src is in python path
    env = os.environ.copy()
    src_path = str(project_root / "src")
    if "PYTHONPATH" in env:
        env["PYTHONPATH"] = f"{src_path}{os.pathsep}{env['PYTHONPATH']}"
    else:
        env["PYTHONPATH"] = src_path

    print("Starting Order Calculator API (FastAPI)...")
    print("  POST /orders/price   price an order")
    print("  GET  /promotions     list active promotions")
    try:
        subprocess.run([
            sys.executable, "-m", "uvicorn",
            "order_calculator.api.main:app",
            "--host", "0.0.0.0",
            "--port", "8000",
            "--reload"
        ], env=env)
    except KeyboardInterrupt:
        print("\nAPI stopped.")


if __name__ == "__main__":
    main()
