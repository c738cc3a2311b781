#!/usr/bin/env python3
"""Start the tracking API with uvicorn, honouring the PORT environment variable."""

import os
import subprocess
import sys
from pathlib import Path

port = os.environ.get("PORT", "8000")
try:
    port_int = int(port)
except ValueError:
    print(f"Warning: Invalid PORT value '{port}', using default 8000", file=sys.stderr)
    port_int = 8000

# The API package lives under src/; put it on PYTHONPATH for the uvicorn child process.
src_path = Path(__file__).resolve().parent / "src"
if not src_path.is_dir():
    print(f"Error: src directory not found at {src_path}", file=sys.stderr)
    sys.exit(1)

existing = os.environ.get("PYTHONPATH", "")
os.environ["PYTHONPATH"] = f"{src_path}{os.pathsep}{existing}" if existing else str(src_path)
sys.path.insert(0, str(src_path))

cmd = [
    sys.executable,
    "-m",
    "uvicorn",
    "salestrack.main:app",
    "--host",
    os.environ.get("HOST", "0.0.0.0"),
    "--port",
    str(port_int),
    "--proxy-headers",
    "--forwarded-allow-ips", "*",
]

# Fail fast on configuration or import errors before handing over to uvicorn
try:
    import salestrack.main  # noqa: F401
except Exception as e:
    print(f"Failed to import salestrack.main ({type(e).__name__}): {e}", file=sys.stderr)
    import traceback
    traceback.print_exc(file=sys.stderr)
    sys.exit(1)

print(f"Starting tracking API on port {port_int}...", file=sys.stderr)
try:
    sys.exit(subprocess.call(cmd))
except KeyboardInterrupt:
    print("Server interrupted by user", file=sys.stderr)
    sys.exit(0)
