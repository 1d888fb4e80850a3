"""PLIVE TV — dev launcher. Starts the backend in watch mode."""

import argparse
import os
import signal
import subprocess
import sys
from pathlib import Path

from dotenv import load_dotenv

ROOT = Path(__file__).parent
load_dotenv(ROOT / ".env")

HOST = os.getenv("HOST", "0.0.0.0")
BACKEND_PORT = os.getenv("BACKEND_PORT", "13013")


def main():
    parser = argparse.ArgumentParser(description="PLIVE TV dev launcher")
    parser.add_argument("--catalog", type=Path, default=None,
                        help="Series catalog JSON (default: bundled Heart Beats)")
    parser.add_argument("--check", action="store_true",
                        help="Validate the catalog and exit")
    args = parser.parse_args()

    env = os.environ.copy()
    if args.catalog:
        env["PLIVETV_CATALOG"] = str(args.catalog.resolve())

    # Fail fast on a broken catalog instead of inside the reloader
    from plivetv.catalog import CatalogError, load_series
    try:
        series = load_series(args.catalog)
    except CatalogError as e:
        print(f"error: {e}", file=sys.stderr)
        sys.exit(1)
    print(f"{series.title}: {len(series.episodes)} episodes, {len(series.characters)} characters")
    if args.check:
        return

    procs: list[subprocess.Popen] = []

    def shutdown(*_):
        print("\nShutting down...")
        for p in procs:
            p.terminate()
        for p in procs:
            p.wait()
        sys.exit(0)

    signal.signal(signal.SIGINT, shutdown)
    signal.signal(signal.SIGTERM, shutdown)

    print(f"Starting backend on http://localhost:{BACKEND_PORT} ...")
    procs.append(subprocess.Popen(
        ["uv", "run", "uvicorn", "backend.app:app", "--reload", "--host", HOST, "--port", BACKEND_PORT],
        cwd=ROOT, env=env,
    ))

    for p in procs:
        p.wait()


if __name__ == "__main__":
    main()
