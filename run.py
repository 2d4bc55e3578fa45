"""
OCR Records - Run Script

Start the API server and the Streamlit frontend together.

Usage:
    python run.py          # API and frontend
    python run.py api      # API only
    python run.py frontend # frontend only
"""

import argparse
import os
import signal
import subprocess
import sys
import time
from pathlib import Path

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).parent
os.chdir(PROJECT_ROOT)

load_dotenv()


class ServiceManager:
    """Start, watch and stop child processes."""

    def __init__(self):
        self.processes = []
        self.running = True

        signal.signal(signal.SIGINT, self._signal_handler)
        signal.signal(signal.SIGTERM, self._signal_handler)

    def _signal_handler(self, signum, frame):
        print("\n🛑 Shutting down services...")
        self.running = False
        self.stop_all()
        sys.exit(0)

    def _spawn(self, name: str, args: list, env: dict = None):
        process = subprocess.Popen(
            [sys.executable, "-m", *args],
            cwd=PROJECT_ROOT,
            env={**os.environ, **(env or {})}
        )
        self.processes.append((name, process))
        return process

    def start_api(self, port: int):
        print(f"🚀 Starting API on http://localhost:{port} (health: /api/health)")
        return self._spawn("API", [
            "uvicorn", "ocr_records.api.main:create_app", "--factory",
            "--host", "0.0.0.0",
            "--port", str(port),
            "--reload"
        ])

    def start_frontend(self, port: int, api_port: int):
        print(f"🎨 Starting frontend on http://localhost:{port}")
        return self._spawn(
            "Frontend",
            [
                "streamlit", "run", "ocr_records/frontend/app.py",
                "--server.port", str(port),
                "--server.address", "0.0.0.0",
                "--server.headless", "true"
            ],
            env={"API_URL": os.getenv("API_URL", f"http://localhost:{api_port}")}
        )

    def stop_all(self):
        for name, process in self.processes:
            if process.poll() is None:
                print(f"   Stopping {name}...")
                process.terminate()
                try:
                    process.wait(timeout=5)
                except subprocess.TimeoutExpired:
                    process.kill()
        self.processes.clear()

    def wait_for_all(self):
        reported = set()
        while self.running:
            for name, process in self.processes:
                if process.poll() is not None and name not in reported:
                    print(f"⚠️  {name} process exited with code {process.returncode}")
                    reported.add(name)
            time.sleep(1)


def main():
    parser = argparse.ArgumentParser(description="OCR Records Runner")
    parser.add_argument(
        "service",
        nargs="?",
        choices=["api", "frontend", "all"],
        default="all",
        help="Service to run (default: all)"
    )
    parser.add_argument("--api-port", type=int, default=5000, help="API port")
    parser.add_argument("--frontend-port", type=int, default=8501, help="Frontend port")
    args = parser.parse_args()

    manager = ServiceManager()

    try:
        if args.service in ("api", "all"):
            manager.start_api(args.api_port)
            time.sleep(2)  # let the API bind before the UI polls it

        if args.service in ("frontend", "all"):
            manager.start_frontend(args.frontend_port, args.api_port)

        manager.wait_for_all()
    except KeyboardInterrupt:
        pass
    finally:
        manager.stop_all()


if __name__ == "__main__":
    main()
