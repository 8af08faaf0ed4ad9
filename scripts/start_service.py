"""
Run the items app and the users API side by side.

    python -m scripts.start_service            # both
    python -m scripts.start_service items      # one
"""

import os
import signal
import subprocess
import sys
import threading
import time

from src.store.config import get_config

config = get_config()

SERVICES = {
    "items": ("src.items.main:app", config.items_host, config.items_port),
    "users": ("src.users.main:app", config.users_host, config.users_port),
}


def launch(name):
    app, host, port = SERVICES[name]
    print(f"[{name}] starting on {host}:{port}")
    return subprocess.Popen(
        ["uvicorn", app, "--host", host, "--port", str(port), "--log-level", config.log_level.lower()],
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        text=True,
        bufsize=1,
        env={**os.environ, "PYTHONUNBUFFERED": "1"},
    )


def relay(proc, name):
    """Prefix every output line of a child with its service name."""
    for line in proc.stdout:
        print(f"[{name}] {line.rstrip()}")


def run(names):
    procs = []
    try:
        for name in names:
            proc = launch(name)
            procs.append(proc)
            threading.Thread(target=relay, args=(proc, name), daemon=True).start()
        while all(p.poll() is None for p in procs):
            time.sleep(1)
    except KeyboardInterrupt:
        pass
    finally:
        for p in procs:
            if p.poll() is None:
                p.send_signal(signal.SIGTERM)
        for p in procs:
            try:
                p.wait(timeout=5)
            except subprocess.TimeoutExpired:
                p.kill()


if __name__ == "__main__":
    target = sys.argv[1] if len(sys.argv) > 1 else "up"
    if target == "up":
        run(list(SERVICES))
    elif target in SERVICES:
        run([target])
    else:
        sys.exit("usage: python -m scripts.start_service [up|items|users]")
