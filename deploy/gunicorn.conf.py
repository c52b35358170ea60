"""
Gunicorn configuration for selfmonitor.

The state service keeps the live aggregate in process memory and writes the
whole document on every mutation, so the app must run as exactly one worker
process with one thread; requests are applied one at a time.

Usage:
    gunicorn -c deploy/gunicorn.conf.py selfmonitor.wsgi:app
"""

from __future__ import annotations

import logging
import os

# ===== Server Binding =====
bind = os.environ.get("GUNICORN_BIND", "127.0.0.1:8000")
backlog = int(os.environ.get("GUNICORN_BACKLOG", "64"))

# ===== Worker Settings =====
worker_class = "sync"
# Single writer: more than one worker would give each its own copy of the aggregate.
workers = 1
threads = 1

# ===== Timeout Settings =====
timeout = int(os.environ.get("GUNICORN_TIMEOUT", "60"))
graceful_timeout = int(os.environ.get("GUNICORN_GRACEFUL_TIMEOUT", "30"))
keepalive = int(os.environ.get("GUNICORN_KEEPALIVE", "5"))

# ===== Logging Configuration =====
accesslog = os.environ.get("GUNICORN_ACCESSLOG", "-")  # stdout
errorlog = os.environ.get("GUNICORN_ERRORLOG", "-")    # stderr
loglevel = os.environ.get("GUNICORN_LOGLEVEL", "info")
capture_output = True

# ===== Server Mechanics =====
daemon = False
# Startup runs schema migrations once; preloading would run them in the master instead.
preload_app = False
proc_name = os.environ.get("GUNICORN_PROC_NAME", "selfmonitor")

# Large imports are bounded by MAX_CONTENT_LENGTH in the app config.
limit_request_line = int(os.environ.get("GUNICORN_LIMIT_REQUEST_LINE", "8190"))


# ===== Lifecycle Hooks =====
def on_starting(server):
    """Called just before the master process is initialized."""
    logger = logging.getLogger(__name__)
    logger.info(f"Gunicorn starting: workers={workers}, threads={threads}, timeout={timeout}s")


def when_ready(server):
    """Called just after the server is started."""
    logger = logging.getLogger(__name__)
    logger.info(f"Gunicorn ready. Listening on {bind}")


def worker_abort(worker):
    """Called when a worker is timed out and is being replaced."""
    logger = logging.getLogger(__name__)
    logger.warning(f"Worker {worker.pid} timed out (>{timeout}s), aborting")
