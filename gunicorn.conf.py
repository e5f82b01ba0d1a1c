"""Gunicorn configuration for the taproom backend.

Runs behind host-level Nginx which proxies /api/ to the loopback bind below.

Used by the systemd unit:
  ExecStart=... gunicorn -c /opt/taproom/backend/gunicorn.conf.py taproom.main:app
"""

import multiprocessing
import os


def _int(env_name: str, default: int) -> int:
    try:
        return int(os.getenv(env_name, str(default)))
    except ValueError:
        return default


bind = f"{os.getenv('TAPROOM_BIND_HOST', '127.0.0.1')}:{_int('TAPROOM_BIND_PORT', 8110)}"

# Worker model: UvicornWorker for ASGI (FastAPI)
worker_class = "uvicorn.workers.UvicornWorker"

workers = _int("TAPROOM_GUNICORN_WORKERS", max(2, multiprocessing.cpu_count()))
threads = _int("TAPROOM_GUNICORN_THREADS", 1)

# PDF rendering is the slowest request; keep the timeout above it.
timeout = _int("TAPROOM_GUNICORN_TIMEOUT", 60)
graceful_timeout = _int("TAPROOM_GUNICORN_GRACEFUL_TIMEOUT", 30)
keepalive = _int("TAPROOM_GUNICORN_KEEPALIVE", 5)

accesslog = "-"
errorlog = "-"
loglevel = os.getenv("TAPROOM_LOG_LEVEL", "info").lower()

preload_app = False

limit_request_line = _int("TAPROOM_LIMIT_REQUEST_LINE", 8190)
limit_request_fields = _int("TAPROOM_LIMIT_REQUEST_FIELDS", 100)
limit_request_field_size = _int("TAPROOM_LIMIT_REQUEST_FIELD_SIZE", 8190)

forwarded_allow_ips = os.getenv("TAPROOM_FORWARDED_ALLOW_IPS", "127.0.0.1")

raw_env = [
    "UVICORN_PROXY_HEADERS=1",
    "UVICORN_FORWARDED_ALLOW_IPS=" + forwarded_allow_ips,
]
