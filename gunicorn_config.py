import os

# Server Socket
bind = os.environ.get("GUNICORN_BIND", "127.0.0.1:8000")  # NGINX proxies requests

# Worker Settings
# Scan-station debounce slots live per worker process; the attendance
# unique index still decides duplicates across workers.
workers = int(os.environ.get("GUNICORN_WORKERS", 3))
threads = 4
worker_class = "gthread"

# Security & Performance
timeout = 60
graceful_timeout = 30
keepalive = 5
max_requests = 1000  # Restart workers after processing 1000 requests
max_requests_jitter = 50  # Staggered restarts to avoid downtime

# Logging
accesslog = os.environ.get("GUNICORN_ACCESS_LOG", "-")
errorlog = os.environ.get("GUNICORN_ERROR_LOG", "-")
loglevel = "info"

# Process Name
proc_name = "createverse_gunicorn"
