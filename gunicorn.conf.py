# Gunicorn configuration for the teleconsult access service
import os
import sys

# Add src directory to Python path
current_dir = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, os.path.join(current_dir, 'src'))

wsgi_app = "teleconsult.app:app"
bind = f"{os.environ.get('HOST', '0.0.0.0')}:{os.environ.get('PORT', 8000)}"

# OTP and access sessions live in process memory. A second worker would not
# see tokens minted by the first, so this stays at one.
workers = 1
worker_class = "uvicorn.workers.UvicornWorker"

# The CRM lookup and SMS dispatch can each take several seconds during precheck
timeout = int(os.environ.get("GUNICORN_TIMEOUT", 60))
graceful_timeout = 30
keepalive = 75

# Decrypt rate limiting keys on X-Forwarded-For; trust the fronting proxy for it
forwarded_allow_ips = os.environ.get("FORWARDED_ALLOW_IPS", "*")

accesslog = "-"
errorlog = "-"
loglevel = os.environ.get("LOG_LEVEL", "info").lower()

proc_name = "teleconsult-access"
preload_app = True
