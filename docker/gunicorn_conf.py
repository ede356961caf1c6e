import os

# State lives in the process (one controller per app), so run a single worker.
wsgi_app = "recipe_assistant.main:create_app()"
bind = f"0.0.0.0:{os.getenv('PORT','8000')}"
workers = 1
worker_class = "uvicorn.workers.UvicornWorker"
timeout = int(os.getenv("TIMEOUT", "120"))
keepalive = 5
graceful_timeout = 30
accesslog = "-"
errorlog = "-"
loglevel = os.getenv("LOG_LEVEL", "info").lower()
