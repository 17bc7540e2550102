"""
Gunicorn config: bind to 0.0.0.0 and PORT for Railway/Render.
Requests are short chains of outbound calls, so threads cover the welcome-email side task.
"""
import os

bind = "0.0.0.0:{}".format(os.environ.get("PORT", "8080"))
workers = int(os.environ.get("WEB_CONCURRENCY", 1))
threads = 4
timeout = 60
accesslog = "-"
