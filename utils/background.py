"""
Detached tasks: work started after the response is decided and never joined.
Failures are only visible in the logs.
"""
import logging
import threading

logger = logging.getLogger(__name__)


def run_detached(target, *args, name=None, **kwargs):
    """Start target(*args, **kwargs) on a daemon thread and return the thread."""

    def background_task():
        try:
            target(*args, **kwargs)
        except Exception as e:
            logger.warning(f"Detached task {name or target.__name__} failed: {e}", exc_info=True)

    thread = threading.Thread(target=background_task, name=name, daemon=True)
    thread.start()
    return thread
