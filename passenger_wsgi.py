"""
Passenger WSGI entry point for the account verification service
(/register, /verify, /send-verification, /send-welcome, /welcome).
Passenger imports 'application' from here; gunicorn deployments use app:app instead.
"""
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from app import application  # noqa: E402,F401
