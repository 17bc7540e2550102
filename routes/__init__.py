"""
Routes package: the Flask adapter around the services
"""
from routes.auth import auth_bp
from routes.welcome import welcome_bp

__all__ = [
    'auth_bp',
    'welcome_bp',
]
