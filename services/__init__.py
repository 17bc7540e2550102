"""
Services package: the Flask-free core. Each service gets ServiceSettings and its
collaborators through the constructor.
"""
from services.registration import RegistrationService, RegistrationResult
from services.verification import VerificationService, VerificationRedirect
from services.welcome import WelcomeService, WelcomeResult

__all__ = [
    'RegistrationService',
    'RegistrationResult',
    'VerificationService',
    'VerificationRedirect',
    'WelcomeService',
    'WelcomeResult',
]
