"""Browser package"""
from .driver import BaseDriver
from .controller import BrowserController, BrowserLauncher
from .auth import BaseAuthenticator, FormLoginAuthenticator
from .artifact_capture import ArtifactCapture

__all__ = [
    "BaseDriver",
    "BrowserController",
    "BrowserLauncher",
    "BaseAuthenticator",
    "FormLoginAuthenticator",
    "ArtifactCapture",
]
