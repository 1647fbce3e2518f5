"""
Error taxonomy for the conformance engine.

Assertion failures are never exceptions: validators report them as failed
ValidationResults. Exceptions are reserved for configuration mistakes, which
must surface before any scenario runs, and for driver or auth collaborators
that cannot do their job at all.
"""


class ConformanceError(Exception):
    """Base class for all engine errors."""


class ConfigurationError(ConformanceError):
    """The matrix, registries or settings are inconsistent."""


class UnknownDevice(ConfigurationError):
    """A device id is not present in the registry."""

    def __init__(self, device_id: str):
        super().__init__(f"Unknown device: {device_id!r}")
        self.device_id = device_id


class UnknownRole(ConfigurationError):
    """A role is not present in the registry."""

    def __init__(self, role: str):
        super().__init__(f"Unknown role: {role!r}")
        self.role = role


class DriverError(ConformanceError):
    """The browser driver could not observe the page."""


class DriverTimeout(DriverError):
    """A driver wait expired before its condition held."""

    def __init__(self, what: str, timeout_ms: int):
        super().__init__(f"Timed out after {timeout_ms}ms waiting for {what}")
        self.what = what
        self.timeout_ms = timeout_ms


class ElementNotFound(DriverError):
    """No element matched any of the given selectors."""

    def __init__(self, selectors):
        if isinstance(selectors, str):
            selectors = [selectors]
        super().__init__(f"No element matched: {', '.join(selectors)}")
        self.selectors = list(selectors)


class DriverUnavailable(DriverError):
    """The browser, context or page is gone."""


class AuthError(ConformanceError):
    """The auth collaborator could not establish a session."""

    def __init__(self, role: str, reason: str):
        super().__init__(f"Authentication as {role} failed: {reason}")
        self.role = role
        self.reason = reason
