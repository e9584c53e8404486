class BrowserPilotError(Exception):
	"""Base class for errors surfaced to HTTP callers as {"error": message}."""

	status_code: int = 500

	def __init__(self, message: str):
		super().__init__(message)
		self.message = message


class LaunchError(BrowserPilotError):
	"""The browser could not be started (after exhausting launch retries)."""


class NavigationError(BrowserPilotError):
	"""An explicit navigation or search submission failed to load in time."""


class ElementNotFoundError(BrowserPilotError):
	"""An expected page element did not appear within its bounded wait."""


class MissingFieldError(BrowserPilotError):
	"""A required request field was absent or blank."""

	status_code = 400


class ScreenshotError(BrowserPilotError):
	"""Raised only where a screenshot is the requested command itself."""


class BrowserDisconnectedError(BrowserPilotError):
	"""The browser went away while a command was using it."""


class BrowserStartingError(BrowserPilotError):
	"""A launch is already in flight; the caller should poll and retry."""

	status_code = 503


class LockTimeoutError(BrowserPilotError):
	"""Timed out waiting for the command lease."""

	status_code = 503


class ChatProxyError(BrowserPilotError):
	"""The upstream text generator failed or returned nothing."""

	status_code = 502
