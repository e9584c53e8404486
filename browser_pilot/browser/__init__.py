from typing import TYPE_CHECKING

# Type stubs for lazy imports
if TYPE_CHECKING:
	from .profile import BrowserProfile
	from .screenshot import ScreenshotPipeline
	from .session import BrowserSession
	from .state import SessionStateManager
	from .views import HealthStatus, LifecycleState, SessionSnapshot

# Lazy imports mapping for the browser components
_LAZY_IMPORTS = {
	'BrowserProfile': ('.profile', 'BrowserProfile'),
	'BrowserSession': ('.session', 'BrowserSession'),
	'HealthStatus': ('.views', 'HealthStatus'),
	'LifecycleState': ('.views', 'LifecycleState'),
	'ScreenshotPipeline': ('.screenshot', 'ScreenshotPipeline'),
	'SessionSnapshot': ('.views', 'SessionSnapshot'),
	'SessionStateManager': ('.state', 'SessionStateManager'),
}


def __getattr__(name: str):
	"""Lazy import mechanism for browser components."""
	if name in _LAZY_IMPORTS:
		module_path, attr_name = _LAZY_IMPORTS[name]
		full_module_path = f'browser_pilot.browser{module_path}'
		try:
			from importlib import import_module

			module = import_module(full_module_path)
			attr = getattr(module, attr_name)
			globals()[name] = attr
			return attr
		except ImportError as e:
			raise ImportError(f'Failed to import {name} from {full_module_path}: {e}') from e

	raise AttributeError(f"module '{__name__}' has no attribute '{name}'")


__all__ = [
	'BrowserProfile',
	'BrowserSession',
	'HealthStatus',
	'LifecycleState',
	'ScreenshotPipeline',
	'SessionSnapshot',
	'SessionStateManager',
]
