import logging

from browser_pilot.config import CONFIG
from browser_pilot.logging_config import setup_logging

if CONFIG.BROWSER_PILOT_SETUP_LOGGING:
	logger = setup_logging()
else:
	logger = logging.getLogger('browser_pilot')


# Keep `import browser_pilot` cheap: playwright and fastapi are only pulled in
# when one of these names is first touched.
_LAZY_EXPORTS = {
	'BrowserProfile': ('browser_pilot.browser.profile', 'BrowserProfile'),
	'BrowserSession': ('browser_pilot.browser.session', 'BrowserSession'),
	'LifecycleState': ('browser_pilot.browser.views', 'LifecycleState'),
	'Controller': ('browser_pilot.controller.service', 'Controller'),
	'GeminiTextProxy': ('browser_pilot.llm.gemini', 'GeminiTextProxy'),
	'create_app': ('browser_pilot.server.app', 'create_app'),
}


def __getattr__(name: str):
	entry = _LAZY_EXPORTS.get(name)
	if not entry:
		raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
	module_path, attr_name = entry
	from importlib import import_module

	attr = getattr(import_module(module_path), attr_name)
	globals()[name] = attr
	return attr


__all__ = list(_LAZY_EXPORTS)
