import locale
import logging
import sys

from browser_pilot.config import CONFIG
from browser_pilot.timing import now_utc_iso, process_start_utc_iso, uptime_seconds


class SafeStreamHandler(logging.StreamHandler):
	"""A logging handler that gracefully handles consoles that can't encode emojis.

	It retries writes with 'replace' on UnicodeEncodeError to avoid crashing on cp1252 consoles.
	"""

	def emit(self, record):  # type: ignore[override]
		try:
			msg = self.format(record)
			stream = self.stream
			try:
				stream.write(msg + self.terminator)
			except UnicodeEncodeError:
				enc = getattr(stream, 'encoding', None) or locale.getpreferredencoding(False) or 'utf-8'
				sanitized = msg.encode(enc, errors='replace').decode(enc, errors='replace')
				stream.write(sanitized + self.terminator)
			self.flush()
		except Exception:
			# never let logging crash a request
			self.handleError(record)


class BrowserPilotFormatter(logging.Formatter):
	def format(self, record):
		record.utc = now_utc_iso()
		record.uptime = f'{uptime_seconds():.3f}s'
		return super().format(record)


_LEVELS = {
	'debug': logging.DEBUG,
	'info': logging.INFO,
	'warning': logging.WARNING,
	'error': logging.ERROR,
}

_NOISY_LOGGERS = {
	'playwright': logging.ERROR,
	'asyncio': logging.ERROR,
	'httpx': logging.WARNING,
	'httpcore': logging.WARNING,
	'google_genai': logging.WARNING,
	'uvicorn.access': logging.WARNING,
}


def setup_logging(stream=None, log_level=None, force_setup=False):
	"""Setup logging configuration for browser_pilot.

	Args:
		stream: Output stream for logs (default: sys.stdout).
		log_level: Override log level (default: uses CONFIG.BROWSER_PILOT_LOGGING_LEVEL)
		force_setup: Force reconfiguration even if handlers already exist
	"""
	log_type = (log_level or CONFIG.BROWSER_PILOT_LOGGING_LEVEL).lower()
	level = _LEVELS.get(log_type, logging.INFO)

	logger = logging.getLogger('browser_pilot')
	if logger.handlers and not force_setup:
		return logger

	console = SafeStreamHandler(stream or sys.stdout)
	console.setFormatter(BrowserPilotFormatter('%(levelname)-8s [%(name)s] %(utc)s (+%(uptime)s) %(message)s'))

	logger.handlers = [console]
	logger.propagate = False
	logger.setLevel(level)

	for logger_name, noisy_level in _NOISY_LOGGERS.items():
		logging.getLogger(logger_name).setLevel(noisy_level)

	logger.debug(f'Logging initialized at {now_utc_iso()} (process_start={process_start_utc_iso()})')
	return logger
