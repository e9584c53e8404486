"""Environment-driven configuration for browser_pilot.

Values are read lazily on every attribute access so that tests (and a running
process) can change os.environ and see the new value without reloading modules.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
	value = os.getenv(name)
	if value is None or value.strip() == '':
		return default
	return value.strip().lower() in ('1', 'true', 'yes', 'on')


def _env_int(name: str, default: int) -> int:
	value = os.getenv(name)
	if value is None or value.strip() == '':
		return default
	return int(value)


def _env_float(name: str, default: float) -> float:
	value = os.getenv(name)
	if value is None or value.strip() == '':
		return default
	return float(value)


class Config:
	"""Lazy view over the BROWSER_PILOT_* environment variables."""

	@property
	def BROWSER_PILOT_LOGGING_LEVEL(self) -> str:
		return os.getenv('BROWSER_PILOT_LOGGING_LEVEL', 'info').lower()

	@property
	def BROWSER_PILOT_SETUP_LOGGING(self) -> bool:
		return _env_bool('BROWSER_PILOT_SETUP_LOGGING', True)

	@property
	def BROWSER_PILOT_HOST(self) -> str:
		return os.getenv('BROWSER_PILOT_HOST', '127.0.0.1')

	@property
	def BROWSER_PILOT_PORT(self) -> int:
		return _env_int('BROWSER_PILOT_PORT', 3001)

	@property
	def BROWSER_PILOT_PUBLIC_DIR(self) -> Path:
		return Path(os.getenv('BROWSER_PILOT_PUBLIC_DIR', 'public')).expanduser().resolve()

	@property
	def BROWSER_PILOT_HOME_URL(self) -> str:
		return os.getenv('BROWSER_PILOT_HOME_URL', 'https://www.google.com')

	@property
	def BROWSER_PILOT_HEADLESS(self) -> bool:
		return _env_bool('BROWSER_PILOT_HEADLESS', False)

	@property
	def BROWSER_PILOT_EAGER_LAUNCH(self) -> bool:
		return _env_bool('BROWSER_PILOT_EAGER_LAUNCH', True)

	@property
	def BROWSER_PILOT_AUTO_RECOVER(self) -> bool:
		return _env_bool('BROWSER_PILOT_AUTO_RECOVER', True)

	@property
	def BROWSER_PILOT_MAX_LAUNCH_RETRIES(self) -> int:
		return _env_int('BROWSER_PILOT_MAX_LAUNCH_RETRIES', 3)

	@property
	def BROWSER_PILOT_LAUNCH_RETRY_DELAY(self) -> float:
		return _env_float('BROWSER_PILOT_LAUNCH_RETRY_DELAY', 1.0)

	@property
	def BROWSER_PILOT_NAVIGATION_TIMEOUT_MS(self) -> int:
		return _env_int('BROWSER_PILOT_NAVIGATION_TIMEOUT_MS', 30_000)

	@property
	def BROWSER_PILOT_ELEMENT_TIMEOUT_MS(self) -> int:
		return _env_int('BROWSER_PILOT_ELEMENT_TIMEOUT_MS', 10_000)

	@property
	def BROWSER_PILOT_COMMAND_LOCK_TIMEOUT(self) -> float:
		return _env_float('BROWSER_PILOT_COMMAND_LOCK_TIMEOUT', 120.0)

	@property
	def BROWSER_PILOT_CORS_ORIGINS(self) -> list[str]:
		raw = os.getenv('BROWSER_PILOT_CORS_ORIGINS', '*')
		return [origin.strip() for origin in raw.split(',') if origin.strip()]

	@property
	def GEMINI_API_KEY(self) -> str | None:
		return os.getenv('GEMINI_API_KEY') or os.getenv('GOOGLE_API_KEY') or None

	@property
	def BROWSER_PILOT_GEMINI_MODEL(self) -> str:
		return os.getenv('BROWSER_PILOT_GEMINI_MODEL', 'gemini-2.0-flash')


CONFIG = Config()
