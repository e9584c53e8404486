from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Literal, Optional

from pydantic import BaseModel

BLANK_URL = 'about:blank'


class LifecycleState(str, Enum):
	UNINITIALIZED = 'uninitialized'
	STARTING = 'starting'
	READY = 'ready'
	NAVIGATING = 'navigating'
	DISCONNECTED = 'disconnected'
	ERROR = 'error'


# states in which the session holds a usable page
ATTACHED_STATES = {LifecycleState.READY, LifecycleState.NAVIGATING}


@dataclass
class SessionState:
	"""The one mutable record describing the browser session.

	Only SessionStateManager writes to it, always under its lock.
	"""

	browser: Optional[Any] = None
	context: Optional[Any] = None
	page: Optional[Any] = None
	current_url: str = BLANK_URL
	lifecycle: LifecycleState = LifecycleState.UNINITIALIZED
	starting: bool = False
	screenshot_ref: Optional[str] = None
	retry_count: int = 0
	last_error: Optional[str] = None


@dataclass(frozen=True)
class SessionSnapshot:
	"""Immutable copy of SessionState handed to readers."""

	browser: Optional[Any]
	context: Optional[Any]
	page: Optional[Any]
	current_url: str
	lifecycle: LifecycleState
	starting: bool
	screenshot_ref: Optional[str]
	retry_count: int
	last_error: Optional[str]

	@property
	def is_ready(self) -> bool:
		return self.browser is not None and self.page is not None and not self.starting


class HealthStatus(BaseModel):
	status: Literal['ready', 'starting']
	url: str
	screenshot: Optional[str] = None
	state: LifecycleState
