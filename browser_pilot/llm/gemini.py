"""
Opaque text-response proxy backed by Google Gemini.

The browser controller never looks at what comes back; this only turns
{message, context} into {response, timestamp} for the chat front-end.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from pydantic import BaseModel

from browser_pilot.config import CONFIG
from browser_pilot.exceptions import BrowserPilotError, ChatProxyError, MissingFieldError
from browser_pilot.timing import now_utc_iso

logger = logging.getLogger(__name__)

ASSISTANT_INSTRUCTIONS = """You are an assistant that helps people browse the web and get tasks done.
For the request below, explain briefly:
1. what the person wants
2. which action it needs (browse, search, order, book, ...)
3. any details or preferences they gave
4. which site to open or what to search for, if browsing is needed
Answer conversationally and say which browsing action you will take."""


class ChatResponse(BaseModel):
	response: str
	timestamp: str


def build_prompt(message: str, context: Optional[str] = None) -> str:
	parts = [ASSISTANT_INSTRUCTIONS, '', f'Request: {message}']
	if context:
		parts.append(f'Context: {context}')
	return '\n'.join(parts)


class GeminiTextProxy:
	"""Forwards a chat message to Gemini and returns its text reply."""

	def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None, client: Optional[Any] = None):
		self.api_key = api_key if api_key is not None else CONFIG.GEMINI_API_KEY
		self.model = model or CONFIG.BROWSER_PILOT_GEMINI_MODEL
		self._client = client

	@property
	def client(self) -> Any:
		if self._client is None:
			if not self.api_key:
				raise BrowserPilotError('Gemini API key not configured')
			from google import genai

			self._client = genai.Client(api_key=self.api_key)
		return self._client

	async def respond(self, message: Optional[str], context: Optional[str] = None) -> ChatResponse:
		if message is None or not str(message).strip():
			raise MissingFieldError('Message is required')

		prompt = build_prompt(message.strip(), context)
		try:
			reply = await self.client.aio.models.generate_content(model=self.model, contents=prompt)
		except BrowserPilotError:
			raise
		except Exception as e:
			logger.error(f'❌ Gemini request failed: {type(e).__name__}: {e}')
			raise ChatProxyError('Failed to get response from Gemini') from e

		text = getattr(reply, 'text', None)
		if not text:
			raise ChatProxyError('No response from Gemini')
		return ChatResponse(response=text, timestamp=now_utc_iso())
