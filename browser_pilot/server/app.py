"""
HTTP control surface for the browser session.

Thin layer: every route decodes its body, calls one Controller / session method
and serializes the result. Errors raised below are turned into {"error": ...}
responses by the exception handlers registered here.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from browser_pilot.browser.session import BrowserSession
from browser_pilot.config import CONFIG
from browser_pilot.controller.service import Controller
from browser_pilot.exceptions import BrowserPilotError, BrowserStartingError
from browser_pilot.llm.gemini import GeminiTextProxy
from browser_pilot.server.views import (
    ChatRequest,
    ErrorResponse,
    NavigateRequest,
    PromptRequest,
    SearchRequest,
    parse_body,
)

logger = logging.getLogger(__name__)


async def _read_json(request: Request) -> Any:
    body = await request.body()
    if not body:
        return {}
    try:
        return await request.json()
    except ValueError:
        logger.debug(f'Ignoring malformed JSON body on {request.url.path}')
        return {}


def create_app(
    browser_session: Optional[BrowserSession] = None,
    controller: Optional[Controller] = None,
    text_proxy: Optional[GeminiTextProxy] = None,
    eager_launch: Optional[bool] = None,
    cors_origins: Optional[list[str]] = None,
) -> FastAPI:
    """Build the FastAPI app around one BrowserSession.

    With eager_launch (default from BROWSER_PILOT_EAGER_LAUNCH) the browser is
    started in the background as soon as the app starts; otherwise the first
    command launches it. The browser is always closed on shutdown.
    """
    session = browser_session or BrowserSession()
    controller = controller or Controller(session)
    text_proxy = text_proxy or GeminiTextProxy()
    eager = CONFIG.BROWSER_PILOT_EAGER_LAUNCH if eager_launch is None else eager_launch

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if eager:
            logger.info('🚀 Launching browser at startup')
            session.start_in_background()
        try:
            yield
        finally:
            logger.info('🛑 Shutting down, closing browser')
            await session.stop()

    app = FastAPI(title='browser-pilot', lifespan=lifespan)
    app.state.browser_session = session
    app.state.controller = controller
    app.state.text_proxy = text_proxy

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins if cors_origins is not None else CONFIG.BROWSER_PILOT_CORS_ORIGINS,
        allow_methods=['*'],
        allow_headers=['*'],
    )

    @app.exception_handler(BrowserPilotError)
    async def handle_browser_pilot_error(request: Request, exc: BrowserPilotError) -> JSONResponse:
        error = ErrorResponse(error=exc.message)
        if isinstance(exc, BrowserStartingError):
            error.status = 'starting'
        if exc.status_code >= 500:
            logger.error(f'❌ {request.method} {request.url.path} failed: {type(exc).__name__}: {exc.message}')
        return JSONResponse(status_code=exc.status_code, content=error.model_dump(exclude_none=True))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f'❌ Unexpected error on {request.method} {request.url.path}: {exc}')
        return JSONResponse(status_code=500, content=ErrorResponse(error=str(exc) or type(exc).__name__).model_dump(exclude_none=True))

    @app.get('/health')
    async def health() -> dict:
        status = await session.status()
        return status.model_dump(mode='json')

    @app.api_route('/screenshot', methods=['GET', 'POST'])
    async def screenshot() -> dict:
        result = await controller.screenshot()
        return result.model_dump(exclude_none=True)

    @app.post('/navigate')
    async def navigate(request: Request) -> dict:
        body = parse_body(NavigateRequest, await _read_json(request), 'URL required')
        result = await controller.navigate(body.url)
        return result.model_dump(exclude_none=True)

    @app.post('/search')
    async def search(request: Request) -> dict:
        body = parse_body(SearchRequest, await _read_json(request), 'Search query required')
        result = await controller.search(body.query)
        return result.model_dump(exclude_none=True)

    @app.post('/gemini')
    async def prompt(request: Request) -> dict:
        body = parse_body(PromptRequest, await _read_json(request), 'Prompt is required')
        result = await controller.run_prompt(body.prompt)
        return result.model_dump(exclude_none=True)

    @app.post('/chat')
    async def chat(request: Request) -> dict:
        body = parse_body(ChatRequest, await _read_json(request), 'Message is required')
        reply = await text_proxy.respond(body.message, body.context)
        return reply.model_dump()

    # mounted last so the API routes above take precedence
    app.mount('/', StaticFiles(directory=str(session.public_dir), html=True), name='public')
    return app
