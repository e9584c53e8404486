from pathlib import Path

import pytest
from pydantic import ValidationError

from browser_pilot.browser.profile import (
    CHROME_IGNORE_DEFAULT_ARGS,
    DEFAULT_USER_AGENT,
    SEARCH_INPUT_SELECTOR,
    BrowserProfile,
)
from browser_pilot.config import CONFIG


def test_profile_defaults_follow_config(monkeypatch):
    monkeypatch.setenv('BROWSER_PILOT_HEADLESS', 'false')
    monkeypatch.setenv('BROWSER_PILOT_MAX_LAUNCH_RETRIES', '3')
    monkeypatch.delenv('BROWSER_PILOT_HOME_URL', raising=False)

    profile = BrowserProfile()
    assert profile.headless is False
    assert profile.max_launch_retries == 3
    assert profile.home_url == 'https://www.google.com'
    assert profile.viewport.width == 1200 and profile.viewport.height == 800
    assert profile.search_input_selector == SEARCH_INPUT_SELECTOR


def test_profile_launch_kwargs():
    profile = BrowserProfile(headless=False, args=['--lang=en-US', '--no-sandbox'])
    kwargs = profile.kwargs_for_launch()

    assert kwargs['headless'] is False
    assert kwargs['ignore_default_args'] == CHROME_IGNORE_DEFAULT_ARGS
    assert '--disable-blink-features=AutomationControlled' in kwargs['args']
    assert '--lang=en-US' in kwargs['args']
    assert kwargs['args'].count('--no-sandbox') == 1


def test_profile_context_kwargs_and_clip():
    profile = BrowserProfile(headless=True)
    assert profile.kwargs_for_new_context() == {
        'viewport': {'width': 1200, 'height': 800},
        'user_agent': DEFAULT_USER_AGENT,
        'ignore_https_errors': True,
    }
    assert profile.screenshot_clip() == {'x': 0, 'y': 0, 'width': 1200, 'height': 800}


def test_profile_rejects_unknown_fields_and_negative_retries():
    with pytest.raises(ValidationError):
        BrowserProfile(stealth=True)
    with pytest.raises(ValidationError):
        BrowserProfile(max_launch_retries=-1)


def test_config_reads_environment_lazily(monkeypatch, tmp_path):
    monkeypatch.setenv('BROWSER_PILOT_PORT', '4010')
    monkeypatch.setenv('BROWSER_PILOT_EAGER_LAUNCH', 'no')
    monkeypatch.setenv('BROWSER_PILOT_PUBLIC_DIR', str(tmp_path))
    monkeypatch.setenv('BROWSER_PILOT_CORS_ORIGINS', 'http://a.test, http://b.test')
    assert CONFIG.BROWSER_PILOT_PORT == 4010
    assert CONFIG.BROWSER_PILOT_EAGER_LAUNCH is False
    assert CONFIG.BROWSER_PILOT_PUBLIC_DIR == Path(tmp_path).resolve()
    assert CONFIG.BROWSER_PILOT_CORS_ORIGINS == ['http://a.test', 'http://b.test']

    monkeypatch.setenv('BROWSER_PILOT_EAGER_LAUNCH', '')
    assert CONFIG.BROWSER_PILOT_EAGER_LAUNCH is True


def test_config_gemini_key_fallback(monkeypatch):
    monkeypatch.delenv('GEMINI_API_KEY', raising=False)
    monkeypatch.setenv('GOOGLE_API_KEY', 'google-key')
    assert CONFIG.GEMINI_API_KEY == 'google-key'
    monkeypatch.setenv('GEMINI_API_KEY', 'gemini-key')
    assert CONFIG.GEMINI_API_KEY == 'gemini-key'
