from browser_pilot.controller.router import ParsedPrompt, PromptIntent, parse_prompt
from browser_pilot.controller.service import Controller
from browser_pilot.controller.views import CommandResult

__all__ = ['CommandResult', 'Controller', 'ParsedPrompt', 'PromptIntent', 'parse_prompt']
