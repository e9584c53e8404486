from browser_pilot.llm.gemini import ChatResponse, GeminiTextProxy

__all__ = ['ChatResponse', 'GeminiTextProxy']
