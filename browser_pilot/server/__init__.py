from browser_pilot.server.app import create_app

__all__ = ['create_app']
