import argparse
import logging

from browser_pilot.config import CONFIG


def build_parser() -> argparse.ArgumentParser:
	parser = argparse.ArgumentParser(prog='browser_pilot', description='Drive one visible browser over HTTP.')
	parser.add_argument('--host', default=CONFIG.BROWSER_PILOT_HOST, help='interface to bind (default: %(default)s)')
	parser.add_argument('--port', type=int, default=CONFIG.BROWSER_PILOT_PORT, help='port to listen on (default: %(default)s)')
	parser.add_argument('--headless', action='store_true', default=None, help='run chromium without a window')
	parser.add_argument('--no-eager', dest='eager', action='store_false', default=None, help='launch the browser on first command')
	parser.add_argument('--log-level', choices=['debug', 'info', 'warning', 'error'], default=None)
	return parser


def main(argv: list[str] | None = None) -> None:
	args = build_parser().parse_args(argv)

	import uvicorn

	from browser_pilot.browser.profile import BrowserProfile
	from browser_pilot.browser.session import BrowserSession
	from browser_pilot.logging_config import setup_logging
	from browser_pilot.server.app import create_app

	if args.log_level:
		setup_logging(log_level=args.log_level, force_setup=True)
	logger = logging.getLogger('browser_pilot')

	profile_overrides = {}
	if args.headless is not None:
		profile_overrides['headless'] = args.headless
	session = BrowserSession(browser_profile=BrowserProfile(**profile_overrides))

	app = create_app(browser_session=session, eager_launch=args.eager)
	logger.info(f'🚀 browser_pilot listening on http://{args.host}:{args.port}')
	uvicorn.run(app, host=args.host, port=args.port, log_level=args.log_level or CONFIG.BROWSER_PILOT_LOGGING_LEVEL)


if __name__ == '__main__':
	main()
