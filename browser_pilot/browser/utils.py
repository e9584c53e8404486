from urllib.parse import urlparse


def normalize_url(url: str) -> str:
	"""Strip whitespace and default to https:// when no http(s) scheme is given.

	Idempotent: normalize_url(normalize_url(x)) == normalize_url(x).
	"""
	url = url.strip()
	if url.lower().startswith(('http://', 'https://')):
		return url
	return f'https://{url}'


def same_site(url: str, other: str) -> bool:
	"""True if both URLs point at the same registrable host, ignoring a leading www."""
	host = (urlparse(url).hostname or '').lower().removeprefix('www.')
	other_host = (urlparse(other).hostname or '').lower().removeprefix('www.')
	return bool(host) and host == other_host


def _log_pretty_url(s: str, max_len: int | None = 22) -> str:
	"""Truncate/pretty-print a URL for logs."""
	s = s.replace('https://', '').replace('http://', '').replace('www.', '')
	if max_len is not None and len(s) > max_len:
		return s[:max_len] + '…'
	return s
