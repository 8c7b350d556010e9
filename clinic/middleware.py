import logging
import time

logger = logging.getLogger(__name__)


class RequestTimingMiddleware:
    """Log method, path, status and duration of every request."""
    SKIP_PREFIXES = ('/metrics', '/static/')

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        path = request.path or ''
        if any(path.startswith(p) for p in self.SKIP_PREFIXES):
            return self.get_response(request)
        started = time.monotonic()
        response = self.get_response(request)
        elapsed_ms = (time.monotonic() - started) * 1000
        response['X-Response-Time'] = f"{elapsed_ms:.1f}ms"
        logger.info('%s %s %s %.1fms', request.method, path, response.status_code, elapsed_ms)
        return response
