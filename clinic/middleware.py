import logging
import time

logger = logging.getLogger(__name__)


class RequestLogMiddleware:
    """Log one line per API request: method, path, status and duration."""
    PREFIXES = ('/api/',)

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        path = request.path or ''
        if not path.startswith(self.PREFIXES):
            return self.get_response(request)
        started = time.monotonic()
        response = self.get_response(request)
        elapsed_ms = (time.monotonic() - started) * 1000
        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        logger.log(level, '%s %s -> %s (%.1f ms)', request.method, path, response.status_code, elapsed_ms)
        return response
