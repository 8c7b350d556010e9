"""Liveness probe: database and cache reachability."""
from __future__ import annotations

import logging

from django.core.cache import cache
from django.db import connections
from django.http import JsonResponse

logger = logging.getLogger(__name__)


def healthz(request):
    checks = {}
    try:
        with connections['default'].cursor() as c:
            c.execute('SELECT 1')
            row = c.fetchone()
        checks['Database'] = bool(row and row[0] == 1)
    except Exception as e:
        logger.error('Health check: database unavailable: %s', e)
        checks['Database'] = False
    try:
        cache.set('healthz', 1, 5)
        checks['Cache'] = cache.get('healthz') == 1
    except Exception as e:
        logger.error('Health check: cache unavailable: %s', e)
        checks['Cache'] = False
    ok = all(checks.values())
    return JsonResponse({'Status': 'success' if ok else 'failure', **checks}, status=200 if ok else 503)
