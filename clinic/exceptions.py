"""
Unified API error envelope.

Every error leaves the API as ``{"error": <title>, "message": <detail>}``
so the frontend can show ``message`` without inspecting status codes.
"""
import logging

from rest_framework import status
from rest_framework.exceptions import APIException, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)

ERROR_TITLES = {
    400: 'Validation Error',
    401: 'Access Denied',
    403: 'Access Denied',
    404: 'Not Found',
}


class Conflict(APIException):
    """A request that clashes with existing data (e.g. double booking)."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Conflicting record'
    default_code = 'conflict'
    title = 'Conflict Error'


def _first_message(detail):
    """Flatten DRF's nested validation detail to one readable sentence."""
    if isinstance(detail, dict):
        if 'detail' in detail:
            return _first_message(detail['detail'])
        for field, value in detail.items():
            msg = _first_message(value)
            if field == 'non_field_errors':
                return msg
            return f'{field}: {msg}'
        return ''
    if isinstance(detail, (list, tuple)):
        return _first_message(detail[0]) if detail else ''
    return str(detail)


def api_exception_handler(exc, context):
    resp = drf_exception_handler(exc, context)
    if resp is None:
        view = context.get('view')
        logger.exception('Unhandled error in %s', view.__class__.__name__ if view else 'unknown view')
        return Response(
            {'error': 'Internal Server Error', 'message': 'Something went wrong'},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
    title = getattr(exc, 'title', None) or ERROR_TITLES.get(resp.status_code, 'Request Error')
    payload = {'error': title, 'message': _first_message(resp.data)}
    if isinstance(exc, ValidationError) and isinstance(resp.data, dict):
        payload['fields'] = resp.data
    resp.data = payload
    return resp
