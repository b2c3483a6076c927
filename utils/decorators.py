import logging
from functools import wraps

import jwt
from flask import request, g

from utils.auth_utils import decode_token
from utils.responses import fail

logger = logging.getLogger(__name__)


def token_required(f):
    """Stateless bearer check: missing token -> 401, bad or expired token -> 403."""
    @wraps(f)
    def decorated(*args, **kwargs):
        token = None
        auth_header = request.headers.get('Authorization', '')

        if auth_header.startswith('Bearer '):
            token = auth_header.split(' ', 1)[1].strip()

        if not token or token.lower() in ('null', 'undefined'):
            return fail('Unauthorized', 401)

        try:
            data = decode_token(token)
        except jwt.InvalidTokenError as e:
            logger.info("Rejected bearer token on %s: %s", request.path, e)
            return fail('Forbidden', 403)

        g.user_id = data['user_id']
        g.email = data['email']
        return f(*args, **kwargs)
    return decorated
