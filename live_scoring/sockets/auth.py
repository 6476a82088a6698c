# live_scoring/sockets/auth.py

"""
Socket.IO Authentication Handlers

Bearer-token verification for Socket.IO connections. Connections without a
valid token are refused; the verified identity is kept in the per-connection
session for every later event.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

import jwt as pyjwt
from flask import current_app, request, session
from flask_jwt_extended import decode_token
from flask_jwt_extended.exceptions import JWTExtendedException
from flask_socketio import emit

from live_scoring.core import socketio

logger = logging.getLogger(__name__)


class TokenVerificationError(Exception):
    """Raised when a bearer token is missing, malformed, expired or unsigned."""
    pass


def extract_token(auth=None) -> Optional[str]:
    """
    Find the bearer token for a connection.

    Looks in, in order:
    1. the Socket.IO auth object (``auth.token``)
    2. the ``Authorization: Bearer`` header
    3. the ``?token=`` query parameter
    """
    if isinstance(auth, dict) and auth.get('token'):
        logger.debug("🔌 [AUTH] Token found in auth object")
        return auth['token']

    auth_header = request.headers.get('Authorization')
    if auth_header and auth_header.startswith('Bearer '):
        logger.debug("🔌 [AUTH] Token found in Authorization header")
        return auth_header[7:]

    token = request.args.get('token')
    if token:
        logger.debug("🔌 [AUTH] Token found in query parameter")
        return token
    return None


def verify_token(token: str) -> str:
    """
    Verify ``token`` and return the identity it carries as a string.

    Tokens issued by this service are checked with Flask-JWT-Extended. Tokens
    minted by other services with the same secret carry the identity in
    ``id`` or ``userId`` instead of ``sub``; those are verified with PyJWT.
    """
    if not token:
        raise TokenVerificationError("No authentication token provided")

    try:
        decoded = decode_token(token)
        identity = decoded.get('sub') or decoded.get('identity')
    except (JWTExtendedException, pyjwt.PyJWTError) as jwt_ext_error:
        logger.debug(f"🔌 [AUTH] Flask-JWT-Extended rejected token: {jwt_ext_error}")
        try:
            decoded = pyjwt.decode(
                token,
                current_app.config.get('JWT_SECRET_KEY'),
                algorithms=['HS256']
            )
        except pyjwt.PyJWTError as e:
            raise TokenVerificationError(f"Invalid JWT token: {e}")
        identity = decoded.get('sub') or decoded.get('id') or decoded.get('userId')

    if not identity:
        raise TokenVerificationError("JWT token missing user identifier")
    return str(identity)


@socketio.on('connect', namespace='/')
def handle_connect(auth=None):
    """Authenticate the connection; refuse it when the token does not verify."""
    logger.info(f"🔌 [CONNECT] Client connecting (sid: {request.sid})")
    try:
        user_id = verify_token(extract_token(auth))
    except TokenVerificationError as e:
        logger.warning(f"🔌 [CONNECT] Authentication failed: {e}")
        raise ConnectionRefusedError('unauthorized')

    session['user_id'] = user_id
    session['authenticated'] = True

    emit('connected', {
        'message': 'Connected to Socket.IO',
        'user_id': user_id,
        'timestamp': datetime.now(timezone.utc).isoformat(),
        'namespace': '/'
    })
    logger.info(f"🔌 [CONNECT] Authenticated user {user_id} (sid: {request.sid})")


@socketio.on('disconnect', namespace='/')
def handle_disconnect(reason=None):
    """Socket.IO drops the sid from every room itself; nothing is persisted."""
    reason_str = f" (reason: {reason})" if reason else ""
    logger.info(f"🔌 Client disconnected (sid: {request.sid}, user: {session.get('user_id')}){reason_str}")
