"""
Bearer tokens.

Two codecs are available, picked by the ``AUTH_TOKEN_SCHEME`` config key:

``legacy``
    ``token_<userId>_<issueEpochMillis>``. Unsigned and never expires; the
    embedded id is trusted as long as it names a registered user. Kept so
    existing clients keep working.

``jwt``
    A signed access token from Flask-JWT-Extended, bounded by
    ``JWT_ACCESS_TOKEN_EXPIRES``.
"""
from functools import wraps
import time
from flask import current_app, g, request
from flask_jwt_extended import create_access_token, decode_token
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError
from errors import InvalidToken, Unauthenticated
from repositories import users


class LegacyTokenCodec:
    prefix = 'token'
    separator = '_'

    def issue(self, user):
        issued_at = int(time.time() * 1000)
        return self.separator.join([self.prefix, user.id, str(issued_at)])

    def decode(self, token):
        if not token or not token.startswith(self.prefix + self.separator):
            raise InvalidToken('Bad token prefix')

        parts = token.split(self.separator)
        if len(parts) != 3:
            raise InvalidToken('Bad token shape')
        return parts[1]


class JwtTokenCodec:

    def issue(self, user):
        return create_access_token(identity=user.id, additional_claims={'role': user.role})

    def decode(self, token):
        try:
            claims = decode_token(token)
        except (PyJWTError, JWTExtendedException) as e:
            raise InvalidToken(str(e))
        return claims[current_app.config['JWT_IDENTITY_CLAIM']]


CODECS = {
    'legacy': LegacyTokenCodec,
    'jwt': JwtTokenCodec,
}


def get_token_codec():
    scheme = current_app.config.get('AUTH_TOKEN_SCHEME', 'legacy')
    try:
        return CODECS[scheme]()
    except KeyError:
        raise RuntimeError(f'Unknown AUTH_TOKEN_SCHEME: {scheme}')


def authenticate():
    """Resolves the Bearer token on the current request to a User."""
    header = request.headers.get('Authorization', '')
    if not header.startswith('Bearer '):
        current_app.logger.info('Rejected request to %s: no bearer token', request.path)
        raise Unauthenticated()

    try:
        user_id = get_token_codec().decode(header[len('Bearer '):])
    except InvalidToken as e:
        current_app.logger.info('Rejected request to %s: %s', request.path, e)
        raise Unauthenticated()

    user = users.find_by_id(user_id)
    if user is None:
        current_app.logger.info('Rejected request to %s: unknown user in token', request.path)
        raise Unauthenticated()
    return user


def auth_required(fn):
    """Route decorator: authenticates and stores the caller on ``g.user``."""
    @wraps(fn)
    def wrapper(*args, **kwargs):
        g.user = authenticate()
        return fn(*args, **kwargs)
    return wrapper
