# Authentication is handled in-process: bcrypt password hashes live on the
# `users` table (see app/modules/users/models.py) and sessions are stateless
# HS256 JWTs signed with JWT_SECRET.

"""
Session token claims:
- id: uuid of the user (string)
- iat: issued-at (unix seconds)
- exp: expiry (unix seconds), iat + JWT_EXPIRES_DAYS (default 7 days)

There is no revocation list: a token stays valid until it expires or the
signing secret changes. The user's role is read from the `users` table on
every request, not from the token.
"""
