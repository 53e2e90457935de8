"""Authentication and authorization.

Learn: One authentication path:
1. Browser → Google consent → authorization code → POST /auth/google/callback
2. Backend exchanges the code with Google, upserts the user, and issues
   a 7-day session token (JWT).
3. Every protected request carries that token as a Bearer credential.

Admin-only routes add a role check on top of the token check.
"""
