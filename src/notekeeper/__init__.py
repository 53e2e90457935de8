"""Notekeeper — personal notes API with Google sign-in.

Users sign in through Google, receive a signed session token, and manage
their own notes. Admins manage user accounts.
"""

__version__ = "0.1.0"
