"""MemberAuth: session-based signup/login with an admin role."""

__version__ = "1.0.0"
