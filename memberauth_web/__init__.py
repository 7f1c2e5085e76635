"""FastAPI web layer for MemberAuth."""
