"""
Authentication layer.

- bcrypt password hashing
- pydantic input validation
- AuthService: signup/login/logout state transitions and the role gate
"""
