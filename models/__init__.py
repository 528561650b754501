"""
models/ - Domain Models
=======================
Plain dataclasses for users, credentials, habits, dailies and tasks.
"""
