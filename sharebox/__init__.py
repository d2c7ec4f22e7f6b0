"""
ShareBox - password-protected, expiring file sharing with ephemeral text rooms.
"""

__version__ = "1.0.0"
