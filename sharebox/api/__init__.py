"""
API Layer

REST endpoints, admin authentication and websocket events.
"""
