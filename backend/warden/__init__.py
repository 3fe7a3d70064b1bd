"""Persistence for an OAuth2/OIDC authorization server.

Clients, API/identity resources, persisted grants and the CORS origin
allow-list, stored through SQLAlchemy.
"""
