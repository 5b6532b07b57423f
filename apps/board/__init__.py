# apps/board/__init__.py

"""
Board - transport layer of Boardflow

- JSON endpoints over the hierarchy service
- X-User-Id identity middleware
- WebSocket stream of calendar events
"""
