# apps/__init__.py

"""
Boardflow - Django applications

This package holds every application of the service:
- core: models, storage gateway, hierarchy service
- board: JSON API, identity middleware and the calendar event WebSocket
"""

__version__ = '0.1.0'
__author__ = 'Boardflow team'
