# apps/core/__init__.py

"""
Core - board hierarchy engine of Boardflow

Contents:
- Models: Board, Column, Task
- Storage gateway over the three collections
- Hierarchy service (consistency rules, cascading deletes)
- Aggregation of the nested board view
- Calendar event publishing
"""
