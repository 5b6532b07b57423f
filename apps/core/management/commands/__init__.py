# apps/core/management/commands/__init__.py
