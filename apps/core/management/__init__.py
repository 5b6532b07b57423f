# apps/core/management/__init__.py
