# kitstore/__init__.py
