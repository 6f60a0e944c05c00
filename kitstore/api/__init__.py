# kitstore/api/__init__.py
