# api/middleware/__init__.py
