# focusflow/dashboard/__init__.py
