# testgenium/core/__init__.py
