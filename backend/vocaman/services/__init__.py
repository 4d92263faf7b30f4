# backend/vocaman/services/__init__.py
