"""Vocaman vocabulary game backend."""
