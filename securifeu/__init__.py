"""Sécurifeu : suivi de conformité des extincteurs et alarmes des clients."""

__version__ = "1.0.0"
