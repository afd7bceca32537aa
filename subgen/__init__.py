"""subgen — Espresso substitutor source generator."""

__version__ = "0.1.0"
