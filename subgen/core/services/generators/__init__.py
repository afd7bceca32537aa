"""
Generators — produce Java source text from substitution requests.

Each generator module exposes a ``render_*()`` function that returns
a ``GeneratedUnit``.
"""
