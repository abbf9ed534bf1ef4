"""
Namespace module for derived schemas.

The registry publishes every model it creates here, so forward references
between models resolve by name. Nothing is defined statically.
"""
