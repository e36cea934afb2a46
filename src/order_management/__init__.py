"""Order management backend: Order aggregate, relational repository, message bus."""

__version__ = "0.1.0"
