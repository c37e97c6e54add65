"""Exceptions raised on caller contract violations."""


class InvalidInput(ValueError):
    """Records or assignment mappings are not of the expected shape."""
