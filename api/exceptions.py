"""
Exceptions raised by the document store and secret vault layers.
"""


class StoreError(Exception):
    """A document store call failed. The message is returned to the client as-is."""


class SecretResolutionError(Exception):
    """A named secret could not be fetched from the vault."""

    def __init__(self, name: str, message: str):
        super().__init__(f"Failed to resolve secret '{name}': {message}")
        self.name = name
