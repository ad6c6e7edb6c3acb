"""Custom exceptions for Plugdex."""


class DescriptorError(Exception):
    """Raised when a plugin descriptor cannot be turned into a PluginConfig."""

    def __init__(self, message: str, path: str | None = None):
        self.path = path
        if path:
            message = f"{path}: {message}"
        super().__init__(message)
