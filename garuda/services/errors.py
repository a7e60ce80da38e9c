class ProviderError(Exception):
    """A completion provider could not start a reply."""

    def __init__(self, message: str, provider: str = ""):
        super().__init__(message)
        self.provider = provider


class AllProvidersFailedError(RuntimeError):
    """Every provider in the fallback chain failed; carries the last error's text."""
