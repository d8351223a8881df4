# smartscore/errors.py


class DataLoadError(Exception):
    """
    A static data file could not be fetched (network error, non-success
    status, missing file) or is not valid JSON.

    Pages render str(err) as the generic load-error state.
    """

    def __init__(self, path: str, status: int | None = None, message: str = ""):
        self.path = path
        self.status = status
        self.message = message
        super().__init__(self._text())

    def _text(self) -> str:
        if self.status is not None:
            return f"{self.path} ({self.status})"
        if self.message:
            return f"{self.path}: {self.message}"
        return self.path
