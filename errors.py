class UpstreamError(Exception):
    """A third-party API call failed. `status` is the HTTP status to surface."""

    def __init__(self, status, message):
        super().__init__(message)
        self.status = status
        self.message = message
