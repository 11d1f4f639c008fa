class RetryExhaustedError(Exception):
    """Raised when every attempt allowed by a retry policy has failed."""

    def __init__(self, attempts: int, last_error: BaseException) -> None:
        super().__init__(f"Gave up after {attempts} attempts: {last_error}")
        self.attempts = attempts
        self.last_error = last_error
