class ReportError(Exception):
    """Base class for failures that abort a report run."""


class BodyTypeError(ReportError):
    def __init__(self, detail: str = None):
        super().__init__(f"Failed to get body type: {detail}")
        self.detail = detail


class BodyRetrievalError(ReportError):
    def __init__(self, detail: str = None):
        super().__init__(f"Failed to get body: {detail}")
        self.detail = detail


class HostTimeoutError(TimeoutError):
    """
    A mail host call did not complete before its deadline. Not a ReportError:
    callers decide whether the wrapped call was fatal.
    """

    def __init__(self, operation: str, timeout: float):
        super().__init__(f"{operation} timed out after {timeout}s")
        self.operation = operation
        self.timeout = timeout
