def is_http_error_recoverable(status: int) -> bool:
    if 400 <= status < 500:
        return status in (400, 408, 429)
    return True


class UnexpectedStatusError(Exception):
    def __init__(self, status: int):
        super().__init__("Unexpected status code: %d" % status)
        self.status = status

    @property
    def recoverable(self) -> bool:
        return is_http_error_recoverable(self.status)
