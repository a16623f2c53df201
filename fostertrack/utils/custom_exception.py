class CustomMessageException(Exception):
    def __init__(self, messages: str | list[str], status_code: int = 400) -> None:
        if isinstance(messages, str):
            messages = [messages]

        super().__init__(*messages)
        self.messages = messages
        self.status_code = status_code


class ConnectivityError(CustomMessageException):
    retryable = True

    def __init__(
            self,
            message: str = "Unable to connect to the server. Please check your internet connection and try again.",
    ) -> None:
        super().__init__(message, 503)
