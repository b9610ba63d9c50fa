class AayuError(Exception):
    pass


class ChatNotFoundError(AayuError, KeyError):
    def __init__(self, chat_id: str):
        super().__init__(chat_id)
        self.chat_id = chat_id

    def __str__(self) -> str:
        return f"Chat {self.chat_id} not found"


class InvalidInputError(AayuError, ValueError):
    pass


class BackendFailureError(AayuError):
    def __init__(self, chat_id: str, message: str):
        super().__init__(message)
        self.chat_id = chat_id
