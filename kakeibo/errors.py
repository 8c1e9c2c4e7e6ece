from typing import Optional

UNAUTHORIZED_MESSAGE = "認証エラー: 再ログインしてください"
NOT_FOUND_MESSAGE = "データが見つかりませんでした"


class ApiError(Exception):
    """A failed call to the expense backend.

    ``status`` is the HTTP status code, or ``None`` when the request never got
    a response (connection refused, timeout, bad JSON).
    """

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status

    @property
    def unauthorized(self) -> bool:
        return self.status == 401

    @property
    def not_found(self) -> bool:
        return self.status == 404


def api_error_message(error: BaseException, default: str) -> str:
    status = getattr(error, "status", None)
    if status == 401:
        return UNAUTHORIZED_MESSAGE
    if status == 404:
        return NOT_FOUND_MESSAGE
    return default
