"""
Error taxonomy shared by services and routes.

Services raise these; the app-level handlers in miniapp.api turn them into
JSON responses carrying the status code and the error kind.
"""


class MiniAppError(Exception):
    status_code = 500
    kind = "error"

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFoundError(MiniAppError):
    status_code = 404
    kind = "not_found"


class UserNotFound(NotFoundError):
    def __init__(self, telegram_id: int | str):
        super().__init__("User not found")
        self.telegram_id = telegram_id


class LessonNotFound(NotFoundError):
    def __init__(self, lesson_id: str):
        super().__init__("Lesson not found")
        self.lesson_id = lesson_id


class ValidationError(MiniAppError):
    status_code = 400
    kind = "validation_error"


class ConflictError(MiniAppError):
    status_code = 409
    kind = "conflict"


class PersistenceError(MiniAppError):
    status_code = 503
    kind = "persistence_error"


class ConfigurationError(MiniAppError):
    kind = "configuration_error"
