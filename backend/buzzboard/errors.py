"""Named failure conditions raised by the game services.

Routes let these propagate; the app-level handler in ``create_app`` turns
them into ``{'error': ..., 'code': ...}`` JSON responses.
"""


class GameError(Exception):
    status_code = 400
    code = 'error'

    def __init__(self, message, **details):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self):
        payload = {'error': self.message, 'code': self.code}
        payload.update(self.details)
        return payload


class ValidationFailed(GameError):
    status_code = 400
    code = 'validation'


class NotFound(GameError):
    status_code = 404
    code = 'not_found'


class Conflict(GameError):
    status_code = 409
    code = 'conflict'


class PermissionDenied(GameError):
    status_code = 403
    code = 'permission'


class PreconditionFailed(GameError):
    status_code = 400
    code = 'precondition'
