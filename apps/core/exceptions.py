# apps/core/exceptions.py

"""
Error taxonomy of the hierarchy core

Every failure the core raises is a BoardflowError. The transport layer maps
the `code` of each family to its own status convention; the core never
retries internally.
"""


class BoardflowError(Exception):
    """Base class for every failure raised by the core"""

    code = 'error'
    default_message = 'boardflow error'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self):
        return {'code': self.code, 'error': self.message}


class InvalidInput(BoardflowError):
    """Blank or malformed fields; the caller must correct the request"""

    code = 'invalid_input'
    default_message = 'invalid input'


# === NOT FOUND ===

class NotFound(BoardflowError):
    code = 'not_found'
    entity = 'entity'

    def __init__(self, entity_id=None, message=None):
        self.entity_id = entity_id
        super().__init__(message or f"{self.entity} not found")


class BoardNotFound(NotFound):
    entity = 'board'


class ColumnNotFound(NotFound):
    entity = 'column'


class DestinationColumnNotFound(ColumnNotFound):
    """Target column of a move is absent (the task itself exists)"""

    def __init__(self, entity_id=None, message=None):
        super().__init__(entity_id, message or 'new column not found')


class TaskNotFound(NotFound):
    entity = 'task'


# === ALREADY EXISTS ===

class AlreadyExists(BoardflowError):
    code = 'already_exists'
    default_message = 'entity already exists'


class BoardExists(AlreadyExists):
    default_message = 'board already exists'


class ColumnExists(AlreadyExists):
    default_message = 'column with this name already exists in the board'


# === STORAGE ===

class StorageFailure(BoardflowError):
    """Underlying store error, possibly transient"""

    code = 'storage_failure'
    default_message = 'storage failure'


class CascadeFailure(StorageFailure):
    """
    A multi-step deletion failed

    `partial` tells the caller whether anything was already removed:
    False means the store rolled the whole unit back.
    """

    def __init__(self, message=None, partial=False, step=None):
        self.partial = partial
        self.step = step
        super().__init__(message)

    def to_dict(self):
        data = super().to_dict()
        data['partial'] = self.partial
        if self.step:
            data['step'] = self.step
        return data
