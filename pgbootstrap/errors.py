from __future__ import annotations


class ProvisionError(RuntimeError):
    pass


class EngineNotFound(ProvisionError):
    pass


class StartFailed(ProvisionError):
    pass


class StatementError(ProvisionError):
    def __init__(self, statement: str, message: str):
        super().__init__(message)
        self.statement = statement
        self.message = message
