"""Domain errors raised by the crud layer.

Each error carries a machine-readable ``kind`` and the HTTP status the API
layer answers with. Consistency findings (an unbalanced balance sheet, a drifted
cached balance) are reported as data and have no exception here.
"""


class LedgerError(Exception):
    kind = "ledger_error"
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(LedgerError):
    kind = "validation_error"
    status_code = 400


class InvalidPeriodError(ValidationError):
    kind = "invalid_period"


class UnbalancedEntryError(LedgerError):
    kind = "unbalanced_entry"
    status_code = 400


class DuplicateError(LedgerError):
    kind = "duplicate"
    status_code = 409


class DuplicateAccountError(DuplicateError):
    kind = "duplicate_account"


class NotFoundError(LedgerError):
    kind = "not_found"
    status_code = 404


class InvalidStateError(LedgerError):
    kind = "invalid_state"
    status_code = 409
