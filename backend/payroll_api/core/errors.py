"""Error taxonomy shared by the payroll lifecycle and the batch generator.

None of these are retried. The HTTP layer maps ``status_code`` straight onto
the response; the batch generator downgrades them to per-employee failures.
"""


class PayrollError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(PayrollError):
    """Malformed input, e.g. a month outside 1-12 or a negative salary."""

    status_code = 400


class NotFoundError(PayrollError):
    status_code = 404


class ConflictError(PayrollError):
    """Uniqueness violation or a forbidden lifecycle operation."""

    status_code = 409


class PersistenceError(PayrollError):
    status_code = 500
