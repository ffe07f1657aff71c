"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidAmountError(DomainException):
    """Amount is non-positive, has more than two decimals, or is out of range"""

    pass


class InvalidPartyError(DomainException):
    """Party is not one of the two ledger participants"""

    pass


class InvalidCategoryError(DomainException):
    """Category is not in the closed category set"""

    pass


class SelfSettlementError(DomainException):
    """Settlement payer and payee are the same party"""

    pass


class OverSettlementError(DomainException):
    """Settlement would pay more than is owed, or pay in the wrong direction"""

    pass


class LedgerIntegrityError(DomainException):
    """Entry set violates a structural ledger invariant (programming error)"""

    pass


class UnbalancedEntriesError(LedgerIntegrityError):
    """Entry deltas do not sum to zero"""

    pass


class MissingMirrorError(LedgerIntegrityError):
    """Receivable entry has no exactly mirrored payable entry"""

    pass


class IdempotencyConflictError(DomainException):
    """Idempotency key was already used with a different request body"""

    pass


class InvalidIdempotencyKeyError(DomainException):
    """Idempotency key is empty or longer than allowed"""

    pass


class TransactionNotFoundError(DomainException):
    """No transaction recorded under the requested id"""

    pass
