# wealthshare/ledger/errors.py
from decimal import Decimal


class LedgerValidationError(Exception):
    """A precondition was not met; nothing was applied."""


class EntityNotFound(LedgerValidationError):
    def __init__(self, kind: str, entity_id: str):
        self.kind = kind
        self.entity_id = entity_id
        super().__init__(f"{kind} not found: {entity_id}")


class InvalidAmount(LedgerValidationError):
    pass


class InsufficientFunds(LedgerValidationError):
    def __init__(self, account_id: str, available: Decimal, requested: Decimal):
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient funds in account {account_id}: available {available}, requested {requested}"
        )


class OutstandingLoanExists(LedgerValidationError):
    def __init__(self, member_id: str, loan_id: str):
        self.loan_id = loan_id
        super().__init__(
            f"Member {member_id} already has an outstanding loan ({loan_id}). Please repay it first."
        )


class InsufficientInterestFunds(LedgerValidationError):
    def __init__(self, available: Decimal, requested: Decimal):
        self.available = available
        self.requested = requested
        super().__init__(f"Insufficient interest funds. Available: {available}, requested: {requested}")


class AccountNotEmpty(LedgerValidationError):
    def __init__(self, account_id: str, balance: Decimal):
        self.balance = balance
        super().__init__(f"Cannot delete account {account_id}. It has a remaining balance of {balance}.")


class RepaymentExceedsBalance(LedgerValidationError):
    def __init__(self, loan_id: str, balance: Decimal, requested: Decimal):
        self.balance = balance
        super().__init__(f"Repayment of {requested} exceeds outstanding balance {balance} on loan {loan_id}")


class PersistenceError(Exception):
    """The backing store rejected a write or could not be reached."""


class SnapshotError(Exception):
    """Stored or imported data could not be turned into a ledger."""
