"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class ClientNotInitializedError(DomainException):
    """Ledger client used before initialize() or after disconnect()"""

    def __init__(self) -> None:
        super().__init__("Client not initialized. Call initialize() first.")


class InvalidAddressError(DomainException):
    """Wallet address does not match the chain's address format"""

    def __init__(self, address: str):
        self.address = address
        super().__init__(f"Invalid Osmosis address format: {address!r}")


class TransactionNotFoundError(DomainException):
    """Ledger holds no transaction for the requested hash"""

    def __init__(self, tx_hash: str):
        self.tx_hash = tx_hash
        super().__init__(f"Transaction not found: {tx_hash}")


class LedgerAPIError(DomainException):
    """Ledger API returned an error or is unavailable"""

    pass


class DenominationMismatchError(DomainException):
    """Arithmetic attempted across two different denominations"""

    pass
