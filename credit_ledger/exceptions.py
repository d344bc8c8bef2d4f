"""Custom exception hierarchy for credit-ledger."""


class LedgerError(Exception):
    """Base exception for all credit-ledger errors."""


class ValidationError(LedgerError):
    """Raised when sale terms or calendar anchors are malformed."""


class EntityNotFoundError(LedgerError):
    """Raised when a referenced entity does not exist."""


class ReferentialIntegrityError(EntityNotFoundError):
    """Raised when a foreign key reference is violated."""


class InvalidEntityStateError(LedgerError):
    """Raised when an entity is in an invalid state for the operation."""


class PartialCascadeFailure(LedgerError):
    """Raised when a client was deleted but some of its sales were not.

    The ledger is left with orphaned sales; ``orphan_sale_ids`` lists them so
    the caller can retry the cleanup.
    """

    def __init__(self, client_id: str, orphan_sale_ids: list[str]) -> None:
        self.client_id = client_id
        self.orphan_sale_ids = list(orphan_sale_ids)
        super().__init__(
            f"Client {client_id} deleted but {len(self.orphan_sale_ids)} sale(s) remain: "
            + ", ".join(self.orphan_sale_ids)
        )


class RemoteUnavailableError(LedgerError):
    """Raised when the record store cannot be reached."""


class AuthenticationError(LedgerError):
    """Raised when an operation requires a signed-in user."""


class ConfigurationError(LedgerError):
    """Raised when configuration is invalid or missing."""


class SinkError(LedgerError):
    """Raised when a sink operation fails."""
