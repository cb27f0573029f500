"""
ARL ads.txt Engine — Errors
============================
Fatal aborts of a registry command. An aborted command leaves the
registry and the ledger exactly as they were.
"""

from core.commands.rejection import RejectionReason


class RegistryError(Exception):
    """Base error for registry engine operations."""
    pass


class RegistryPermissionError(RegistryError):
    """Caller is not allowed to perform this operation."""

    def __init__(self, reason: RejectionReason):
        self.reason = reason
        super().__init__(reason.message)

    @property
    def code(self) -> str:
        return self.reason.code


class UnknownRegistryCommand(RegistryError):
    """No handler for this command type."""

    def __init__(self, command_type: str):
        self.command_type = command_type
        super().__init__(f"Unsupported registry command type: {command_type}")


class AdministratorMismatchError(RegistryError):
    """A ledger is being replayed under an administrator it was not written by."""

    def __init__(self, expected: str, found: str, sequence: int):
        self.expected = expected
        self.found = found
        self.sequence = sequence
        super().__init__(
            f"Ledger entry {sequence} was committed by administrator '{found}', "
            f"not '{expected}'."
        )


class ReentrantWriteError(RegistryError):
    """A registry write was issued from inside a listener of the same registry."""

    def __init__(self, command_type: str):
        self.command_type = command_type
        super().__init__(
            f"{command_type} issued while a registry commit is being dispatched; "
            f"listeners must not write to the registry synchronously."
        )
