"""Capability introspection shared by the adapter contracts."""

from typing import ClassVar, FrozenSet


class CapabilityMixin:
    """Let callers ask which lifecycle operations an adapter supports.

    Contracts list their operations in ``OPERATIONS``; an implementation
    names the ones it refuses in ``UNSUPPORTED_OPERATIONS``.
    """

    OPERATIONS: ClassVar[FrozenSet[str]] = frozenset()
    UNSUPPORTED_OPERATIONS: ClassVar[FrozenSet[str]] = frozenset()

    @classmethod
    def supported_operations(cls) -> FrozenSet[str]:
        return cls.OPERATIONS - cls.UNSUPPORTED_OPERATIONS

    @classmethod
    def supports(cls, operation: str) -> bool:
        return operation in cls.supported_operations()
