from .backend import FHEBackend, Operand
from .mock import MOCK_PROTOCOL_ID, EncryptedInputBuilder, MockFHEBackend
from .types import ZERO_HANDLE, EncryptedInputBundle, FheType, handle_type, is_handle

__all__ = [
    "FHEBackend",
    "Operand",
    "MockFHEBackend",
    "EncryptedInputBuilder",
    "MOCK_PROTOCOL_ID",
    "EncryptedInputBundle",
    "FheType",
    "ZERO_HANDLE",
    "handle_type",
    "is_handle",
]
