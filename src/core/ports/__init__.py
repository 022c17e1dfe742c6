# edge-services: Ports (Protocol Interfaces)
# Abstract interfaces for adapters; no implementations here

from src.core.ports.db import StorageError, UniqueConstraintError
from src.core.ports.email import EmailPort, EmailResult, EmailStatus
from src.core.ports.time import ClockPort, IdGeneratorPort

__all__ = [
    # Storage
    "StorageError",
    "UniqueConstraintError",
    # Email
    "EmailPort",
    "EmailResult",
    "EmailStatus",
    # Time / ids
    "ClockPort",
    "IdGeneratorPort",
]
