"""Application ports - interfaces for external adapters."""

from dynprops.application.ports.database_capabilities import DatabaseCapabilities
from dynprops.application.ports.unit_of_work import UnitOfWork, UnitOfWorkFactory

__all__ = [
    "DatabaseCapabilities",
    "UnitOfWork",
    "UnitOfWorkFactory",
]
