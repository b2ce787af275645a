"""Database capabilities port - feature flags of the active backend."""

from typing import Any, Protocol

from dynprops.domain.value_objects import Capability


class DatabaseCapabilities(Protocol):
    """Port for asking which optional backend features are available."""

    @property
    def driver(self) -> str: ...

    def supports(self, capability: Capability | str) -> bool: ...

    def refresh(self) -> None: ...

    def info(self) -> dict[str, Any]: ...

    def apply_optimizations(self) -> list[str]: ...
