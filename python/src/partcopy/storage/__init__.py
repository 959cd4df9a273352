"""Storage service implementations for partcopy."""

from typing import TYPE_CHECKING

from partcopy.storage.service import StorageService

if TYPE_CHECKING:
    from partcopy.config import ClientConfig

__all__ = [
    "create_storage_service",
    "StorageService",
]


def create_storage_service(config: "ClientConfig") -> StorageService:
    """Create a storage service instance based on configuration.

    Args:
        config: The client configuration.

    Returns:
        An uninitialized service implementing the StorageService protocol;
        call ``init()`` before use.

    Raises:
        ValueError: If the backend is unknown.
    """
    backend = config.backend

    if backend == "aws":
        from partcopy.storage.aws import AWSStorageService

        return AWSStorageService(
            region=config.region,
            endpoint_url=config.endpoint_url,
            use_path_style=config.use_path_style,
            access_key_id=config.access_key_id,
            secret_access_key=config.secret_access_key,
        )

    if backend == "memory":
        from partcopy.storage.memory import MemoryStorageService

        return MemoryStorageService()

    raise ValueError(f"Unknown storage backend: {backend!r}")
