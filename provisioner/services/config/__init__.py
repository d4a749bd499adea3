"""Configuration package (Facade).

Re-exports the public config types so callers import from a single, stable path:

	from provisioner.services.config import StorageConfig

Internal module layout can change without touching call sites; ``__all__``
defines the public API of this package.
"""

from provisioner.services.config.storage_config import (
	DEFAULT_SAS_HOURS,
	MAX_SAS_HOURS,
	StorageConfig,
	random_container_name,
	sas_duration_from_hours,
	validate_container_name,
)

__all__ = [
	"DEFAULT_SAS_HOURS",
	"MAX_SAS_HOURS",
	"StorageConfig",
	"random_container_name",
	"sas_duration_from_hours",
	"validate_container_name",
]
