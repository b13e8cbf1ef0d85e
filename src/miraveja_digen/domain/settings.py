from typing import Optional, Tuple

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from miraveja_digen.domain.enums import Lifetime

RUNTIME_MODULE = "miraveja_digen.infrastructure.runtime"


class GeneratorSettings(BaseSettings):
    """Configuration for a generation pass.

    Every value can be overridden through ``MIRAVEJA_DIGEN_``-prefixed
    environment variables, e.g. ``MIRAVEJA_DIGEN_ASSEMBLY_NAME=shop``.
    """

    model_config = SettingsConfigDict(env_prefix="MIRAVEJA_DIGEN_", frozen=True)

    dependency_marker: str = Field(default="Inject", description="Annotation marking injected members.")
    transient_annotation: str = Field(default="Transient")
    scoped_annotation: str = Field(default="Scoped")
    singleton_annotation: str = Field(default="Singleton")
    contextual_types: Tuple[str, ...] = Field(
        default=(f"{RUNTIME_MODULE}.ContextLogger",),
        description="Full names of types specialized with the consuming type as generic argument.",
    )
    external_services: Tuple[str, ...] = Field(
        default=(f"{RUNTIME_MODULE}.ContextLogger",),
        description="Full names of services supplied outside the generated registration table.",
    )
    completion_hook: str = Field(default="on_initialized", description="Method called last by initializers.")
    assembly_name: Optional[str] = Field(
        default=None,
        description="Namespace of the registration unit. Defaults to the root namespace of the first service.",
    )
    registration_function: str = Field(default="add_services")
    service_collection: str = Field(default=f"{RUNTIME_MODULE}.ServiceCollection")
    log_level: str = Field(default="INFO")
    json_logs: bool = Field(default=False)

    def lifetime_annotations(self) -> Tuple[Tuple[str, Lifetime], ...]:
        """Lifetime annotation names paired with their lifetime, in priority order."""
        return (
            (self.transient_annotation, Lifetime.TRANSIENT),
            (self.scoped_annotation, Lifetime.SCOPED),
            (self.singleton_annotation, Lifetime.SINGLETON),
        )
