from typing import Any, Callable, Optional, Tuple, get_origin

from pydantic import BaseModel, ConfigDict, Field

from miraveja_digen.domain import Lifetime


class ServiceDescriptor(BaseModel):
    """Value object representing one runtime registration.

    Attributes:
        service: The type requested at resolution time. May be a parameterized
            generic such as ``IRepository[User]``.
        implementation: The type constructed to satisfy ``service``.
        lifetime: How long the constructed instance lives.
        factory: Optional builder receiving the resolving provider. When set it
            replaces construction of ``implementation``.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    service: Any = Field(..., description="The service type requested at resolution time.")
    implementation: Any = Field(..., description="The type constructed to satisfy the service.")
    lifetime: Lifetime = Field(..., description="The lifetime of the registered service.")
    factory: Optional[Callable[[Any], Any]] = Field(default=None, description="Builder replacing construction.")

    @property
    def type_parameters(self) -> Tuple[Any, ...]:
        """Type variables left unbound by the implementation."""
        if get_origin(self.implementation) is not None:
            return ()
        return tuple(getattr(self.implementation, "__parameters__", ()))

    @property
    def is_open_generic(self) -> bool:
        """Whether the descriptor maps an unparameterized generic service to a generic implementation."""
        return bool(self.type_parameters)
