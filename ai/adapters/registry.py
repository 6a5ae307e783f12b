"""Backend Registry: ordered id → backend map plus the mutable default id."""
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

from ai.adapters.base import BaseBackend
from ai.adapters.types import BackendDescriptor
from core.errors import ConfigError
from core.logging import logger


class BackendRegistry:
    """Registry of generation backends.

    Insertion order is the fallback priority: when a backend cannot be used,
    the first available entry in this order takes over. The set of backends is
    fixed at construction; only the default id changes afterwards.
    """

    def __init__(
        self,
        backends: Union[Mapping[str, BaseBackend], Iterable[Tuple[str, BaseBackend]]],
        default_backend_id: Optional[str] = None,
    ):
        items = backends.items() if isinstance(backends, Mapping) else backends
        self._backends: Dict[str, BaseBackend] = {}
        for backend_id, backend in items:
            if backend_id in self._backends:
                raise ConfigError(f"Backend '{backend_id}' registered twice")
            self._backends[backend_id] = backend

        if not self._backends:
            raise ConfigError("Backend registry needs at least one backend")

        first = next(iter(self._backends))
        if default_backend_id is None:
            default_backend_id = first
        elif default_backend_id not in self._backends:
            logger.warning(
                f"Default backend '{default_backend_id}' is not registered, using '{first}'"
            )
            default_backend_id = first
        self._default_backend_id = default_backend_id

    def __contains__(self, backend_id: object) -> bool:
        return backend_id in self._backends

    def __iter__(self) -> Iterator[str]:
        return iter(self._backends)

    def __len__(self) -> int:
        return len(self._backends)

    @property
    def default_backend_id(self) -> str:
        return self._default_backend_id

    def get(self, backend_id: Optional[str]) -> Optional[BaseBackend]:
        if backend_id is None:
            return None
        return self._backends.get(backend_id)

    def items(self) -> List[Tuple[str, BaseBackend]]:
        return list(self._backends.items())

    def set_default(self, backend_id: str) -> bool:
        """Point the default at ``backend_id``. Returns False and changes nothing if it is unknown."""
        if backend_id not in self._backends:
            logger.warning(f"Ignoring default backend change to unknown backend '{backend_id}'")
            return False
        if backend_id != self._default_backend_id:
            logger.info(f"Default backend changed from '{self._default_backend_id}' to '{backend_id}'")
        self._default_backend_id = backend_id
        return True

    def first_available(self, exclude: Optional[str] = None) -> Optional[Tuple[str, BaseBackend]]:
        """First backend in priority order whose configuration check passes."""
        for backend_id, backend in self._backends.items():
            if backend_id != exclude and backend.is_available():
                return backend_id, backend
        return None

    def describe(self) -> List[BackendDescriptor]:
        return [
            BackendDescriptor(
                id=backend_id,
                display_name=backend.display_name,
                available=backend.is_available(),
            )
            for backend_id, backend in self._backends.items()
        ]
