from abc import ABC, abstractmethod
from typing import Any


class ReadModel(ABC):
    """A read model fed by a projection.

    Projections `stack` operations while they process events and call
    `persist` once a batch is done, so read models can buffer writes.
    """

    @abstractmethod
    def init(self) -> None: ...

    @abstractmethod
    def is_initialized(self) -> bool: ...

    @abstractmethod
    def reset(self) -> None: ...

    @abstractmethod
    def delete(self) -> None: ...

    @abstractmethod
    def stack(self, operation: str, *args: Any) -> None: ...

    @abstractmethod
    def persist(self) -> None: ...
