from abc import ABC, abstractmethod
from typing import Iterable, Mapping, Optional
from ..models import Coordinates

class IKeyValueStore(ABC):
    """
    Durable string-keyed store holding serialized values.
    Implementations raise StorageError when the backend fails.
    """
    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    def set_many(self, items: Mapping[str, str]) -> None:
        """Write all items or none of them."""
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        """Removing a missing key is not an error."""
        pass

    @abstractmethod
    def remove_many(self, keys: Iterable[str]) -> None:
        pass

class IImageProvider(ABC):
    """
    Camera / gallery picker.
    Returns an opaque image handle (e.g. a file URI), or None when the user cancels.
    """
    @abstractmethod
    def capture(self) -> Optional[str]:
        pass

class ILocationProvider(ABC):
    """
    Device location.
    Raises LocationUnavailableError on permission denial or lookup failure.
    """
    @abstractmethod
    def current_coordinates(self) -> Coordinates:
        pass
