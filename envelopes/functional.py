from abc import ABC, abstractmethod
from typing import Any


class Either(ABC):
    """Tagged success/failure result. Right carries the value, Left the error."""

    @abstractmethod
    def is_right(self) -> bool:
        pass

    def is_left(self) -> bool:
        return not self.is_right()

    @abstractmethod
    def get_or_else(self, default: Any) -> Any:
        pass

    @abstractmethod
    def get_error(self) -> Any:
        pass


class Right(Either):

    def __init__(self, value):
        self._value = value

    def is_right(self) -> bool:
        return True

    def get_or_else(self, default):
        return self._value

    def get_error(self):
        raise ValueError("Right has no error")

    def __repr__(self) -> str:
        return f"Right({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Right) and self._value == other._value


class Left(Either):

    def __init__(self, error):
        self._error = error

    def is_right(self) -> bool:
        return False

    def get_or_else(self, default):
        return default

    def get_error(self):
        return self._error

    def __repr__(self) -> str:
        return f"Left({self._error!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Left) and self._error == other._error
