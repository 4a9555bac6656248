from abc import ABC, abstractmethod
from typing import TypeVar

from pydantic import BaseModel

T = TypeVar("T", bound=BaseModel)


class LLMService(ABC):
    @abstractmethod
    def structured_output(self, messages: list[dict], response_model: type[T]) -> T:
        """Call the model and parse its answer into `response_model`.

        Raises ValueError when the model refuses or the answer does not fit the schema.
        """
        ...
