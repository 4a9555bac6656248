from abc import ABC, abstractmethod
from src.core.workflow_state import IntakeState


class BaseNode(ABC):
    """Base class for all intake graph nodes.

    Subclasses must set `name` as a class variable (str) and implement `__call__`,
    either as a plain method or as a coroutine for stages that do I/O.
    """

    name: str  # Class variable, set by each subclass (e.g. name = "admit")

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        if not getattr(cls, 'name', None) and 'Abstract' not in cls.__name__:
            raise TypeError(f"{cls.__name__} must define a 'name' class variable")

    @abstractmethod
    def __call__(self, state: IntakeState) -> dict:
        """Execute node logic. Returns a dict that updates the state."""
        ...

    def visited(self, state: IntakeState) -> list[str]:
        return state.get("trajectory", []) + [self.name]
