from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class UseCaseRequest:
    """Use Case input DTO base."""
    pass


@dataclass(frozen=True)
class UseCaseResponse:
    """Use Case output DTO base."""
    success: bool = True
    error: Optional[str] = None
    # Exception class name when ``success`` is False (e.g. "TransportError")
    error_kind: Optional[str] = None
    retryable: bool = False


class UseCase(ABC):
    """Use Case base class."""

    @abstractmethod
    def execute(self, request: UseCaseRequest) -> UseCaseResponse:
        ...
