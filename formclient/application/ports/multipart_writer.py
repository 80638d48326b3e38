# formclient/application/ports/multipart_writer.py
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Protocol


class PartStream(Protocol):
    def write(self, data: bytes) -> int:
        ...


class MultipartWriterPort(ABC):
    """
    Writes multipart/form-data parts straight into a body buffer, in call order.
    """

    @property
    @abstractmethod
    def content_type(self) -> str:
        """Boundary-bearing Content-Type value for the body."""
        ...

    @abstractmethod
    def write_field(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    def create_file_part(self, key: str, filename: str) -> PartStream:
        ...

    @abstractmethod
    def close(self) -> None:
        """Write the trailing boundary. No part can be written afterwards."""
        ...

    @abstractmethod
    def getvalue(self) -> bytes:
        ...
