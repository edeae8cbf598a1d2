"""Call transport boundary"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ArgumentMode(Enum):
    """How a chunk's literal reaches the transport"""
    INLINE = "inline"
    FILE = "file"


@dataclass(frozen=True)
class ArgumentSpec:
    """Materialized call argument"""
    kind: ArgumentMode
    value: str

    @classmethod
    def inline(cls, literal: str) -> "ArgumentSpec":
        return cls(ArgumentMode.INLINE, literal)

    @classmethod
    def from_file(cls, path: str) -> "ArgumentSpec":
        return cls(ArgumentMode.FILE, path)


@dataclass
class CallResult:
    """Outcome of one remote call"""
    exit_success: bool
    stderr_text: str = ""
    stdout_text: str = ""


class CallTransport(ABC):
    """Performs a single canister call"""

    @abstractmethod
    async def invoke(self, target: str, method: str, argument: ArgumentSpec,
                     network: Optional[str] = None) -> CallResult:
        """Call `method` on `target` with the given argument"""
