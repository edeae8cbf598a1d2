from .base import ArgumentMode, ArgumentSpec, CallResult, CallTransport
from .dfx import DfxTransport

__all__ = [
    'ArgumentMode',
    'ArgumentSpec',
    'CallResult',
    'CallTransport',
    'DfxTransport'
]
