"""dfx command-line transport"""

import asyncio
import logging
from typing import List, Optional

from ..errors import TransportUnavailable
from .base import ArgumentMode, ArgumentSpec, CallResult, CallTransport

logger = logging.getLogger(__name__)


class DfxTransport(CallTransport):
    """Runs `dfx canister call` as a subprocess"""

    def __init__(self, binary: str = "dfx"):
        self.binary = binary

    def build_command(self, target: str, method: str, argument: ArgumentSpec,
                      network: Optional[str] = None) -> List[str]:
        """Assemble the dfx argv for one call"""
        command = [self.binary, "canister", "call"]

        if network:
            command += ["--network", network]

        command += [target, method]

        if argument.kind is ArgumentMode.FILE:
            command += ["--argument-file", argument.value]
        else:
            command += ["--argument", argument.value]

        return command

    async def invoke(self, target: str, method: str, argument: ArgumentSpec,
                     network: Optional[str] = None) -> CallResult:
        command = self.build_command(target, method, argument, network)
        logger.debug(f"Running {' '.join(command[:5])} ... ({argument.kind.value} argument)")

        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise TransportUnavailable(f"Failed to run {self.binary}: {e}")

        stdout, stderr = await process.communicate()

        return CallResult(
            exit_success=process.returncode == 0,
            stderr_text=stderr.decode('utf-8', errors='replace'),
            stdout_text=stdout.decode('utf-8', errors='replace'),
        )
