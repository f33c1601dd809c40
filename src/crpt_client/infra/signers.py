from __future__ import annotations

import logging
import shlex
import subprocess
from typing import Callable, Sequence

from ..core.ports.signer_port import SignerPort
from ..errors import SigningError

logger = logging.getLogger(__name__)


class CommandSigner(SignerPort):
    """Sign challenge data by piping it through an external command.

    The command receives the data on stdin and must print the signature
    (base64, detached) on stdout, e.g. a small wrapper around CryptoPro ``cryptcp``.
    """

    def __init__(self, command: str | Sequence[str], timeout_seconds: float = 30.0) -> None:
        argv = shlex.split(command) if isinstance(command, str) else list(command)
        if not argv:
            raise ValueError("Signer command must not be empty")
        self._argv = argv
        self._timeout = timeout_seconds

    def sign(self, data: str) -> str:
        logger.debug("Signing challenge data with %s", self._argv[0])
        try:
            cp = subprocess.run(
                self._argv,
                input=data,
                capture_output=True,
                text=True,
                timeout=self._timeout,
                check=False,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            raise SigningError(f"Signer command {self._argv[0]!r} could not run: {e}") from e
        if cp.returncode != 0:
            stderr = cp.stderr.strip()
            raise SigningError(f"Signer command {self._argv[0]!r} exited with {cp.returncode}: {stderr[:200]}")
        signature = cp.stdout.strip()
        if not signature:
            raise SigningError(f"Signer command {self._argv[0]!r} produced no signature")
        return signature


class CallableSigner(SignerPort):
    def __init__(self, fn: Callable[[str], str]) -> None:
        self._fn = fn

    def sign(self, data: str) -> str:
        return self._fn(data)
