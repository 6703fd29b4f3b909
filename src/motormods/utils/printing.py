"""Receipt printing.

Plain-text receipts are sent to the operating system's print pipeline.
One implementation exists per supported platform family, picked once
by :func:`get_receipt_printer`:

- Linux: CUPS command line tools (``lpstat`` to check for a printer,
  ``lp`` to submit the job)
- Everything else: printing is reported as unsupported
"""

import logging
import subprocess
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from motormods.config import Config
from motormods.utils.constants import RECEIPT_TEMP_FILENAME
from motormods.utils.platform import get_platform

logger = logging.getLogger(__name__)


class PrintError(Exception):
    """Base exception for printing errors."""


class PrintingUnsupportedError(PrintError):
    """This platform has no printing implementation."""


class PrintingUnavailableError(PrintError):
    """The print tools are not installed."""


class NoPrinterConfiguredError(PrintError):
    """The print system has no printer set up."""


class PrintJobError(PrintError):
    """A print command ran but reported failure."""


class ReceiptPrinter(ABC):
    """Capability interface for printing plain-text receipts."""

    @abstractmethod
    def print_receipt(self, text: str) -> None:
        """Print ``text``. Raises a :class:`PrintError` on failure."""


class UnsupportedReceiptPrinter(ReceiptPrinter):

    def print_receipt(self, text: str) -> None:
        raise PrintingUnsupportedError(
            "Printing is currently supported only on Linux builds."
        )


class CupsReceiptPrinter(ReceiptPrinter):
    """Print through CUPS with ``lpstat`` / ``lp``."""

    def __init__(self, temp_dir: str | Path | None = None,
                 timeout: Optional[int] = None):
        self.temp_dir = Path(temp_dir or tempfile.gettempdir())
        self.timeout = timeout if timeout is not None else Config.PRINT_TIMEOUT

    def print_receipt(self, text: str) -> None:
        self._check_printer()

        receipt_path = self.temp_dir / RECEIPT_TEMP_FILENAME
        try:
            receipt_path.write_text(text, encoding="utf-8")
        except OSError as e:
            raise PrintJobError(f"Failed to write receipt file: {e}") from e

        result = self._run(["lp", str(receipt_path)], "lp")
        if result.returncode != 0:
            raise PrintJobError(f"Print failed: {result.stderr.strip()}")
        logger.info(f"Receipt sent to printer ({len(text)} chars)")

    def _check_printer(self):
        result = self._run(["lpstat", "-p"], "lpstat")
        if result.returncode != 0:
            raise PrintJobError(
                f"Printer status check failed: {result.stderr.strip()}"
            )
        if not any(line.startswith("printer ") or " printer " in line
                   for line in result.stdout.splitlines()):
            raise NoPrinterConfiguredError(
                "No printer configured. Please add/connect a printer "
                "in system settings (CUPS)."
            )

    def _run(self, cmd: list[str], tool: str) -> subprocess.CompletedProcess:
        try:
            return subprocess.run(
                cmd, capture_output=True, text=True, timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise PrintingUnavailableError(
                f"Printing not available ({tool} not found): {e}"
            ) from e
        except subprocess.TimeoutExpired as e:
            raise PrintJobError(
                f"{tool} did not respond within {self.timeout}s"
            ) from e


_PRINTERS = {
    "linux": CupsReceiptPrinter,
}


def get_receipt_printer(platform: Optional[str] = None) -> ReceiptPrinter:
    """Return the receipt printer for ``platform`` (default: this OS)."""
    factory = _PRINTERS.get(platform or get_platform(),
                            UnsupportedReceiptPrinter)
    return factory()
