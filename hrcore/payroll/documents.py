"""Payslip document boundary.

The payroll service hands a flat field map to a :class:`DocumentGenerator`
and stores whatever reference it returns. Layout and file format belong to
the generator.
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any, Mapping, Optional, Protocol

from hrcore.config import settings

logger = logging.getLogger(__name__)


class DocumentGenerator(Protocol):
    def generate_payslip(self, fields: Mapping[str, Any]) -> Optional[str]:
        """Render a payslip and return a stored-document reference."""
        ...


class JsonPayslipWriter:
    """Writes the field map as ``<DOCUMENT_DIR>/payslip_<code>_<Month>_<year>.json``."""

    def __init__(self, directory: Optional[str] = None) -> None:
        self._directory = directory

    @property
    def directory(self) -> Path:
        return Path(self._directory or settings.DOCUMENT_DIR)

    def generate_payslip(self, fields: Mapping[str, Any]) -> Optional[str]:
        name = "payslip_{}_{}_{}.json".format(
            fields.get("employee_code", "unknown"),
            fields.get("month", ""),
            fields.get("year", ""),
        )
        path = self.directory / re.sub(r"[^A-Za-z0-9_.-]", "_", name)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(dict(fields), indent=2, default=str), encoding="utf-8")
        logger.info("Payslip written to %s", path)
        return str(path)


_generator: DocumentGenerator = JsonPayslipWriter()


def get_document_generator() -> DocumentGenerator:
    return _generator


def set_document_generator(generator: DocumentGenerator) -> None:
    """Swap the payslip backend (e.g. a PDF renderer)."""
    global _generator
    _generator = generator
