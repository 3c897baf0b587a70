"""
Post-wrap verification.

A light check that the output archive was written. The size comparison
is a heuristic: wrapping normally injects code and grows the archive,
but a larger file is not proof that wrapping worked. Verification never
changes whether a wrap counts as succeeded or failed.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

from mamwrap.core.log import WrapLog
from mamwrap.core.models import VerificationResult
from mamwrap.exceptions import VerificationError

logger = logging.getLogger(__name__)


def verify_output(
    input_path: str,
    output_path: str,
    log: Optional[WrapLog] = None,
) -> VerificationResult:
    """
    Check the wrapped archive against the original.

    Args:
        input_path: Original archive.
        output_path: Archive produced by the tool.
        log: Wrap log to report into; messages go to the module logger
             when omitted.

    Returns:
        VerificationResult. Errors are recorded on the result rather
        than raised.
    """

    def emit(text: str = "") -> None:
        if log is not None:
            log.message(text)
        elif text:
            logger.info(text)

    try:
        emit()
        emit("Verifying wrapped IPA...")

        if not os.path.isfile(output_path):
            emit("❌ Output file not found!")
            return VerificationResult(artifact_present=False)

        produced_size = _file_size(output_path)
        emit(f"✅ File exists: {produced_size:,} bytes")

        original_size = _file_size(input_path)
        emit(f"Original size: {original_size:,} bytes")
        emit(f"Wrapped size: {produced_size:,} bytes")

        size_increased = produced_size > original_size
        if size_increased:
            emit("✅ Size increased - wrapper likely applied successfully")

        emit("✅ Verification passed!")
        return VerificationResult(
            artifact_present=True,
            original_size=original_size,
            produced_size=produced_size,
            size_increased=size_increased,
        )

    except VerificationError as e:
        emit(f"Verification error: {e}")
        logger.warning(f"Verification of {output_path} failed: {e}")
        return VerificationResult(
            artifact_present=os.path.isfile(output_path),
            error=str(e),
        )
    except Exception as e:
        logger.warning(f"Verification of {output_path} stopped: {e}", exc_info=True)
        return VerificationResult(
            artifact_present=os.path.isfile(output_path),
            error=str(e),
        )


def _file_size(path: str) -> int:
    try:
        return os.path.getsize(path)
    except OSError as e:
        raise VerificationError(path, e.strerror or str(e)) from e
