"""Shared execution helpers: deterministic ids and error normalization."""

from __future__ import annotations

import hashlib
import json
from typing import Any

from x12_exchange.domain.errors import ExchangeError

UNEXPECTED_ERROR_CODE = "UNEXPECTED_ERROR"


def job_generate_execution_id(execution_input: Any) -> str:
    """Derive the execution id from the canonical JSON form of the input.

    Key order does not affect the id, so the same event submitted twice maps
    to the same ledger row.

    Args:
        execution_input: JSON-serializable workflow input.

    Returns:
        str: SHA-256 hex digest.
    """

    canonical_json = json.dumps(execution_input, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(canonical_json.encode("utf-8")).hexdigest()


def job_error_code_for_exception(error: BaseException) -> str:
    """Return the deterministic error code of a workflow exception.

    Args:
        error: Caught exception.

    Returns:
        str: Exception `error_code` for project errors, `UNEXPECTED_ERROR` otherwise.
    """

    if isinstance(error, ExchangeError):
        return error.error_code
    return UNEXPECTED_ERROR_CODE


def job_serialize_error(error: BaseException) -> dict[str, str]:
    """Serialize an exception into a JSON-safe mapping.

    Args:
        error: Exception to serialize.

    Returns:
        dict[str, str]: `type`, `message` and `repr` of the exception.
    """

    return {
        "type": type(error).__name__,
        "message": str(error),
        "repr": repr(error),
    }


def job_error_message(error: BaseException) -> str:
    """Return the human-readable failure message of an exception.

    Unrecognized exceptions are prefixed so that they stand out in the ledger.
    """

    if isinstance(error, ExchangeError):
        return str(error)
    return f"unknown error: {type(error).__name__}: {error}"
