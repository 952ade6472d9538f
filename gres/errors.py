# (C) 2025 Rodrigo Rodrigues da Silva <rodrigopitanga@posteo.net>
# SPDX-License-Identifier: GPL-3.0-or-later

"""
Domain error taxonomy raised by the stores.

Every backend response is classified exactly once into one of these; callers
(service layer, API, CLI) read `kind` and `status_code` and never re-derive
them from the backend payload.
"""

from __future__ import annotations
from enum import Enum
from typing import Any, Dict


class ErrorKind(str, Enum):
    ALREADY_EXISTS = "already_exists"
    NOT_FOUND = "not_found"
    INTERNAL = "internal"
    PARTIAL_BATCH_FAILURE = "partial_batch_failure"


class StoreError(Exception):
    kind: ErrorKind = ErrorKind.INTERNAL
    status_code: int = 500

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = {k: v for k, v in details.items() if v is not None}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ok": False,
            "code": self.kind.value,
            "error": self.message,
            "details": self.details or None,
        }


class AlreadyExistsError(StoreError):
    kind = ErrorKind.ALREADY_EXISTS
    status_code = 409


class NotFoundError(StoreError):
    kind = ErrorKind.NOT_FOUND
    status_code = 404


class InternalError(StoreError):
    kind = ErrorKind.INTERNAL
    status_code = 500


class OperationCancelled(InternalError):
    """The caller's context was cancelled or ran past its deadline."""


class CompanionIndexError(InternalError):
    """
    The project document was written but one of its tenant indices could not
    be created. The document is NOT removed: `get_project` will succeed while
    the tenant indices are missing. `compensated` stays False until a
    compensating delete exists.
    """
    compensated = False

    def __init__(self, message: str, *, project: str, index: str, **details: Any):
        super().__init__(message, project=project, index=index, **details)
        self.project = project
        self.index = index


class PartialBatchFailure(StoreError):
    """Some (not all) items of a bulk write failed; one error for all of them."""
    kind = ErrorKind.PARTIAL_BATCH_FAILURE
    status_code = 500

    def __init__(self, message: str, *, failed: int, total: int, **details: Any):
        super().__init__(message, failed=failed, total=total, **details)
        self.failed = failed
        self.total = total
