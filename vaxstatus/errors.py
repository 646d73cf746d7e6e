from __future__ import annotations

import logging

from .config import get_settings


logger = logging.getLogger(__name__)


class VaxStatusError(Exception):
    pass


class MissingRelationError(VaxStatusError):
    def __init__(self, kind: str, entity_id: str | None):
        self.kind = kind
        self.entity_id = entity_id
        super().__init__(f"{kind} not found: {entity_id}")


class DuplicateRecordError(VaxStatusError):
    pass


class InvalidTransitionError(VaxStatusError):
    pass


class SnapshotError(VaxStatusError):
    pass


def missing_relation(kind: str, entity_id: str | None, *, fatal: bool = False) -> None:
    """Report a relation that did not resolve.

    Absent relations are expected on partial snapshots and only log a warning.
    A fatal relation is a programming error: it raises in strict mode and is
    logged as an error otherwise, leaving the caller to degrade.
    """
    if fatal:
        if get_settings().strict:
            raise MissingRelationError(kind, entity_id)
        logger.error("%s not found: %s", kind, entity_id)
        return
    logger.warning("%s not found: %s", kind, entity_id)
