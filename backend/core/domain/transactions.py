"""
core.domain.transactions — Helpers for safe state transitions.

Wraps ``transaction.atomic``, ``select_for_update`` and a version-column
compare-and-swap into reusable patterns so that every service layer
follows the same concurrency-safe approach.

Design goals
------------
* One atomic block per mutating operation: the complaint write, the
  linked-complaint write, history inserts and performance updates commit
  or roll back together.
* State-transition reads always lock the row first (``select_for_update``).
* Complaint writes are compare-and-swap on ``version`` so two concurrent
  escalations of the same complaint cannot both succeed, even on
  backends where ``select_for_update`` is a no-op (SQLite).
* Database failures surface as ``StoreError``, never as raw driver errors.

Usage::

    from core.domain.transactions import atomic_operation, lock_for_update, save_versioned

    @atomic_operation
    def escalate(complaint, actor):
        locked = lock_for_update(Complaint, complaint.pk, expected_version=complaint.version)
        locked.current_stage = ...
        save_versioned(locked, update_fields=["current_stage"])
"""

from __future__ import annotations

import functools
import logging
from typing import Any, Callable, Iterable, TypeVar

from django.db import DatabaseError, models, transaction
from django.db.models import F
from django.utils import timezone

from core.domain.exceptions import ConcurrentModificationError, NotFoundError, StoreError

logger = logging.getLogger(__name__)

T = TypeVar("T")
M = TypeVar("M", bound=models.Model)


def atomic_operation(fn: Callable[..., T]) -> Callable[..., T]:
    """
    Decorate a service function so it runs inside ``transaction.atomic()``.

    Domain exceptions raised by ``fn`` roll the transaction back and
    propagate unchanged.  ``DatabaseError`` (including ``IntegrityError``)
    rolls back and is re-raised as ``StoreError`` so callers never see a
    half-committed operation reported as success.
    """

    @functools.wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> T:
        try:
            with transaction.atomic():
                return fn(*args, **kwargs)
        except DatabaseError as exc:
            logger.exception("Store failure in %s", fn.__qualname__)
            raise StoreError() from exc

    return wrapper


def lock_for_update(
    model_class: type[M],
    pk: Any,
    *,
    expected_version: int | None = None,
) -> M:
    """
    Acquire a row-level lock on the given model instance.

    Must be called inside an ``atomic()`` block.

    Args:
        model_class:      The Django model class.
        pk:               Primary key value.
        expected_version: When given, the locked row's ``version`` must
                          match; this is the version the caller read
                          before deciding to act.

    Returns:
        The locked model instance.

    Raises:
        NotFoundError:               If no row with that PK exists.
        ConcurrentModificationError: If the row's version moved on.
    """
    try:
        locked = model_class.objects.select_for_update().get(pk=pk)
    except model_class.DoesNotExist:
        raise NotFoundError(f"{model_class.__name__} with pk={pk} does not exist.")

    if expected_version is not None and locked.version != expected_version:
        raise ConcurrentModificationError()
    return locked


def save_versioned(instance: M, *, update_fields: Iterable[str]) -> M:
    """
    Persist ``update_fields`` only if nobody else has written the row since
    ``instance`` was read, then bump ``version`` and ``updated_at``.

    Raises:
        ConcurrentModificationError: If the stored version differs.
    """
    model_class = type(instance)
    now = timezone.now()

    values = {name: getattr(instance, name) for name in update_fields}
    values["updated_at"] = now

    rows = model_class.objects.filter(
        pk=instance.pk,
        version=instance.version,
    ).update(version=F("version") + 1, **values)

    if rows != 1:
        raise ConcurrentModificationError()

    instance.version += 1
    instance.updated_at = now
    return instance
