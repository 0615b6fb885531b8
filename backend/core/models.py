"""
Core app models.

Provides abstract base models shared by every concrete model in the
project.
"""

from django.db import models
from django.utils import timezone


class TimeStampedModel(models.Model):
    """
    Abstract base model that provides self-updating ``created_at`` and
    ``updated_at`` timestamp fields for every concrete child model.
    """

    created_at = models.DateTimeField(
        auto_now_add=True,
        verbose_name="Created At",
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        verbose_name="Updated At",
    )

    class Meta:
        abstract = True


class RecordedEventModel(TimeStampedModel):
    """
    ``TimeStampedModel`` for append-only event rows whose ``created_at``
    is supplied by the service that writes them, so the row carries the
    same clock as the due dates and metrics recorded alongside it.
    """

    created_at = models.DateTimeField(
        default=timezone.now,
        editable=False,
        verbose_name="Created At",
    )

    class Meta:
        abstract = True
