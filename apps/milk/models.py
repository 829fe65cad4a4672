from django.conf import settings
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models
from decimal import Decimal
import uuid


class MilkStatus(models.TextChoices):
    RECEIVED = 'received', 'Received'
    NOT_RECEIVED = 'not_received', 'Not received'
    PARTIAL = 'partial', 'Partial'


class MilkType(models.TextChoices):
    COW = 'cow', 'Cow'
    BUFFALO = 'buffalo', 'Buffalo'
    PACKET = 'packet', 'Packet'
    OTHER = 'other', 'Other'


class MilkRecord(models.Model):
    """One user's milk delivery for a single calendar day."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='milk_records'
    )

    # Calendar day, no time component
    date = models.DateField()

    # Delivery details
    liters = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal('1.00'),
        validators=[
            MinValueValidator(Decimal('0')),
            MaxValueValidator(Decimal('50')),
        ]
    )
    status = models.CharField(
        max_length=20,
        choices=MilkStatus.choices,
        default=MilkStatus.RECEIVED
    )
    milk_type = models.CharField(
        max_length=20,
        choices=MilkType.choices,
        default=MilkType.COW
    )
    notes = models.CharField(max_length=200, blank=True, default='')

    # Created by the system's "received" guess, pending user confirmation
    is_auto_marked = models.BooleanField(default=False)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'milk_records'
        constraints = [
            models.UniqueConstraint(
                fields=['user', 'date'],
                name='unique_milk_record_per_user_day',
            ),
        ]
        indexes = [
            models.Index(fields=['user', 'date'], name='milk_user_date_idx'),
            models.Index(fields=['user', 'status'], name='milk_user_status_idx'),
            models.Index(fields=['created_at'], name='milk_created_at_idx'),
        ]
        ordering = ['-date']

    def __str__(self):
        return f"{self.user} - {self.date}: {self.liters}L ({self.status})"

    def confirm(self):
        """Clear the auto-marked flag. Confirming twice is harmless."""
        self.is_auto_marked = False
        self.save(update_fields=['is_auto_marked', 'updated_at'])

    def snapshot(self):
        """Plain-dict copy of the record, used after deletion."""
        return {
            'id': self.id,
            'date': self.date,
            'liters': self.liters,
            'status': self.status,
            'milk_type': self.milk_type,
            'notes': self.notes,
            'is_auto_marked': self.is_auto_marked,
            'created_at': self.created_at,
            'updated_at': self.updated_at,
        }
