from django.db import models


class Counter(models.Model):
    """Durable counter backing one named sequence."""

    name = models.CharField(max_length=64, unique=True)
    value = models.PositiveBigIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'sequence_counters'
        ordering = ['name']

    def __str__(self):
        return f"{self.name} = {self.value}"
