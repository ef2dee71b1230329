# ==========================================
# apps/sequences/admin.py
# ==========================================

from django.contrib import admin
from .models import Counter


@admin.register(Counter)
class CounterAdmin(admin.ModelAdmin):
    """
    Read-only view of sequence counters.

    Counters are advanced only by SequenceGenerator; editing a value by hand
    would break the uniqueness of issued numbers.
    """

    list_display = ['name', 'value', 'updated_at']
    search_fields = ['name']
    readonly_fields = ['name', 'value', 'created_at', 'updated_at']

    def has_add_permission(self, request):
        """Counters are created lazily by the generator."""
        return False

    def has_delete_permission(self, request, obj=None):
        return False
