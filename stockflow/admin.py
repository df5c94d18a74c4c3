"""
Stockflow Admin — read-only views for audit and production debugging.

- StockMovementRequest: request queue and decision history
- StockMovement: immutable ledger (movement history)
- StockPosition: current stock levels with ledger check

Nothing is added, changed or deleted here. Requests are decided through
stock.decide() or the approve/reject endpoints.
"""

from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from stockflow.models import StockMovement, StockMovementRequest, StockPosition


class ReadOnlyAdmin(admin.ModelAdmin):

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


# =========================================================================
# REQUEST ADMIN
# =========================================================================

@admin.register(StockMovementRequest)
class StockMovementRequestAdmin(ReadOnlyAdmin):
    """Request admin — read-only. Status changes only via stock.decide()."""

    list_display = ['id', 'request_type', 'status', 'requested_by', 'requested_at',
                    'decided_by', 'decided_at']
    list_filter = ['status', 'request_type']
    search_fields = ['requested_by', 'decided_by', 'notes']
    readonly_fields = ['request_type', 'status', 'payload', 'requested_by', 'requested_at',
                       'decided_by', 'decided_at', 'notes', 'rejection_reason', 'updated_at']
    date_hierarchy = 'requested_at'


# =========================================================================
# LEDGER ADMIN (read-only audit trail)
# =========================================================================

@admin.register(StockMovement)
class StockMovementAdmin(ReadOnlyAdmin):
    """Ledger admin — read-only. Immutable audit trail."""

    list_display = ['created_at', 'product_id', 'warehouse_id', 'type', 'quantity',
                    'reference', 'reason', 'created_by']
    list_filter = ['type', 'warehouse_id']
    search_fields = ['product_id', 'reference', 'reason']
    readonly_fields = ['position', 'product_id', 'warehouse_id', 'location_id', 'type',
                       'quantity', 'unit_cost', 'reason', 'reference', 'created_by',
                       'request', 'created_at']
    date_hierarchy = 'created_at'


# =========================================================================
# POSITION ADMIN (stock levels)
# =========================================================================

@admin.register(StockPosition)
class StockPositionAdmin(ReadOnlyAdmin):
    """Position admin — read-only. Positions change only by approved requests."""

    list_display = ['product_id', 'warehouse_id', 'location_id', 'quantity_on_hand',
                    'quantity_reserved', 'quantity_available', 'ledger_display']
    list_filter = ['warehouse_id']
    search_fields = ['product_id', 'warehouse_id']
    readonly_fields = ['product_id', 'warehouse_id', 'location_id', 'quantity_on_hand',
                       'quantity_available', 'quantity_reserved', 'created_at', 'updated_at']

    @admin.display(description=_('Ledger'))
    def ledger_display(self, obj):
        return obj.ledger_total()
