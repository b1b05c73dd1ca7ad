from boohk.services.lifecycle import (
    InvalidStatusTransition,
    apply_transition,
    mark_viewed,
    expire_if_past_valid_until,
    record_client_response,
)
from boohk.services.pricing import (
    calculate_line_item_total,
    calculate_estimate_totals,
    calculate_prorated_price,
    calculate_quotation_total,
    format_amount,
    format_currency,
)
from boohk.services.collection import (
    calculate_collection_status,
    update_quotation_collection_status,
)

__all__ = [
    'InvalidStatusTransition',
    'apply_transition',
    'mark_viewed',
    'expire_if_past_valid_until',
    'record_client_response',
    'calculate_line_item_total',
    'calculate_estimate_totals',
    'calculate_prorated_price',
    'calculate_quotation_total',
    'format_amount',
    'format_currency',
    'calculate_collection_status',
    'update_quotation_collection_status',
]
