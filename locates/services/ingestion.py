"""
Turns a raw scraped batch into a dashboard snapshot.

Only EXCAVATOR rows are kept and the first occurrence of each work order
number wins. Later duplicates are dropped, not merged.
"""
import logging

from django.db import transaction
from django.utils import timezone

from ..exceptions import UpstreamError, ValidationError
from ..models import DashboardData, WorkOrder

logger = logging.getLogger(__name__)

EXCAVATOR_PRIORITY = "EXCAVATOR"

# camelCase scrape key -> model field, with the default used when missing
RAW_FIELD_MAP = {
    'priorityColor': ('priority_color', ''),
    'priorityName': ('priority_name', ''),
    'workOrderNumber': ('work_order_number', ''),
    'customerPO': ('customer_po', ''),
    'customerName': ('customer_name', ''),
    'customerAddress': ('customer_address', ''),
    'tags': ('tags', ''),
    'techName': ('tech_name', ''),
    'technician': ('technician', ''),
    'promisedAppointment': ('promised_appointment', ''),
    'createdDate': ('created_date', ''),
    'requestedDate': ('requested_date', ''),
    'completedDate': ('completed_date', ''),
    'task': ('task', ''),
    'taskDuration': ('task_duration', ''),
    'purchaseStatus': ('purchase_status', ''),
    'purchaseStatusName': ('purchase_status_name', ''),
    'serial': ('serial', 0),
    'assigned': ('assigned', False),
    'dispatched': ('dispatched', False),
    'scheduled': ('scheduled', False),
    'scheduledDate': ('scheduled_date', ''),
}


def _key(value):
    return '' if value is None else str(value).strip()


def filter_excavator(raw_candidates):
    return [w for w in raw_candidates if _key(w.get('priorityName')) == EXCAVATOR_PRIORITY]


def deduplicate(candidates):
    """First occurrence wins. Numbers are compared the way they are stored, trimmed."""
    unique_orders = []
    seen = set()
    for w in candidates:
        wo_num = _key(w.get('workOrderNumber'))
        if wo_num and wo_num not in seen:
            seen.add(wo_num)
            unique_orders.append(w)
    return unique_orders


def _coerce_serial(value):
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


def build_work_order(dashboard, raw):
    values = {}
    for raw_key, (field_name, default) in RAW_FIELD_MAP.items():
        value = raw.get(raw_key)
        values[field_name] = default if value is None else value

    values['work_order_number'] = _key(raw.get('workOrderNumber'))
    values['serial'] = _coerce_serial(values['serial'])
    for flag in ('assigned', 'dispatched', 'scheduled'):
        values[flag] = bool(values[flag])
    for field_name, value in values.items():
        if isinstance(value, str):
            values[field_name] = value.strip()

    work_order = WorkOrder(dashboard=dashboard, **values)
    work_order.apply_derived_fields()
    return work_order


def ingest(raw_candidates, filter_start_date=None, filter_end_date=None,
           dispatch_date=None, source='external-dashboard', now=None):
    if not isinstance(raw_candidates, (list, tuple)):
        raise ValidationError("workOrders must be an array")
    if any(not isinstance(w, dict) for w in raw_candidates):
        raise ValidationError("Every work order must be an object")
    if any(not isinstance(w.get('workOrderNumber'), (str, int, type(None))) for w in raw_candidates):
        raise ValidationError("workOrderNumber must be a string")

    now = now or timezone.now()
    unique_orders = deduplicate(filter_excavator(raw_candidates))

    with transaction.atomic():
        dashboard = DashboardData.objects.create(
            filter_start_date=filter_start_date or '',
            filter_end_date=filter_end_date or '',
            dispatch_date=dispatch_date or '',
            source=source,
            scraped_at=now,
            total_work_orders=len(unique_orders),
            dashboard_metadata={
                'rawCount': len(raw_candidates),
                'duplicatesDropped': len(filter_excavator(raw_candidates)) - len(unique_orders),
            },
        )
        WorkOrder.objects.bulk_create([build_work_order(dashboard, w) for w in unique_orders])

    logger.info(
        "Ingested dashboard %s: %d of %d scraped work orders kept",
        dashboard.pk, len(unique_orders), len(raw_candidates)
    )
    return dashboard


def sync_from_scraper(fetch, status_name=None, start_date=None, end_date=None, now=None):
    """
    Run the scraper collaborator and ingest what it returns. A scraper failure
    aborts the sync before anything is written.
    """
    try:
        scraped = fetch(status_name=status_name, start_date=start_date, end_date=end_date)
    except Exception as e:
        logger.error("Scraper failed: %s", e)
        raise UpstreamError(f"Scraper failed: {e}") from e

    if not isinstance(scraped, dict) or not isinstance(scraped.get('workOrders'), list):
        raise UpstreamError("Scraper returned no work order list")

    return ingest(
        scraped['workOrders'],
        filter_start_date=scraped.get('filterStartDate'),
        filter_end_date=scraped.get('filterEndDate'),
        dispatch_date=scraped.get('dispatchDate'),
        now=now,
    )
