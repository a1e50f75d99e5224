"""
Read-only views across every dashboard snapshot.

Statuses are recomputed from the tracking fields on each read instead of
trusting the stored ``workflow_status`` column.
"""
import math
from datetime import timedelta

from django.utils import timezone

from .. import workflow
from ..exceptions import NotFoundError, ValidationError
from ..repository import work_orders


def _status_filter(value):
    if not value:
        return None
    status = str(value).strip().upper().replace('-', '_')
    if status not in workflow.WORKFLOW_STATUSES:
        raise ValidationError(
            f"status must be one of {', '.join(workflow.WORKFLOW_STATUSES)}"
        )
    return status


def statistics(now=None):
    now = now or timezone.now()
    counts = dict.fromkeys(workflow.WORKFLOW_STATUSES, 0)
    manual_tags = 0
    auto_generated = 0

    for work_order in work_orders.active_work_orders():
        if work_order.manually_tagged:
            manual_tags += 1
        else:
            auto_generated += 1
        counts[work_order.compute_workflow_status()] += 1

    return {
        'total': counts[workflow.CALL_NEEDED] + counts[workflow.IN_PROGRESS] + counts[workflow.COMPLETE],
        'callNeeded': counts[workflow.CALL_NEEDED],
        'inProgress': counts[workflow.IN_PROGRESS],
        'complete': counts[workflow.COMPLETE],
        'unknown': counts[workflow.UNKNOWN],
        'breakdown': {
            'manualTags': manual_tags,
            'autoGenerated': auto_generated,
        },
        'lastUpdated': now.isoformat(),
    }


def list_with_status(filter_status=None, now=None):
    """
    Every active work order paired with its derived status and, while in
    progress, the whole hours left on its timer.
    """
    now = now or timezone.now()
    filter_status = _status_filter(filter_status)

    entries = []
    for work_order in work_orders.active_work_orders():
        status = work_order.compute_workflow_status()
        if filter_status and status != filter_status:
            continue
        entries.append({
            'work_order': work_order,
            'status': status,
            'hours_remaining': workflow.hours_remaining(work_order, now) if status == workflow.IN_PROGRESS else None,
        })
    return entries


def find_by_work_order_number(work_order_number):
    work_order = work_orders.find_active_by_number(work_order_number)
    if work_order is not None:
        return work_order, False

    deleted_wo = work_orders.find_deleted_by_number(work_order_number)
    if deleted_wo is not None:
        return deleted_wo, True

    raise NotFoundError(f"Work order {work_order_number} not found")


def list_needing_calls():
    return [
        work_order for work_order in work_orders.active_work_orders()
        if work_order.compute_workflow_status() == workflow.CALL_NEEDED
    ]


def list_in_progress(now=None):
    now = now or timezone.now()
    entries = []
    for work_order in work_orders.active_work_orders().filter(locates_called=True, completion_date__gt=now):
        if work_order.compute_workflow_status() != workflow.IN_PROGRESS:
            continue
        remaining = work_order.completion_date - now
        entries.append({
            'work_order': work_order,
            'hours': int(remaining // timedelta(hours=1)),
            'minutes': int((remaining % timedelta(hours=1)) // timedelta(minutes=1)),
            'total_hours': math.ceil(remaining / timedelta(hours=1)),
        })

    # Soonest to expire first
    entries.sort(key=lambda entry: entry['work_order'].completion_date)
    return entries


def list_completed(now=None):
    now = now or timezone.now()
    entries = []
    for work_order in work_orders.active_work_orders():
        if work_order.compute_workflow_status() != workflow.COMPLETE:
            continue
        since = now - work_order.completion_date if work_order.completion_date else timedelta(0)
        entries.append({
            'work_order': work_order,
            'hours_since_completion': max(0, int(since // timedelta(hours=1))),
        })

    entries.sort(key=lambda entry: entry['work_order'].completion_date or now, reverse=True)
    return entries


def list_dashboards():
    return work_orders.dashboards().prefetch_related('work_orders', 'deleted_work_orders')


def dashboard_with_history(dashboard_id):
    return work_orders.get_dashboard(dashboard_id)
