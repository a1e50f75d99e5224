"""
Work order lifecycle: recording locate calls, manual tagging, timer expiry and
manual completion.

Every mutator loads the work order under its snapshot lock, changes the
tracking fields and saves; ``WorkOrder.save`` re-derives the workflow status.
"""
import logging

from django.db import transaction
from django.utils import timezone

from ..exceptions import ConflictError, LocatesError, NotFoundError, ValidationError
from ..models import WorkOrder
from ..repository import work_orders
from ..utils import calculate_completion_date

logger = logging.getLogger(__name__)

CALL_TYPES = (WorkOrder.CallType.STANDARD, WorkOrder.CallType.EMERGENCY)
LOCATES_NEEDED_TAG = 'Locates Needed'
LOCATES_NEEDED_COLOR = 'rgb(255, 0, 0)'


def normalize_call_type(call_type):
    if call_type is None or call_type == '':
        return WorkOrder.CallType.STANDARD
    if isinstance(call_type, str) and call_type.upper() in CALL_TYPES:
        return WorkOrder.CallType(call_type.upper())
    raise ValidationError("callType must be either 'STANDARD' or 'EMERGENCY'")


def _apply_call(work_order, call_type, called_by, called_by_email, called_at, now):
    work_order.locates_called = True
    work_order.call_type = call_type
    work_order.called_by = called_by
    work_order.called_by_email = called_by_email or ''
    work_order.called_at = called_at
    work_order.completion_date = calculate_completion_date(called_at, call_type)
    work_order.timer_started = True
    work_order.timer_expired = False
    work_order.completed_manually = False

    work_order.metadata['lastCallStatusUpdate'] = now.isoformat()
    work_order.metadata['updatedBy'] = called_by
    work_order.save()


def record_call(work_order_id, call_type, called_by, called_by_email='', called_at=None, now=None):
    call_type = normalize_call_type(call_type)
    if not called_by:
        raise ValidationError("Manager name (calledBy) is required when marking locates as called")

    now = now or timezone.now()
    called_at = called_at or now

    with transaction.atomic():
        work_order = work_orders.get_work_order_for_update(work_order_id)
        _apply_call(work_order, call_type, called_by, called_by_email, called_at, now)

    logger.info(
        "Locates called for %s (%s) by %s, due %s",
        work_order.work_order_number, call_type, called_by, work_order.completion_date.isoformat()
    )
    return work_order


def bulk_record_call(ids, call_type, called_by, called_by_email='', now=None):
    """
    Record the same call on several work orders. Only EXCAVATOR or manually
    tagged orders are eligible; each id succeeds or fails on its own.
    """
    if not isinstance(ids, list) or not ids:
        raise ValidationError("Please provide an array of work order IDs")
    call_type = normalize_call_type(call_type)
    if not called_by:
        raise ValidationError("Manager name (calledBy) is required")

    now = now or timezone.now()
    results = []
    for work_order_id in ids:
        try:
            with transaction.atomic():
                work_order = work_orders.get_work_order_for_update(work_order_id)
                if not (work_order.is_excavator or work_order.manually_tagged):
                    raise ConflictError("Not an excavator or manually tagged work order")
                work_order.metadata['bulkUpdate'] = True
                _apply_call(work_order, call_type, called_by, called_by_email, now, now)
            results.append({'id': str(work_order_id), 'success': True})
        except LocatesError as e:
            results.append({'id': str(work_order_id), 'success': False, 'message': str(e.detail)})

    return results


def merge_tags(existing, extra=None):
    """Comma-joined tag string with ``Locates Needed`` present exactly once."""
    if isinstance(extra, str):
        extra = extra.split(',')

    merged = []
    for tag in (existing or '').split(',') + [LOCATES_NEEDED_TAG] + list(extra or []):
        tag = str(tag).strip()
        if tag and tag.lower() not in (t.lower() for t in merged):
            merged.append(tag)
    return ', '.join(merged)


def tag_as_locates_needed(work_order_number, tagged_by, tagged_by_email='', tags=None, now=None):
    if not work_order_number:
        raise ValidationError("workOrderNumber is required")

    now = now or timezone.now()
    match = work_orders.find_active_by_number(work_order_number)
    if match is None:
        raise NotFoundError(f"Work order {work_order_number} not found")

    with transaction.atomic():
        work_order = work_orders.get_work_order_for_update(match.pk)
        work_order.manually_tagged = True
        work_order.completed_manually = False
        work_order.tagged_by = tagged_by or 'Unknown'
        work_order.tagged_by_email = tagged_by_email or ''
        work_order.tagged_at = now
        work_order.priority_name = WorkOrder.PriorityName.EXCAVATOR
        work_order.priority_color = LOCATES_NEEDED_COLOR
        work_order.tags = merge_tags(work_order.tags, tags)
        work_order.metadata['taggedVia'] = 'manual_tag'
        work_order.metadata['lastTaggedAt'] = now.isoformat()
        work_order.save()

    logger.info("Work order %s tagged as locates needed by %s", work_order_number, work_order.tagged_by)
    return work_order


def bulk_tag_as_locates_needed(work_order_numbers, tagged_by, tagged_by_email='', tags=None, now=None):
    if not isinstance(work_order_numbers, list) or not work_order_numbers:
        raise ValidationError("Please provide an array of work order numbers")

    results = []
    for number in work_order_numbers:
        try:
            work_order = tag_as_locates_needed(number, tagged_by, tagged_by_email, tags=tags, now=now)
            results.append({'workOrderNumber': number, 'success': True, 'id': str(work_order.pk)})
        except LocatesError as e:
            results.append({'workOrderNumber': number, 'success': False, 'message': str(e.detail)})

    return results


def sweep_expired_timers(now=None):
    """
    Move every called work order whose deadline has passed to COMPLETE.
    Conditions are re-checked under lock, so overlapping sweeps are harmless.
    """
    now = now or timezone.now()
    count = 0

    for candidate in list(work_orders.expired_timer_candidates(now).only('pk', 'dashboard')):
        with transaction.atomic():
            work_orders.lock_dashboard(candidate.dashboard_id)
            work_order = (
                work_orders.expired_timer_candidates(now)
                .select_for_update()
                .filter(pk=candidate.pk)
                .first()
            )
            if work_order is None:
                continue

            work_order.timer_expired = True
            work_order.metadata['timerExpiredAt'] = now.isoformat()
            work_order.metadata['autoMovedToComplete'] = True
            work_order.save()
            count += 1

    if count:
        logger.info("Timer sweep moved %d work order(s) to COMPLETE", count)
    return count


def complete_manually(work_order_id, completed_by, completed_by_email='', now=None):
    now = now or timezone.now()

    with transaction.atomic():
        work_order = work_orders.get_work_order_for_update(work_order_id)
        if work_order.compute_workflow_status() == WorkOrder.WorkflowStatus.COMPLETE:
            raise ConflictError("Work order is already complete")

        work_order.completed_manually = True
        work_order.timer_expired = False
        work_order.timer_started = False
        work_order.completion_date = now
        work_order.metadata['manuallyCompleted'] = True
        work_order.metadata['manuallyCompletedAt'] = now.isoformat()
        work_order.metadata['manuallyCompletedBy'] = completed_by or 'Unknown'
        work_order.metadata['manuallyCompletedByEmail'] = completed_by_email or ''
        work_order.save()

    logger.info("Work order %s completed manually by %s", work_order.work_order_number, completed_by)
    return work_order
