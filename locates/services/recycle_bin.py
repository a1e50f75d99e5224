"""
Recycle bin for work orders removed from the active dashboard.

Deleting copies the work order into ``DeletedWorkOrder`` on the same
snapshot. Restoring puts a live copy back and drops the entry. Permanent
deletion removes the entry for good.
"""
import logging

from django.core.paginator import Paginator
from django.db import transaction
from django.utils import timezone

from ..exceptions import ConflictError, LocatesError, NotFoundError, ValidationError
from ..models import DeletedWorkOrder, WorkOrder
from ..repository import parse_uuid, work_orders

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100


def soft_delete(work_order_id, deleted_by, deleted_by_email='', now=None):
    now = now or timezone.now()

    with transaction.atomic():
        work_order = work_orders.get_work_order_for_update(work_order_id)
        dashboard = work_order.dashboard

        deleted_wo = work_order.copy_fields_to(DeletedWorkOrder(
            dashboard=dashboard,
            original_work_order_id=work_order.pk,
            deleted_at=now,
            deleted_by=deleted_by or 'Unknown',
            deleted_by_email=deleted_by_email or '',
        ))
        deleted_wo.save()

        work_order.delete()
        dashboard.update_counts()

    logger.info("Work order %s moved to recycle bin by %s", deleted_wo.work_order_number, deleted_wo.deleted_by)
    return deleted_wo


def bulk_soft_delete(ids, deleted_by, deleted_by_email='', now=None):
    if not isinstance(ids, list) or not ids:
        raise ValidationError("Please provide an array of work order IDs")

    results = []
    for work_order_id in ids:
        try:
            deleted_wo = soft_delete(work_order_id, deleted_by, deleted_by_email, now=now)
            results.append({'id': str(work_order_id), 'success': True, 'deletedId': str(deleted_wo.pk)})
        except LocatesError as e:
            results.append({'id': str(work_order_id), 'success': False, 'message': str(e.detail)})

    return results


def restore(dashboard_id, deleted_order_id, restored_by, restored_by_email='', now=None):
    now = now or timezone.now()

    with transaction.atomic():
        dashboard = work_orders.lock_dashboard(dashboard_id)
        deleted_wo = work_orders.get_deleted(dashboard_id, deleted_order_id, lock=True)

        if deleted_wo.is_permanently_deleted:
            raise NotFoundError("Deleted work order not found")
        if deleted_wo.restored:
            raise ConflictError("Work order has already been restored")

        work_order = deleted_wo.copy_fields_to(WorkOrder(dashboard=dashboard))
        original_id = deleted_wo.original_work_order_id
        if original_id and not work_orders.work_order_id_taken(original_id):
            work_order.id = original_id

        work_order.metadata.update({
            'restored': True,
            'restoredAt': now.isoformat(),
            'restoredBy': restored_by or 'Unknown',
            'restoredByEmail': restored_by_email or '',
        })
        work_order.save(force_insert=True)

        deleted_wo.delete()
        dashboard.update_counts()

    logger.info("Work order %s restored to dashboard %s", work_order.work_order_number, dashboard.pk)
    return work_order


def permanently_delete(dashboard_id, deleted_order_id):
    with transaction.atomic():
        dashboard = work_orders.lock_dashboard(dashboard_id)
        deleted_wo = work_orders.get_deleted(dashboard_id, deleted_order_id, lock=True)
        if deleted_wo.is_permanently_deleted:
            raise NotFoundError("Deleted work order not found")
        work_order_number = deleted_wo.work_order_number
        deleted_wo.delete()

    logger.info("Work order %s permanently deleted from dashboard %s", work_order_number, dashboard.pk)
    return work_order_number


def bulk_permanently_delete(ids):
    """Match each id against entry ids and original work order ids in every snapshot."""
    if not isinstance(ids, list) or not ids:
        raise ValidationError("Please provide an array of IDs")

    results = []
    for entry_id in ids:
        try:
            pk = parse_uuid(entry_id, label='deleted work order')
            with transaction.atomic():
                deleted_count, _ = work_orders.find_deleted_matching(pk).delete()
            if not deleted_count:
                raise NotFoundError("Deleted work order not found")
            results.append({'id': str(entry_id), 'success': True, 'deletedCount': deleted_count})
        except LocatesError as e:
            results.append({'id': str(entry_id), 'success': False, 'message': str(e.detail)})

    return results


def clear_all_history():
    with transaction.atomic():
        cleared, _ = DeletedWorkOrder.objects.all().delete()

    logger.warning("Recycle bin cleared: %d entries removed", cleared)
    return cleared


def _positive_int(value, name, default):
    if value in (None, ''):
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be a positive integer")
    if number < 1:
        raise ValidationError(f"{name} must be a positive integer")
    return number


def list_history(page=1, limit=20, search=None):
    page = _positive_int(page, 'page', 1)
    limit = min(_positive_int(limit, 'limit', 20), MAX_PAGE_SIZE)

    queryset = work_orders.search_history(search.strip() if search else None)
    paginator = Paginator(queryset, limit)
    current = paginator.get_page(page)

    return {
        'items': list(current.object_list),
        'count': len(current.object_list),
        'total': paginator.count,
        'totalPages': paginator.num_pages,
        'currentPage': current.number,
    }
