"""
Storage access for dashboard snapshots and the work orders they own.

The lifecycle, recycle bin and aggregator services only talk to the database
through ``WorkOrderRepository``. Lookups scan every snapshot, newest first.
"""
import uuid

from django.db.models import Q

from .exceptions import NotFoundError, ValidationError
from .models import DashboardData, DeletedWorkOrder, WorkOrder

NEWEST_FIRST = ('-dashboard__created_at', '-dashboard_id')


def parse_uuid(value, label='work order'):
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError, AttributeError):
        raise ValidationError(f"Invalid {label} id: {value}")


class WorkOrderRepository:

    # Snapshots

    def dashboards(self):
        return DashboardData.objects.order_by('-created_at', '-id')

    def get_dashboard(self, dashboard_id, lock=False):
        queryset = DashboardData.objects.all()
        if lock:
            queryset = queryset.select_for_update()
        try:
            return queryset.get(pk=dashboard_id)
        except (DashboardData.DoesNotExist, ValueError, TypeError):
            raise NotFoundError("Dashboard not found")

    def lock_dashboard(self, dashboard_id):
        """Take the snapshot row lock that serializes writers on the same batch."""
        return self.get_dashboard(dashboard_id, lock=True)

    # Live work orders

    def active_work_orders(self):
        return WorkOrder.objects.select_related('dashboard').order_by(*NEWEST_FIRST, 'work_order_number')

    def get_work_order(self, work_order_id, lock=False):
        pk = parse_uuid(work_order_id)
        queryset = WorkOrder.objects.select_related('dashboard')
        if lock:
            queryset = queryset.select_for_update()
        try:
            return queryset.get(pk=pk)
        except WorkOrder.DoesNotExist:
            raise NotFoundError("Work order not found")

    def get_work_order_for_update(self, work_order_id):
        """Lock the owning snapshot, then reload the work order under that lock."""
        work_order = self.get_work_order(work_order_id)
        self.lock_dashboard(work_order.dashboard_id)
        return self.get_work_order(work_order.pk, lock=True)

    def find_active_by_number(self, work_order_number):
        return self.active_work_orders().filter(work_order_number=work_order_number).first()

    def work_order_id_taken(self, work_order_id):
        return WorkOrder.objects.filter(pk=work_order_id).exists()

    def expired_timer_candidates(self, now):
        return WorkOrder.objects.filter(
            locates_called=True,
            timer_expired=False,
            completed_manually=False,
            completion_date__lte=now,
        )

    # Recycle bin

    def deleted_work_orders(self, include_permanent=False):
        queryset = DeletedWorkOrder.objects.select_related('dashboard')
        if not include_permanent:
            queryset = queryset.filter(is_permanently_deleted=False)
        return queryset

    def get_deleted(self, dashboard_id, deleted_id, lock=False):
        pk = parse_uuid(deleted_id, label='deleted work order')
        queryset = DeletedWorkOrder.objects.select_related('dashboard')
        if lock:
            queryset = queryset.select_for_update()
        try:
            return queryset.get(dashboard_id=dashboard_id, pk=pk)
        except (DeletedWorkOrder.DoesNotExist, ValueError, TypeError):
            raise NotFoundError("Deleted work order not found")

    def find_deleted_by_number(self, work_order_number):
        return (
            self.deleted_work_orders()
            .filter(work_order_number=work_order_number)
            .order_by(*NEWEST_FIRST, '-deleted_at')
            .first()
        )

    def find_deleted_matching(self, entry_id):
        """Recycle bin entries whose own id or original work order id matches."""
        return DeletedWorkOrder.objects.filter(
            Q(pk=entry_id) | Q(original_work_order_id=entry_id)
        )

    def search_history(self, search=None):
        queryset = self.deleted_work_orders()
        if search:
            queryset = queryset.filter(
                Q(work_order_number__icontains=search)
                | Q(customer_name__icontains=search)
                | Q(customer_address__icontains=search)
                | Q(deleted_by__icontains=search)
            )
        return queryset.order_by('-deleted_at')


work_orders = WorkOrderRepository()
