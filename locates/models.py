import uuid

from django.db import models
from django.utils import timezone

from .workflow import COMPLETE, derive_status, format_time_remaining


class DashboardData(models.Model):
    filter_start_date = models.CharField(max_length=50, default='', blank=True)
    filter_end_date = models.CharField(max_length=50, default='', blank=True)
    dispatch_date = models.CharField(max_length=100, default='', blank=True)
    total_work_orders = models.IntegerField(default=0)
    source = models.CharField(max_length=100, default='external-dashboard')
    scraped_at = models.DateTimeField(default=timezone.now)
    dashboard_metadata = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at', '-id']

    def __str__(self):
        return f"Dashboard {self.id} - {self.scraped_at}"

    def update_counts(self):
        """Keep total_work_orders in step with the live work order rows."""
        self.total_work_orders = self.work_orders.count()
        self.save(update_fields=['total_work_orders', 'updated_at'])

    @property
    def total_deleted_work_orders(self):
        return self.deleted_work_orders.count()

    @property
    def total_active_deleted_work_orders(self):
        return self.deleted_work_orders.filter(is_permanently_deleted=False).count()

    @property
    def total_permanently_deleted_work_orders(self):
        return self.deleted_work_orders.filter(is_permanently_deleted=True).count()


class WorkOrderFields(models.Model):
    """
    Every field a locate work order carries. Shared by the live WorkOrder and
    its recycle bin copy so a delete/restore round trip loses nothing.
    """

    class CallType(models.TextChoices):
        STANDARD = 'STANDARD', 'Standard'
        EMERGENCY = 'EMERGENCY', 'Emergency'

    class WorkflowStatus(models.TextChoices):
        CALL_NEEDED = 'CALL_NEEDED', 'Call Needed'
        IN_PROGRESS = 'IN_PROGRESS', 'In Progress'
        COMPLETE = 'COMPLETE', 'Complete'
        UNKNOWN = 'UNKNOWN', 'Unknown'

    class PriorityName(models.TextChoices):
        EXCAVATOR = 'EXCAVATOR', 'Excavator'

    class OrderType(models.TextChoices):
        STANDARD = 'STANDARD', 'Standard'
        EMERGENCY = 'EMERGENCY', 'Emergency'
        EXCAVATOR = 'EXCAVATOR', 'Excavator'

    # Basic Fields
    priority_color = models.CharField(max_length=50, default='', blank=True)
    priority_name = models.CharField(max_length=100, default='', blank=True)
    work_order_number = models.CharField(max_length=100, db_index=True)
    customer_po = models.CharField(max_length=100, default='', blank=True)
    customer_name = models.CharField(max_length=255, default='', blank=True)
    customer_address = models.TextField(default='', blank=True)
    tags = models.CharField(max_length=255, default='', blank=True)
    tech_name = models.CharField(max_length=100, default='', blank=True)
    technician = models.CharField(max_length=100, default='', blank=True)
    promised_appointment = models.CharField(max_length=100, default='', blank=True)
    created_date = models.CharField(max_length=100, default='', blank=True)
    requested_date = models.CharField(max_length=100, default='', blank=True)
    completed_date = models.CharField(max_length=100, default='', blank=True)  # String representation from scrape
    task = models.TextField(default='', blank=True)
    task_duration = models.CharField(max_length=50, default='', blank=True)
    purchase_status = models.CharField(max_length=100, default='', blank=True)
    purchase_status_name = models.CharField(max_length=100, default='', blank=True)

    serial = models.IntegerField(default=0)
    assigned = models.BooleanField(default=False)
    dispatched = models.BooleanField(default=False)
    scheduled = models.BooleanField(default=False)
    scheduled_date = models.CharField(max_length=100, default='', blank=True)

    # Locate Call Tracking
    locates_called = models.BooleanField(default=False, help_text='Indicates if utility locates have been called in')
    call_type = models.CharField(max_length=20, choices=CallType.choices, null=True, blank=True)
    called_at = models.DateTimeField(null=True, blank=True)
    called_by = models.CharField(max_length=100, default='', blank=True)
    called_by_email = models.CharField(max_length=255, default='', blank=True)

    # Three-Stage Workflow
    completion_date = models.DateTimeField(null=True, blank=True, help_text='Date/Time when timer expires')
    timer_started = models.BooleanField(default=False)
    timer_expired = models.BooleanField(default=False)
    completed_manually = models.BooleanField(default=False)

    manually_tagged = models.BooleanField(default=False)
    tagged_by = models.CharField(max_length=100, default='', blank=True)
    tagged_by_email = models.CharField(max_length=255, default='', blank=True)
    tagged_at = models.DateTimeField(null=True, blank=True)

    workflow_status = models.CharField(
        max_length=20,
        choices=WorkflowStatus.choices,
        default=WorkflowStatus.UNKNOWN
    )

    metadata = models.JSONField(default=dict, blank=True)
    type = models.CharField(max_length=50, choices=OrderType.choices, default=OrderType.STANDARD)

    class Meta:
        abstract = True

    @classmethod
    def copied_field_names(cls):
        return [field.name for field in WorkOrderFields._meta.local_fields]

    def copy_fields_to(self, target):
        for name in self.copied_field_names():
            setattr(target, name, getattr(self, name))
        target.metadata = dict(self.metadata or {})
        return target

    @property
    def is_excavator(self):
        return bool(self.priority_name) and self.priority_name.upper() == self.PriorityName.EXCAVATOR

    def compute_workflow_status(self):
        if self.completed_manually:
            return COMPLETE
        return derive_status(
            manually_tagged=self.manually_tagged,
            priority_name=self.priority_name,
            locates_called=self.locates_called,
            timer_started=self.timer_started,
            timer_expired=self.timer_expired,
        )

    def refresh_workflow_status(self):
        self.workflow_status = self.compute_workflow_status()
        return self.workflow_status

    def apply_derived_fields(self):
        if self.is_excavator:
            self.type = self.OrderType.EXCAVATOR

        if self.created_date and not self.requested_date:
            self.requested_date = self.created_date

        self.refresh_workflow_status()

    @property
    def time_remaining(self):
        return format_time_remaining(self, timezone.now())


class WorkOrder(WorkOrderFields):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    dashboard = models.ForeignKey(DashboardData, related_name='work_orders', on_delete=models.CASCADE)

    class Meta:
        ordering = ['dashboard', 'work_order_number']
        indexes = [
            models.Index(fields=['priority_name']),
            models.Index(fields=['locates_called']),
            models.Index(fields=['workflow_status']),
            models.Index(fields=['completion_date']),
        ]

    def __str__(self):
        return f"{self.work_order_number} ({self.workflow_status})"

    def save(self, *args, **kwargs):
        self.apply_derived_fields()
        super().save(*args, **kwargs)


class DeletedWorkOrder(WorkOrderFields):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    dashboard = models.ForeignKey(DashboardData, related_name='deleted_work_orders', on_delete=models.CASCADE)

    # Deletion Tracking
    deleted_at = models.DateTimeField(default=timezone.now)
    deleted_by = models.CharField(max_length=100, default='', blank=True)
    deleted_by_email = models.CharField(max_length=255, default='', blank=True)
    deleted_from = models.CharField(max_length=100, default='active-work-orders', blank=True)
    original_work_order_id = models.UUIDField(null=True, blank=True, db_index=True)

    is_permanently_deleted = models.BooleanField(default=False)
    permanently_deleted_at = models.DateTimeField(null=True, blank=True)

    restored = models.BooleanField(default=False)
    restored_at = models.DateTimeField(null=True, blank=True)
    restored_by = models.CharField(max_length=100, default='', blank=True)
    restored_by_email = models.CharField(max_length=255, default='', blank=True)

    class Meta:
        ordering = ['-deleted_at']
        indexes = [
            models.Index(fields=['is_permanently_deleted', 'deleted_at']),
        ]

    def __str__(self):
        return f"Deleted {self.work_order_number} from dashboard {self.dashboard_id}"
