from rest_framework import serializers
from .models import DashboardData, WorkOrder, DeletedWorkOrder


WORK_ORDER_FIELDS = [
    'id', 'dashboard', 'priority_color', 'priority_name', 'work_order_number',
    'customer_po', 'customer_name', 'customer_address', 'tags',
    'tech_name', 'technician', 'promised_appointment', 'created_date',
    'requested_date', 'completed_date', 'task', 'task_duration',
    'purchase_status', 'purchase_status_name', 'serial', 'assigned',
    'dispatched', 'scheduled', 'scheduled_date', 'locates_called', 'call_type',
    'called_at', 'called_by', 'called_by_email', 'completion_date',
    'timer_started', 'timer_expired', 'time_remaining', 'completed_manually',
    'manually_tagged', 'tagged_by', 'tagged_by_email', 'tagged_at',
    'workflow_status', 'type', 'metadata'
]


class SyncInputSerializer(serializers.Serializer):
    filterStartDate = serializers.CharField(required=False, allow_blank=True)
    filterEndDate = serializers.CharField(required=False, allow_blank=True)
    dispatchDate = serializers.CharField(required=False, allow_blank=True)
    workOrders = serializers.ListField(child=serializers.DictField())


class WorkOrderSerializer(serializers.ModelSerializer):
    """Serializer for WorkOrder model"""
    workflow_status = serializers.CharField(source='compute_workflow_status', read_only=True)

    class Meta:
        model = WorkOrder
        fields = WORK_ORDER_FIELDS


class DeletedWorkOrderSerializer(serializers.ModelSerializer):
    """Serializer for DeletedWorkOrder model"""
    dashboard_id = serializers.IntegerField(source='dashboard.id', read_only=True)
    dashboard_name = serializers.SerializerMethodField()
    dashboard_created_at = serializers.DateTimeField(source='dashboard.created_at', read_only=True)

    class Meta:
        model = DeletedWorkOrder
        fields = [f for f in WORK_ORDER_FIELDS if f != 'dashboard'] + [
            'deleted_at', 'deleted_by', 'deleted_by_email', 'deleted_from',
            'original_work_order_id', 'is_permanently_deleted',
            'permanently_deleted_at', 'restored', 'restored_at', 'restored_by',
            'restored_by_email', 'dashboard_id', 'dashboard_name', 'dashboard_created_at'
        ]

    def get_dashboard_name(self, obj):
        if obj.dashboard:
            return f"Dashboard {obj.dashboard.id}"
        return None


class DashboardDataSerializer(serializers.ModelSerializer):
    """Serializer for DashboardData model"""
    work_orders = WorkOrderSerializer(many=True, read_only=True)
    deleted_work_orders = serializers.SerializerMethodField()

    class Meta:
        model = DashboardData
        fields = [
            'id', 'filter_start_date', 'filter_end_date', 'dispatch_date', 'work_orders',
            'deleted_work_orders', 'total_work_orders', 'total_deleted_work_orders',
            'total_active_deleted_work_orders', 'total_permanently_deleted_work_orders',
            'source', 'scraped_at', 'dashboard_metadata', 'created_at', 'updated_at'
        ]

    def get_deleted_work_orders(self, obj):
        deleted_orders = [d for d in obj.deleted_work_orders.all() if not d.is_permanently_deleted]
        return DeletedWorkOrderSerializer(deleted_orders, many=True).data


class DashboardWithHistorySerializer(serializers.ModelSerializer):
    """Serializer for dashboard with history"""
    active_work_orders = serializers.SerializerMethodField()
    deleted_work_orders_list = serializers.SerializerMethodField()
    permanently_deleted_work_orders = serializers.SerializerMethodField()

    class Meta:
        model = DashboardData
        fields = [
            'id', 'filter_start_date', 'filter_end_date',
            'active_work_orders', 'deleted_work_orders_list', 'permanently_deleted_work_orders',
            'total_work_orders', 'total_deleted_work_orders',
            'total_active_deleted_work_orders', 'total_permanently_deleted_work_orders',
            'scraped_at', 'dashboard_metadata', 'created_at', 'updated_at'
        ]

    def get_active_work_orders(self, obj):
        return WorkOrderSerializer(obj.work_orders.all(), many=True).data

    def get_deleted_work_orders_list(self, obj):
        deleted_orders = obj.deleted_work_orders.filter(is_permanently_deleted=False)
        return DeletedWorkOrderSerializer(deleted_orders, many=True).data

    def get_permanently_deleted_work_orders(self, obj):
        perm_deleted = obj.deleted_work_orders.filter(is_permanently_deleted=True)
        return DeletedWorkOrderSerializer(perm_deleted, many=True).data


class CallStatusUpdateSerializer(serializers.Serializer):
    """Serializer for updating call status"""
    locatesCalled = serializers.BooleanField(required=False, default=True)
    callType = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    calledAt = serializers.DateTimeField(required=False, allow_null=True)
    calledBy = serializers.CharField(required=False, allow_blank=True)
    calledByEmail = serializers.EmailField(required=False, allow_blank=True)

    def validate_locatesCalled(self, value):
        if not value:
            raise serializers.ValidationError("locatesCalled must be true to record a locate call")
        return value


class BulkCallStatusSerializer(serializers.Serializer):
    ids = serializers.ListField(child=serializers.CharField(), allow_empty=False)
    callType = serializers.CharField()
    calledBy = serializers.CharField(required=False, allow_blank=True)
    calledByEmail = serializers.EmailField(required=False, allow_blank=True)


class TagLocatesNeededSerializer(serializers.Serializer):
    workOrderNumber = serializers.CharField()
    tags = serializers.ListField(child=serializers.CharField(), required=False)
    taggedBy = serializers.CharField(required=False, allow_blank=True)
    taggedByEmail = serializers.EmailField(required=False, allow_blank=True)


class BulkTagLocatesNeededSerializer(serializers.Serializer):
    workOrderNumbers = serializers.ListField(child=serializers.CharField(), allow_empty=False)
    tags = serializers.ListField(child=serializers.CharField(), required=False)
    taggedBy = serializers.CharField(required=False, allow_blank=True)
    taggedByEmail = serializers.EmailField(required=False, allow_blank=True)


class CompleteWorkOrderSerializer(serializers.Serializer):
    completedBy = serializers.CharField(required=False, allow_blank=True)
    completedByEmail = serializers.EmailField(required=False, allow_blank=True)


class BulkDeleteSerializer(serializers.Serializer):
    """Serializer for bulk delete operations"""
    ids = serializers.ListField(
        child=serializers.CharField(),
        required=True,
        allow_empty=False
    )


class HistoryQuerySerializer(serializers.Serializer):
    page = serializers.IntegerField(required=False, min_value=1, default=1)
    limit = serializers.IntegerField(required=False, min_value=1, default=20)
    search = serializers.CharField(required=False, allow_blank=True)
