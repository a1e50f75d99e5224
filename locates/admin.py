from django.contrib import admin
from .models import DashboardData, WorkOrder, DeletedWorkOrder

admin.site.site_header = "Locates Dashboard"          # Login page & Top Bar
admin.site.site_title = "Locates Dashboard Admin"     # Browser Tab Title
admin.site.index_title = "Welcome to Locates Dashboard" # Home page subtitle


@admin.register(DashboardData)
class DashboardDataAdmin(admin.ModelAdmin):
    list_display = ('id', 'filter_start_date', 'filter_end_date', 'total_work_orders', 'source', 'scraped_at')


@admin.register(WorkOrder)
class WorkOrderAdmin(admin.ModelAdmin):
    list_display = ('work_order_number', 'customer_name', 'priority_name', 'workflow_status', 'call_type', 'completion_date')
    list_filter = ('workflow_status', 'call_type', 'manually_tagged')
    search_fields = ('work_order_number', 'customer_name', 'customer_address')
    readonly_fields = ('workflow_status',)


@admin.register(DeletedWorkOrder)
class DeletedWorkOrderAdmin(admin.ModelAdmin):
    list_display = ('work_order_number', 'customer_name', 'deleted_by', 'deleted_at', 'is_permanently_deleted')
    list_filter = ('is_permanently_deleted',)
    search_fields = ('work_order_number', 'customer_name', 'deleted_by')
