from django.urls import path
from . import views

app_name = 'locates'

urlpatterns = [
    # Sync routes
    path('sync-dashboard/', views.SyncDashboardView.as_view(), name='sync_dashboard'),

    # Dashboard queries
    path('all-locates/', views.DashboardListView.as_view(), name='all_locates'),
    path('statistics/', views.LocatesStatisticsView.as_view(), name='statistics'),
    path('locates-with-status/', views.LocatesWithStatusView.as_view(), name='locates_with_status'),
    path('needing-calls/', views.LocatesNeedingCallsView.as_view(), name='needing_calls'),
    path('in-progress/', views.InProgressLocatesView.as_view(), name='in_progress'),
    path('completed/', views.CompletedLocatesView.as_view(), name='completed'),

    # Work order management (fixed paths before the <uuid>/<str> ones)
    path('work-order/bulk-delete/', views.BulkDeleteView.as_view(), name='bulk_delete_work_orders'),
    path('work-order/bulk-call-status/', views.BulkCallStatusView.as_view(), name='bulk_call_status'),
    path('work-order/tag-locates-needed/', views.TagLocatesNeededView.as_view(), name='tag_locates_needed'),
    path('work-order/bulk-tag-locates-needed/', views.BulkTagLocatesNeededView.as_view(), name='bulk_tag_locates_needed'),
    path('work-order/<uuid:pk>/', views.WorkOrderOperationsView.as_view(), name='delete_work_order'),
    path('work-order/<uuid:pk>/update-call-status/', views.UpdateCallStatusView.as_view(), name='update_call_status'),
    path('work-order/<uuid:pk>/complete/', views.CompleteWorkOrderView.as_view(), name='complete_work_order'),

    # Timer and work order queries
    path('check-expired-timers/', views.CheckExpiredTimersView.as_view(), name='check_expired_timers'),
    path('work-order/<str:work_order_number>/', views.WorkOrderByNumberView.as_view(), name='get_work_order_by_number'),

    # History management routes
    path('deleted-history/', views.DeletedHistoryView.as_view(), name='deleted_history'),
    path('dashboard/<int:pk>/history/', views.DashboardWithHistoryView.as_view(), name='dashboard_with_history'),
    path('history/bulk-permanent-delete/', views.BulkPermanentDeleteView.as_view(), name='bulk_permanent_delete'),
    path('history/clear-all/', views.ClearAllHistoryView.as_view(), name='clear_all_history'),
    path('history/<int:dashboard_id>/<uuid:deleted_order_id>/restore/', views.RestoreWorkOrderView.as_view(), name='restore_work_order'),
    path('history/<int:dashboard_id>/<uuid:deleted_order_id>/permanent/', views.PermanentDeleteView.as_view(), name='permanently_delete'),
]
