from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from drf_yasg.utils import swagger_auto_schema
from drf_yasg import openapi

from .serializers import (
    DashboardDataSerializer, WorkOrderSerializer, DeletedWorkOrderSerializer,
    DashboardWithHistorySerializer, SyncInputSerializer, CallStatusUpdateSerializer,
    BulkCallStatusSerializer, TagLocatesNeededSerializer, BulkTagLocatesNeededSerializer,
    CompleteWorkOrderSerializer, BulkDeleteSerializer, HistoryQuerySerializer
)
from .services import aggregator, ingestion, lifecycle, recycle_bin
from .utils import format_response


def get_actor(request, name=None, email=None, default='Unknown'):
    """
    The person behind a request: the authenticated user when there is one,
    otherwise whoever the body names.
    """
    user = getattr(request, 'user', None)
    if user is not None and user.is_authenticated:
        return user.get_full_name() or user.get_username(), user.email or email or ''
    return name or default, email or ''


def bulk_response(results, action):
    successful = sum(1 for r in results if r['success'])
    failed = len(results) - successful
    return Response(format_response(
        True,
        message=f"{successful} work order(s) {action}, {failed} failed",
        data=results,
        totalRequested=len(results),
        successful=successful,
        failed=failed
    ))


# ============================================================================
# INGESTION
# ============================================================================

class SyncDashboardView(APIView):

    @swagger_auto_schema(
        responses={201: DashboardDataSerializer},
        operation_description="Scrape the dispatch board and store the EXCAVATOR work orders as a new dashboard."
    )
    def get(self, request):
        from automation.main import fetch_dashboard_work_orders

        dashboard = ingestion.sync_from_scraper(
            fetch_dashboard_work_orders,
            status_name=request.query_params.get('status'),
            start_date=request.query_params.get('startDate'),
            end_date=request.query_params.get('endDate'),
        )
        return Response(format_response(
            True,
            message="Dashboard synced successfully",
            data=DashboardDataSerializer(dashboard).data
        ), status=status.HTTP_201_CREATED)

    @swagger_auto_schema(
        request_body=SyncInputSerializer,
        responses={201: DashboardDataSerializer},
        operation_description="Sync dashboard data. Filters for EXCAVATOR and deduplicates."
    )
    def post(self, request):
        serializer = SyncInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        dashboard = ingestion.ingest(
            data['workOrders'],
            filter_start_date=data.get('filterStartDate'),
            filter_end_date=data.get('filterEndDate'),
            dispatch_date=data.get('dispatchDate'),
        )
        return Response(format_response(
            True,
            message="Dashboard synced successfully",
            data=DashboardDataSerializer(dashboard).data
        ), status=status.HTTP_201_CREATED)


# ============================================================================
# DASHBOARD QUERIES
# ============================================================================

class DashboardListView(APIView):
    @swagger_auto_schema(responses={200: DashboardDataSerializer(many=True)})
    def get(self, request):
        serializer = DashboardDataSerializer(aggregator.list_dashboards(), many=True)
        return Response(format_response(True, data=serializer.data, total=len(serializer.data)))


class LocatesStatisticsView(APIView):
    @swagger_auto_schema(operation_description="Work order counts by workflow status and origin")
    def get(self, request):
        return Response(format_response(True, data=aggregator.statistics()))


class LocatesWithStatusView(APIView):
    status_param = openapi.Parameter(
        'status', openapi.IN_QUERY, type=openapi.TYPE_STRING,
        description="CALL_NEEDED, IN_PROGRESS, COMPLETE or UNKNOWN (call-needed style also accepted)"
    )

    @swagger_auto_schema(manual_parameters=[status_param])
    def get(self, request):
        filter_status = request.query_params.get('status')
        entries = aggregator.list_with_status(filter_status)

        data = []
        for entry in entries:
            item = WorkOrderSerializer(entry['work_order']).data
            item['status'] = entry['status']
            item['hours_remaining'] = entry['hours_remaining']
            data.append(item)

        return Response(format_response(
            True, data=data, total=len(data), filteredBy=filter_status or 'all'
        ))


class LocatesNeedingCallsView(APIView):
    @swagger_auto_schema(responses={200: WorkOrderSerializer(many=True)})
    def get(self, request):
        serializer = WorkOrderSerializer(aggregator.list_needing_calls(), many=True)
        return Response(format_response(True, data=serializer.data, total=len(serializer.data)))


class InProgressLocatesView(APIView):
    @swagger_auto_schema(operation_description="In-progress locates, soonest deadline first")
    def get(self, request):
        data = []
        for entry in aggregator.list_in_progress():
            item = WorkOrderSerializer(entry['work_order']).data
            item['time_remaining_detail'] = {
                'hours': entry['hours'],
                'minutes': entry['minutes'],
                'totalHours': entry['total_hours'],
            }
            data.append(item)
        return Response(format_response(True, data=data, total=len(data)))


class CompletedLocatesView(APIView):
    @swagger_auto_schema(operation_description="Completed locates, most recent first")
    def get(self, request):
        data = []
        for entry in aggregator.list_completed():
            item = WorkOrderSerializer(entry['work_order']).data
            item['hours_since_completion'] = entry['hours_since_completion']
            data.append(item)
        return Response(format_response(True, data=data, total=len(data)))


class WorkOrderByNumberView(APIView):
    def get(self, request, work_order_number):
        record, is_deleted = aggregator.find_by_work_order_number(work_order_number)
        serializer_class = DeletedWorkOrderSerializer if is_deleted else WorkOrderSerializer
        return Response(format_response(
            True,
            data=serializer_class(record).data,
            source='deleted' if is_deleted else 'active'
        ))


# ============================================================================
# WORK ORDER LIFECYCLE
# ============================================================================

class UpdateCallStatusView(APIView):

    @swagger_auto_schema(request_body=CallStatusUpdateSerializer)
    def patch(self, request, pk):
        serializer = CallStatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        called_by, called_by_email = get_actor(
            request, data.get('calledBy'), data.get('calledByEmail'), default=None
        )
        work_order = lifecycle.record_call(
            pk,
            data.get('callType'),
            called_by,
            called_by_email,
            called_at=data.get('calledAt'),
        )

        return Response(format_response(
            True,
            message='Work order call status updated successfully',
            data=WorkOrderSerializer(work_order).data
        ))


class BulkCallStatusView(APIView):

    @swagger_auto_schema(request_body=BulkCallStatusSerializer)
    def patch(self, request):
        serializer = BulkCallStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        called_by, called_by_email = get_actor(
            request, data.get('calledBy'), data.get('calledByEmail'), default=None
        )
        results = lifecycle.bulk_record_call(data['ids'], data['callType'], called_by, called_by_email)
        return bulk_response(results, 'marked as called')


class TagLocatesNeededView(APIView):

    @swagger_auto_schema(request_body=TagLocatesNeededSerializer)
    def post(self, request):
        serializer = TagLocatesNeededSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        tagged_by, tagged_by_email = get_actor(request, data.get('taggedBy'), data.get('taggedByEmail'))
        work_order = lifecycle.tag_as_locates_needed(
            data['workOrderNumber'], tagged_by, tagged_by_email, tags=data.get('tags')
        )
        return Response(format_response(
            True,
            message="Locates needed tag applied successfully",
            data=WorkOrderSerializer(work_order).data
        ))


class BulkTagLocatesNeededView(APIView):

    @swagger_auto_schema(request_body=BulkTagLocatesNeededSerializer)
    def post(self, request):
        serializer = BulkTagLocatesNeededSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        tagged_by, tagged_by_email = get_actor(request, data.get('taggedBy'), data.get('taggedByEmail'))
        results = lifecycle.bulk_tag_as_locates_needed(
            data['workOrderNumbers'], tagged_by, tagged_by_email, tags=data.get('tags')
        )
        return bulk_response(results, 'tagged as locates needed')


class CompleteWorkOrderView(APIView):

    @swagger_auto_schema(
        request_body=CompleteWorkOrderSerializer,
        operation_description="Complete a work order before its timer runs out"
    )
    def patch(self, request, pk):
        serializer = CompleteWorkOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        completed_by, completed_by_email = get_actor(
            request, data.get('completedBy'), data.get('completedByEmail')
        )
        work_order = lifecycle.complete_manually(pk, completed_by, completed_by_email)
        return Response(format_response(
            True,
            message="Work order marked as complete",
            data=WorkOrderSerializer(work_order).data
        ))


class CheckExpiredTimersView(APIView):
    def get(self, request):
        count = lifecycle.sweep_expired_timers()
        return Response(format_response(
            True,
            message=f"Updated {count} expired work orders",
            expiredCount=count
        ))


# ============================================================================
# RECYCLE BIN
# ============================================================================

class WorkOrderOperationsView(APIView):
    """
    Soft delete of a single work order
    """

    @swagger_auto_schema(
        operation_description="Delete Work Order (Soft Delete - Move to Recycle Bin)",
        responses={200: "Work order moved to recycle bin successfully"}
    )
    def delete(self, request, pk):
        deleted_by, deleted_by_email = get_actor(request)
        deleted_wo = recycle_bin.soft_delete(pk, deleted_by, deleted_by_email)
        return Response(format_response(
            True,
            message="Work order moved to recycle bin successfully",
            data=DeletedWorkOrderSerializer(deleted_wo).data
        ))


class BulkDeleteView(APIView):
    @swagger_auto_schema(request_body=BulkDeleteSerializer)
    def delete(self, request):
        serializer = BulkDeleteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        deleted_by, deleted_by_email = get_actor(request)
        results = recycle_bin.bulk_soft_delete(serializer.validated_data['ids'], deleted_by, deleted_by_email)
        return bulk_response(results, 'moved to recycle bin')


class DeletedHistoryView(APIView):
    @swagger_auto_schema(query_serializer=HistoryQuerySerializer)
    def get(self, request):
        serializer = HistoryQuerySerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        params = serializer.validated_data

        history = recycle_bin.list_history(params['page'], params['limit'], params.get('search'))
        return Response(format_response(
            True,
            data=DeletedWorkOrderSerializer(history['items'], many=True).data,
            count=history['count'],
            total=history['total'],
            totalPages=history['totalPages'],
            currentPage=history['currentPage']
        ))


class DashboardWithHistoryView(APIView):
    @swagger_auto_schema(responses={200: DashboardWithHistorySerializer})
    def get(self, request, pk):
        dashboard = aggregator.dashboard_with_history(pk)
        return Response(format_response(True, data=DashboardWithHistorySerializer(dashboard).data))


class RestoreWorkOrderView(APIView):
    @swagger_auto_schema(
        operation_description="Restore a deleted work order to active list",
        responses={200: "Work order restored successfully"}
    )
    def post(self, request, dashboard_id, deleted_order_id):
        restored_by, restored_by_email = get_actor(request)
        work_order = recycle_bin.restore(dashboard_id, deleted_order_id, restored_by, restored_by_email)
        return Response(format_response(
            True,
            message="Work order restored successfully",
            data=WorkOrderSerializer(work_order).data
        ))


class PermanentDeleteView(APIView):
    @swagger_auto_schema(operation_description="Remove a recycle bin entry for good")
    def delete(self, request, dashboard_id, deleted_order_id):
        work_order_number = recycle_bin.permanently_delete(dashboard_id, deleted_order_id)
        return Response(format_response(
            True,
            message=f"Work order {work_order_number} permanently deleted"
        ))


class BulkPermanentDeleteView(APIView):
    @swagger_auto_schema(request_body=BulkDeleteSerializer)
    def delete(self, request):
        serializer = BulkDeleteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        results = recycle_bin.bulk_permanently_delete(serializer.validated_data['ids'])
        return bulk_response(results, 'permanently deleted')


class ClearAllHistoryView(APIView):
    @swagger_auto_schema(operation_description="Empty every recycle bin. Cannot be undone.")
    def delete(self, request):
        cleared = recycle_bin.clear_all_history()
        return Response(format_response(
            True,
            message=f"Cleared {cleared} work order(s) from history",
            clearedCount=cleared
        ))
