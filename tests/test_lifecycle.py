import uuid
from datetime import timedelta

import pytest

from locates.exceptions import ConflictError, NotFoundError, ValidationError
from locates.models import WorkOrder
from locates.services import lifecycle

from .factories import aware, raw_order, standard_order

pytestmark = pytest.mark.django_db


def order(dashboard, number='WO-100'):
    return dashboard.work_orders.get(work_order_number=number)


class TestRecordCall:

    def test_emergency_call_starts_a_four_hour_timer(self, dashboard, now):
        work_order = lifecycle.record_call(order(dashboard).pk, 'EMERGENCY', 'Morgan', 'morgan@example.com', now=now)

        work_order.refresh_from_db()
        assert work_order.locates_called
        assert work_order.timer_started and not work_order.timer_expired
        assert work_order.called_at == now
        assert work_order.completion_date == now + timedelta(hours=4)
        assert work_order.workflow_status == WorkOrder.WorkflowStatus.IN_PROGRESS
        assert work_order.called_by_email == 'morgan@example.com'

    def test_standard_call_on_friday_is_due_tuesday(self, dashboard):
        friday = aware(2024, 3, 8, 10, 0)
        work_order = lifecycle.record_call(order(dashboard).pk, 'STANDARD', 'Morgan', called_at=friday, now=friday)
        assert work_order.completion_date == aware(2024, 3, 12, 10, 0)

    def test_call_type_defaults_to_standard(self, dashboard, now):
        work_order = lifecycle.record_call(order(dashboard).pk, None, 'Morgan', now=now)
        assert work_order.call_type == WorkOrder.CallType.STANDARD

    def test_lowercase_call_type_is_accepted(self, dashboard, now):
        work_order = lifecycle.record_call(order(dashboard).pk, 'emergency', 'Morgan', now=now)
        assert work_order.call_type == WorkOrder.CallType.EMERGENCY

    def test_unknown_call_type_is_rejected(self, dashboard, now):
        with pytest.raises(ValidationError):
            lifecycle.record_call(order(dashboard).pk, 'URGENT', 'Morgan', now=now)
        assert not order(dashboard).locates_called

    def test_caller_name_is_required(self, dashboard, now):
        with pytest.raises(ValidationError):
            lifecycle.record_call(order(dashboard).pk, 'STANDARD', '', now=now)

    def test_unknown_work_order(self, dashboard, now):
        with pytest.raises(NotFoundError):
            lifecycle.record_call(uuid.uuid4(), 'STANDARD', 'Morgan', now=now)

    def test_malformed_id(self, dashboard, now):
        with pytest.raises(ValidationError):
            lifecycle.record_call('not-a-uuid', 'STANDARD', 'Morgan', now=now)

    def test_recalling_restarts_the_timer(self, dashboard, now):
        work_order = order(dashboard)
        lifecycle.record_call(work_order.pk, 'EMERGENCY', 'Morgan', now=now)
        lifecycle.sweep_expired_timers(now=now + timedelta(hours=5))

        later = now + timedelta(hours=6)
        work_order = lifecycle.record_call(work_order.pk, 'EMERGENCY', 'Morgan', now=later)
        assert not work_order.timer_expired
        assert work_order.completion_date == later + timedelta(hours=4)
        assert work_order.workflow_status == WorkOrder.WorkflowStatus.IN_PROGRESS


class TestBulkRecordCall:

    def test_ineligible_and_missing_orders_fail_individually(self, dashboard, now):
        plain = standard_order(dashboard, 'WO-STD')
        missing = uuid.uuid4()
        ids = [str(order(dashboard).pk), str(plain.pk), str(missing)]

        results = lifecycle.bulk_record_call(ids, 'STANDARD', 'Morgan', now=now)

        assert [r['success'] for r in results] == [True, False, False]
        assert order(dashboard).metadata['bulkUpdate'] is True
        assert not WorkOrder.objects.get(pk=plain.pk).locates_called

    def test_manually_tagged_orders_are_eligible(self, dashboard, now):
        plain = standard_order(dashboard, 'WO-STD')
        lifecycle.tag_as_locates_needed('WO-STD', 'Morgan', now=now)
        results = lifecycle.bulk_record_call([str(plain.pk)], 'EMERGENCY', 'Morgan', now=now)
        assert results[0]['success']

    @pytest.mark.parametrize('ids', [[], 'abc', None])
    def test_ids_must_be_a_non_empty_list(self, ids):
        with pytest.raises(ValidationError):
            lifecycle.bulk_record_call(ids, 'STANDARD', 'Morgan')


class TestTagging:

    def test_tagging_a_standard_order_makes_it_call_needed(self, dashboard, now):
        standard_order(dashboard, 'WO-STD', tags='Septic')

        work_order = lifecycle.tag_as_locates_needed('WO-STD', 'Morgan', 'morgan@example.com', now=now)

        assert work_order.manually_tagged
        assert work_order.priority_name == 'EXCAVATOR'
        assert work_order.priority_color == lifecycle.LOCATES_NEEDED_COLOR
        assert work_order.type == WorkOrder.OrderType.EXCAVATOR
        assert work_order.tags == 'Septic, Locates Needed'
        assert work_order.tagged_at == now
        assert work_order.workflow_status == WorkOrder.WorkflowStatus.CALL_NEEDED

    def test_tagging_a_manually_completed_order_reopens_it(self, dashboard, now):
        lifecycle.complete_manually(order(dashboard).pk, 'Avery', now=now)

        work_order = lifecycle.tag_as_locates_needed('WO-100', 'Morgan', now=now)

        work_order.refresh_from_db()
        assert not work_order.completed_manually
        assert work_order.workflow_status == WorkOrder.WorkflowStatus.CALL_NEEDED
        assert work_order.compute_workflow_status() == WorkOrder.WorkflowStatus.CALL_NEEDED

    def test_tag_appears_once_after_repeated_tagging(self, dashboard, now):
        lifecycle.tag_as_locates_needed('WO-100', 'Morgan', tags=['locates needed', 'Priority'], now=now)
        work_order = lifecycle.tag_as_locates_needed('WO-100', 'Morgan', now=now)
        assert work_order.tags == 'Locates Needed, Priority'

    def test_newest_snapshot_wins(self, make_dashboard, now):
        make_dashboard(raw_order('WO-1'))
        newer = make_dashboard(raw_order('WO-1'))
        work_order = lifecycle.tag_as_locates_needed('WO-1', 'Morgan', now=now)
        assert work_order.dashboard_id == newer.pk

    def test_unknown_number(self, dashboard, now):
        with pytest.raises(NotFoundError):
            lifecycle.tag_as_locates_needed('WO-404', 'Morgan', now=now)

    def test_bulk_tag_reports_partial_failure(self, dashboard, now):
        results = lifecycle.bulk_tag_as_locates_needed(['WO-100', 'WO-404', 'WO-200'], 'Morgan', now=now)

        assert [r['success'] for r in results] == [True, False, True]
        assert results[1]['workOrderNumber'] == 'WO-404'
        assert 'not found' in results[1]['message']
        assert order(dashboard, 'WO-200').manually_tagged


def test_merge_tags_accepts_comma_strings():
    assert lifecycle.merge_tags('A, B', 'b, C') == 'A, B, Locates Needed, C'
    assert lifecycle.merge_tags(None) == 'Locates Needed'


class TestSweep:

    def test_only_expired_timers_move_to_complete(self, dashboard, now):
        first, second = order(dashboard, 'WO-100'), order(dashboard, 'WO-200')
        lifecycle.record_call(first.pk, 'EMERGENCY', 'Morgan', now=now)
        lifecycle.record_call(second.pk, 'STANDARD', 'Morgan', now=now)

        assert lifecycle.sweep_expired_timers(now=now + timedelta(hours=4)) == 1

        first.refresh_from_db()
        second.refresh_from_db()
        assert first.timer_expired
        assert first.workflow_status == WorkOrder.WorkflowStatus.COMPLETE
        assert first.metadata['autoMovedToComplete'] is True
        assert second.workflow_status == WorkOrder.WorkflowStatus.IN_PROGRESS

    def test_second_sweep_changes_nothing(self, dashboard, now):
        lifecycle.record_call(order(dashboard).pk, 'EMERGENCY', 'Morgan', now=now)
        later = now + timedelta(hours=5)

        assert lifecycle.sweep_expired_timers(now=later) == 1
        assert lifecycle.sweep_expired_timers(now=later) == 0

    def test_uncalled_orders_are_ignored(self, dashboard, now):
        assert lifecycle.sweep_expired_timers(now=now + timedelta(days=30)) == 0


class TestCompleteManually:

    def test_completes_an_in_progress_order(self, dashboard, now):
        work_order = order(dashboard)
        lifecycle.record_call(work_order.pk, 'STANDARD', 'Morgan', now=now)

        done = lifecycle.complete_manually(work_order.pk, 'Avery', now=now + timedelta(hours=1))

        done.refresh_from_db()
        assert done.workflow_status == WorkOrder.WorkflowStatus.COMPLETE
        assert done.completed_manually
        assert done.metadata['manuallyCompletedBy'] == 'Avery'
        assert lifecycle.sweep_expired_timers(now=now + timedelta(days=10)) == 0

    def test_already_complete_is_a_conflict(self, dashboard, now):
        work_order = order(dashboard)
        lifecycle.complete_manually(work_order.pk, 'Avery', now=now)
        with pytest.raises(ConflictError):
            lifecycle.complete_manually(work_order.pk, 'Avery', now=now)

    def test_calling_again_reopens_the_timer(self, dashboard, now):
        work_order = order(dashboard)
        lifecycle.complete_manually(work_order.pk, 'Avery', now=now)
        reopened = lifecycle.record_call(work_order.pk, 'EMERGENCY', 'Morgan', now=now)
        assert reopened.workflow_status == WorkOrder.WorkflowStatus.IN_PROGRESS
