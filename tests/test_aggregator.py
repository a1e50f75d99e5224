from datetime import timedelta

import pytest

from locates.exceptions import NotFoundError, ValidationError
from locates.models import WorkOrder
from locates.services import aggregator, lifecycle, recycle_bin

from .factories import raw_order, standard_order

pytestmark = pytest.mark.django_db


@pytest.fixture
def board(make_dashboard, now):
    """
    WO-1 call needed, WO-2 in progress (emergency), WO-3 complete,
    WO-4 tagged by hand, WO-5 untagged standard order.
    """
    dashboard = make_dashboard(raw_order('WO-1'), raw_order('WO-2'), raw_order('WO-3'))
    wo2 = dashboard.work_orders.get(work_order_number='WO-2')
    wo3 = dashboard.work_orders.get(work_order_number='WO-3')

    lifecycle.record_call(wo3.pk, 'EMERGENCY', 'Morgan', now=now - timedelta(hours=6))
    lifecycle.sweep_expired_timers(now=now)
    lifecycle.record_call(wo2.pk, 'EMERGENCY', 'Morgan', now=now - timedelta(hours=1))

    standard_order(dashboard, 'WO-4')
    lifecycle.tag_as_locates_needed('WO-4', 'Morgan', now=now)
    standard_order(dashboard, 'WO-5')
    return dashboard


def test_statistics(board, now):
    stats = aggregator.statistics(now=now)

    assert stats['callNeeded'] == 2
    assert stats['inProgress'] == 1
    assert stats['complete'] == 1
    assert stats['unknown'] == 1
    assert stats['total'] == 4
    assert stats['breakdown'] == {'manualTags': 1, 'autoGenerated': 4}
    assert stats['lastUpdated'] == now.isoformat()


def test_statistics_recompute_instead_of_trusting_the_column(board, now):
    WorkOrder.objects.filter(work_order_number='WO-1').update(workflow_status='COMPLETE')
    assert aggregator.statistics(now=now)['callNeeded'] == 2


def test_statistics_on_an_empty_database(db, now):
    stats = aggregator.statistics(now=now)
    assert stats['total'] == 0
    assert stats['breakdown'] == {'manualTags': 0, 'autoGenerated': 0}


def test_list_with_status_filter(board, now):
    entries = aggregator.list_with_status('IN_PROGRESS', now=now)

    assert [e['work_order'].work_order_number for e in entries] == ['WO-2']
    assert entries[0]['status'] == 'IN_PROGRESS'
    assert entries[0]['hours_remaining'] == 3


def test_list_with_status_accepts_dashed_names(board, now):
    numbers = {e['work_order'].work_order_number for e in aggregator.list_with_status('call-needed', now=now)}
    assert numbers == {'WO-1', 'WO-4'}


def test_list_without_filter_returns_everything(board, now):
    entries = aggregator.list_with_status(None, now=now)
    assert len(entries) == 5
    assert all(e['hours_remaining'] is None for e in entries if e['status'] != 'IN_PROGRESS')


def test_invalid_status_filter(board, now):
    with pytest.raises(ValidationError):
        aggregator.list_with_status('DONE', now=now)


def test_in_progress_and_completed_lists(board, now):
    in_progress = aggregator.list_in_progress(now=now)
    assert [e['work_order'].work_order_number for e in in_progress] == ['WO-2']
    assert (in_progress[0]['hours'], in_progress[0]['minutes']) == (3, 0)

    completed = aggregator.list_completed(now=now)
    assert [e['work_order'].work_order_number for e in completed] == ['WO-3']
    assert completed[0]['hours_since_completion'] == 2


def test_needing_calls(board):
    assert {w.work_order_number for w in aggregator.list_needing_calls()} == {'WO-1', 'WO-4'}


def test_find_by_number_falls_back_to_the_recycle_bin(board, now):
    wo1 = board.work_orders.get(work_order_number='WO-1')
    recycle_bin.soft_delete(wo1.pk, 'Avery', now=now)

    record, is_deleted = aggregator.find_by_work_order_number('WO-1')
    assert is_deleted
    assert record.original_work_order_id == wo1.pk

    record, is_deleted = aggregator.find_by_work_order_number('WO-2')
    assert not is_deleted

    with pytest.raises(NotFoundError):
        aggregator.find_by_work_order_number('WO-404')


def test_find_by_number_prefers_the_newest_snapshot(make_dashboard):
    make_dashboard(raw_order('WO-1'))
    newer = make_dashboard(raw_order('WO-1'))
    record, _ = aggregator.find_by_work_order_number('WO-1')
    assert record.dashboard_id == newer.pk


def test_dashboard_with_history_missing(db):
    with pytest.raises(NotFoundError):
        aggregator.dashboard_with_history(12345)
