from datetime import timedelta

import pytest

from locates.models import WorkOrder
from locates.services import aggregator, ingestion, lifecycle, recycle_bin

from .factories import aware, raw_order

pytestmark = pytest.mark.django_db


def test_ingest_call_expire(now):
    dashboard = ingestion.ingest([raw_order('A'), raw_order('B'), raw_order('A')], now=now)
    assert aggregator.statistics(now=now)['callNeeded'] == 2

    a = dashboard.work_orders.get(work_order_number='A')
    lifecycle.record_call(a.pk, 'EMERGENCY', 'Morgan', now=now)

    stats = aggregator.statistics(now=now)
    assert (stats['callNeeded'], stats['inProgress'], stats['complete']) == (1, 1, 0)

    assert lifecycle.sweep_expired_timers(now=now + timedelta(hours=4, minutes=1)) == 1
    stats = aggregator.statistics(now=now)
    assert (stats['callNeeded'], stats['inProgress'], stats['complete']) == (1, 0, 1)


def test_friday_standard_call_survives_the_weekend(make_dashboard):
    friday = aware(2024, 3, 8, 10, 0)
    dashboard = make_dashboard(raw_order('A'), now=friday)
    a = dashboard.work_orders.get()
    lifecycle.record_call(a.pk, 'STANDARD', 'Morgan', now=friday)

    assert lifecycle.sweep_expired_timers(now=aware(2024, 3, 11, 10, 0)) == 0
    assert lifecycle.sweep_expired_timers(now=aware(2024, 3, 12, 10, 0)) == 1


def test_deleted_in_progress_order_comes_back_running(dashboard, now):
    a = dashboard.work_orders.get(work_order_number='WO-100')
    lifecycle.record_call(a.pk, 'STANDARD', 'Morgan', now=now)

    deleted = recycle_bin.soft_delete(a.pk, 'Avery', now=now)
    # Timers on deleted orders are not swept
    assert lifecycle.sweep_expired_timers(now=now + timedelta(days=5)) == 0

    restored = recycle_bin.restore(dashboard.pk, deleted.pk, 'Jordan', now=now)
    assert restored.workflow_status == WorkOrder.WorkflowStatus.IN_PROGRESS
    assert lifecycle.sweep_expired_timers(now=now + timedelta(days=5)) == 1
