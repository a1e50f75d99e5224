import itertools
from datetime import timedelta
from types import SimpleNamespace

import pytest
from django.test import override_settings
from django.utils import timezone

from locates import workflow
from locates.utils import add_business_days, calculate_completion_date

from .factories import aware


def status(manually_tagged=False, priority_name='', locates_called=False,
           timer_started=False, timer_expired=False):
    return workflow.derive_status(
        manually_tagged=manually_tagged,
        priority_name=priority_name,
        locates_called=locates_called,
        timer_started=timer_started,
        timer_expired=timer_expired,
    )


def timed_order(completion_date, call_type='STANDARD', timer_expired=False):
    return SimpleNamespace(completion_date=completion_date, call_type=call_type, timer_expired=timer_expired)


class TestDeriveStatus:

    def test_manual_tag_without_call_needs_a_call(self):
        assert status(manually_tagged=True, priority_name='STANDARD') == workflow.CALL_NEEDED

    @pytest.mark.parametrize('priority', ['EXCAVATOR', 'excavator', 'Excavator'])
    def test_excavator_without_call_needs_a_call(self, priority):
        assert status(priority_name=priority) == workflow.CALL_NEEDED

    def test_running_timer_is_in_progress(self):
        assert status(priority_name='EXCAVATOR', locates_called=True, timer_started=True) == workflow.IN_PROGRESS

    def test_expired_timer_is_complete(self):
        assert status(locates_called=True, timer_started=True, timer_expired=True) == workflow.COMPLETE
        assert status(locates_called=True, timer_expired=True) == workflow.COMPLETE

    def test_untagged_standard_order_is_unknown(self):
        assert status(priority_name='STANDARD') == workflow.UNKNOWN

    def test_called_without_timer_is_unknown(self):
        assert status(priority_name='EXCAVATOR', locates_called=True) == workflow.UNKNOWN

    def test_manual_tag_outranks_everything_until_called(self):
        assert status(manually_tagged=True, timer_started=True, timer_expired=True) == workflow.CALL_NEEDED

    def test_every_combination_yields_one_known_status(self):
        for flags in itertools.product([True, False], repeat=4):
            for priority in ('EXCAVATOR', 'STANDARD', ''):
                kwargs = dict(zip(
                    ('manually_tagged', 'locates_called', 'timer_started', 'timer_expired'), flags
                ))
                first = status(priority_name=priority, **kwargs)
                assert first in workflow.WORKFLOW_STATUSES
                assert status(priority_name=priority, **kwargs) == first


class TestCompletionDate:

    def test_emergency_is_four_hours(self):
        called_at = aware(2024, 3, 8, 22, 30)
        assert calculate_completion_date(called_at, 'EMERGENCY') == called_at + timedelta(hours=4)

    def test_standard_skips_the_weekend(self):
        friday = aware(2024, 3, 8, 10, 0)
        assert calculate_completion_date(friday, 'STANDARD') == aware(2024, 3, 12, 10, 0)

    @pytest.mark.parametrize('start, expected', [
        (aware(2024, 3, 6, 14, 0), aware(2024, 3, 8, 14, 0)),    # Wednesday -> Friday
        (aware(2024, 3, 7, 8, 15), aware(2024, 3, 11, 8, 15)),   # Thursday -> Monday
        (aware(2024, 3, 9, 10, 0), aware(2024, 3, 12, 10, 0)),   # Saturday -> Tuesday
        (aware(2024, 3, 10, 10, 0), aware(2024, 3, 12, 10, 0)),  # Sunday -> Tuesday
    ])
    def test_standard_is_two_business_days(self, start, expected):
        assert calculate_completion_date(start) == expected

    def test_zero_business_days_is_the_start(self):
        start = aware(2024, 3, 9, 10, 0)
        assert add_business_days(start, 0) == start

    @override_settings(TIME_ZONE='America/Chicago')
    def test_weekend_is_judged_on_the_local_calendar(self):
        # Friday 19:00 in Chicago is already Saturday in UTC
        friday_evening = aware(2024, 3, 9, 1, 0)

        deadline = timezone.localtime(calculate_completion_date(friday_evening, 'STANDARD'))

        assert (deadline.year, deadline.month, deadline.day) == (2024, 3, 12)
        assert (deadline.hour, deadline.minute) == (19, 0)


class TestTimeRemaining:

    def test_missing_deadline_reads_as_expired(self, now):
        assert workflow.time_remaining(timed_order(None), now) == {'expired': True}
        assert workflow.format_time_remaining(timed_order(None), now) == "Expired"

    def test_passed_deadline_reads_as_expired(self, now):
        assert workflow.time_remaining(timed_order(now - timedelta(minutes=1)), now)['expired']
        assert workflow.time_remaining(timed_order(now), now)['expired']

    def test_expired_flag_wins_over_the_clock(self, now):
        order = timed_order(now + timedelta(days=1), timer_expired=True)
        assert workflow.format_time_remaining(order, now) == "Expired"

    def test_emergency_shows_hours_and_minutes(self, now):
        order = timed_order(now + timedelta(hours=3, minutes=25, seconds=40), call_type='EMERGENCY')
        assert workflow.time_remaining(order, now) == {'expired': False, 'hours': 3, 'minutes': 25}
        assert workflow.format_time_remaining(order, now) == "3h 25m"

    def test_standard_rounds_days_up(self, now):
        order = timed_order(now + timedelta(hours=20))
        assert workflow.format_time_remaining(order, now) == "1 business day"

    def test_standard_display_counts_calendar_days_over_a_weekend(self):
        # Known mismatch: the deadline is two business days out but the
        # read-out counts the weekend too.
        friday = aware(2024, 3, 8, 10, 0)
        order = timed_order(calculate_completion_date(friday, 'STANDARD'))
        assert workflow.format_time_remaining(order, friday) == "4 business days"

    def test_hours_remaining_rounds_up_and_floors_at_zero(self, now):
        assert workflow.hours_remaining(timed_order(now + timedelta(minutes=90)), now) == 2
        assert workflow.hours_remaining(timed_order(now - timedelta(hours=5)), now) == 0
        assert workflow.hours_remaining(timed_order(None), now) is None
