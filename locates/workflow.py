"""
Locate workflow rules.

Pure functions over work order fields: the workflow status table and the
timer read-outs shown on the dashboard. Nothing here touches the database, so
callers pass ``now`` explicitly.
"""
import math
from datetime import timedelta

CALL_NEEDED = 'CALL_NEEDED'
IN_PROGRESS = 'IN_PROGRESS'
COMPLETE = 'COMPLETE'
UNKNOWN = 'UNKNOWN'

WORKFLOW_STATUSES = (CALL_NEEDED, IN_PROGRESS, COMPLETE, UNKNOWN)

EXCAVATOR = 'EXCAVATOR'
EMERGENCY = 'EMERGENCY'


def is_excavator_priority(priority_name):
    return bool(priority_name) and priority_name.upper() == EXCAVATOR


def derive_status(*, manually_tagged, priority_name, locates_called, timer_started, timer_expired):
    """
    Workflow status for a work order, evaluated top to bottom:

        manually tagged, not called          -> CALL_NEEDED
        EXCAVATOR priority, not called       -> CALL_NEEDED
        called, timer running                -> IN_PROGRESS
        called, timer expired                -> COMPLETE
        anything else                        -> UNKNOWN
    """
    if manually_tagged and not locates_called:
        return CALL_NEEDED
    if is_excavator_priority(priority_name) and not locates_called:
        return CALL_NEEDED
    if locates_called and timer_started and not timer_expired:
        return IN_PROGRESS
    if locates_called and timer_expired:
        return COMPLETE
    return UNKNOWN


def is_deadline_passed(work_order, now):
    return (
        not work_order.completion_date
        or work_order.timer_expired
        or work_order.completion_date <= now
    )


def time_remaining(work_order, now):
    """
    Remaining time on a work order's locate timer.

    Emergency calls report hours and minutes. Standard calls report whole days
    rounded up from the calendar delta, which is not business-day aware even
    though the deadline itself is.
    """
    if is_deadline_passed(work_order, now):
        return {'expired': True}

    diff = work_order.completion_date - now

    if work_order.call_type == EMERGENCY:
        total_minutes = int(diff.total_seconds() // 60)
        hours, minutes = divmod(total_minutes, 60)
        return {'expired': False, 'hours': hours, 'minutes': minutes}

    days = math.ceil(diff / timedelta(days=1))
    return {'expired': False, 'days': days}


def format_time_remaining(work_order, now):
    remaining = time_remaining(work_order, now)
    if remaining['expired']:
        return "Expired"

    if 'hours' in remaining:
        return f"{remaining['hours']}h {remaining['minutes']}m"

    days = remaining['days']
    return f"{days} business day{'s' if days != 1 else ''}"


def hours_remaining(work_order, now):
    if not work_order.completion_date:
        return None
    return max(0, math.ceil((work_order.completion_date - now) / timedelta(hours=1)))
