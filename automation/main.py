"""
Locates Dashboard - Scraper Entry Point
Runs the FieldEdge scraper and hands its batch to ingestion.
"""
import sys
import asyncio
from automation.scrapers.fieldedge_scraper import FieldEdgeScraper


def _set_event_loop_policy():
    if sys.platform.startswith("win"):
        asyncio.set_event_loop_policy(asyncio.WindowsProactorEventLoopPolicy())


def fetch_dashboard_work_orders(status_name=None, start_date=None, end_date=None):
    """
    Scrape one batch from the FieldEdge dashboard.

    Returns:
        dict: ``{filterStartDate, filterEndDate, dispatchDate, workOrders}``

    Scraper failures are raised to the caller.
    """
    _set_event_loop_policy()
    scraper = FieldEdgeScraper()
    return asyncio.run(scraper.run(
        status_name=status_name,
        start_date=start_date,
        end_date=end_date,
    ))


def start_scraping():
    """Scheduled job: scrape the dashboard and store a new snapshot."""
    from locates.exceptions import UpstreamError
    from locates.services import ingestion

    print("\n" + "=" * 50)
    print("LOCATES DASHBOARD SCRAPER - PROCESS INITIALIZED")
    print("=" * 50 + "\n")

    try:
        dashboard = ingestion.sync_from_scraper(fetch_dashboard_work_orders)
        print(f"✅ Dashboard {dashboard.pk} stored with {dashboard.total_work_orders} work order(s).")
    except UpstreamError as e:
        print(f"❌ Scrape failed, nothing stored: {e.detail}")
    finally:
        print("\n" + "=" * 50)
        print("PROCESS FINISHED")
        print("=" * 50 + "\n")


if __name__ == "__main__":
    import os
    import django

    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'core.settings')
    django.setup()
    start_scraping()
