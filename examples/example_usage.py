"""Example: drive the coordinator and the statistics engine without Flask.

Controllers are thin; everything below is what they call.
"""

import importlib

from dotenv import load_dotenv

from config import get_settings_module

from src.attendance_tracker.attendance_tracker.container import build_container
from src.attendance_tracker.attendance_tracker.stats.engine import overall_stats, streak
from src.attendance_tracker.attendance_tracker.stats.weekly import weekly_report
from src.attendance_tracker.attendance_tracker.common.datetime_utils import set_local_timezone, today_local


def main():
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    set_local_timezone(settings.REMINDER_TIMEZONE)
    container = build_container(db_config=settings.DB_CONFIG)

    coordinator = container.coordinator_for(user_id=1)
    state = coordinator.state
    today = today_local()

    print("overall:", overall_stats(state.subjects).to_dict())
    print("streak:", streak(state.records, today).to_dict())
    print("this week:", weekly_report(state.records, state.subjects, today).this_week.to_dict())
    print("today:", [e.to_dict() for e in coordinator.today_schedule(today)])


if __name__ == "__main__":
    main()
