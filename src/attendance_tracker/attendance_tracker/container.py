from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .assistant.client import DEFAULT_GATEWAY_URL, DEFAULT_MODEL, AssistantClient
from .attendance.coordinator import AttendanceCoordinator
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .core.constants import DEFAULT_REMINDER_TIME, DEFAULT_REMINDER_TIMEZONE
from .database.connection import DBConfig, DatabaseConnection
from .goals.service import GoalService
from .goals.store import GoalStore
from .reminders.service import ReminderService
from .sharing.mysql_shared_code_repository import MySQLSharedCodeRepository
from .sharing.repository import SharedCodeRepository
from .sharing.service import ShareCodeService
from .subjects.mysql_subject_repository import MySQLSubjectRepository
from .subjects.repository import SubjectRepository
from .timetable.mysql_timetable_repository import MySQLTimetableRepository
from .timetable.repository import TimetableRepository
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    users_repo: UserRepository
    subjects_repo: SubjectRepository
    timetable_repo: TimetableRepository
    attendance_repo: AttendanceRepository
    shared_codes_repo: SharedCodeRepository

    auth_service: AuthService
    goal_service: GoalService
    reminder_service: ReminderService
    share_service: ShareCodeService
    assistant: AssistantClient

    def coordinator_for(self, user_id: int) -> AttendanceCoordinator:
        """Load a fresh coordinator holding ``user_id``'s current data."""
        return AttendanceCoordinator.load(user_id, self.subjects_repo, self.timetable_repo, self.attendance_repo)


def build_container(
    *,
    db_config: dict,
    goals_dir: str = "instance/goals",
    ai_api_key: str = "",
    ai_gateway_url: str = DEFAULT_GATEWAY_URL,
    ai_model: str = DEFAULT_MODEL,
    ai_timeout: float = 60,
    reminder_time: str = DEFAULT_REMINDER_TIME,
    reminder_timezone: str = DEFAULT_REMINDER_TIMEZONE,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    users_repo = MySQLUserRepository(conn)
    subjects_repo = MySQLSubjectRepository(conn)
    timetable_repo = MySQLTimetableRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    shared_codes_repo = MySQLSharedCodeRepository(conn)

    return Container(
        conn=conn,
        users_repo=users_repo,
        subjects_repo=subjects_repo,
        timetable_repo=timetable_repo,
        attendance_repo=attendance_repo,
        shared_codes_repo=shared_codes_repo,
        auth_service=AuthService(users_repo),
        goal_service=GoalService(GoalStore(goals_dir)),
        reminder_service=ReminderService(reminder_time, reminder_timezone),
        share_service=ShareCodeService(shared_codes_repo),
        assistant=AssistantClient(
            api_key=ai_api_key,
            gateway_url=ai_gateway_url,
            model=ai_model,
            timeout=ai_timeout,
        ),
    )
