"""Example: drive the service layer directly (no Flask).

Opens a poll for demo session 1 as the demo professor, then redeems the code
as a demo student. Run scripts/init_db.py and scripts/seed_db.py first.
"""

import importlib

from dotenv import load_dotenv

from config import get_settings_module

from src.classroom_attendance.classroom_attendance.app_logger import setup_logging
from src.classroom_attendance.classroom_attendance.container import build_container
from src.classroom_attendance.classroom_attendance.core.exceptions import AttendanceError


def main():
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    logger = setup_logging("INFO")
    container = build_container(db_config=settings.DB_CONFIG)

    poll = container.poll_manager.create_poll(session_id=1, duration_minutes=5, creator_id=1)
    logger.info("code %s valid until %s", poll.code, poll.expires_at.isoformat())

    try:
        record = container.submission_coordinator.submit(poll.code, student_id=3)
        logger.info("record %s marked at %s", record.record_id, record.marked_at.isoformat())
    except AttendanceError as e:
        logger.info("submission refused: %s (%s)", e.kind.value, e.message)


if __name__ == "__main__":
    main()
