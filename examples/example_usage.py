"""Example: drive the service layer directly, without Flask.

Controllers are thin; every rule lives in the services, so a script can
enroll a student the same way the HTTP API does.
"""

import importlib

from config import get_settings_module

from src.campus_admin.campus_admin.container import build_container
from src.campus_admin.campus_admin.core.enums import Role
from src.campus_admin.campus_admin.core.policy import Requester
from src.campus_admin.campus_admin.notifications.mailer import build_mailer


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(
        db_config=settings.DB_CONFIG,
        jwt_secret=settings.JWT_SECRET,
        mailer=build_mailer(settings),
    )
    admin = Requester(user_id=1, role=Role.ADMIN)
    result = container.enrollment_service.enroll(requester=admin, course_id=1, student_id=1)
    print(result.message)
    print(container.attendance_service.student_stats(requester=admin, student_id=1).to_json())


if __name__ == "__main__":
    main()
