# tests/test_models.py

from __future__ import annotations

from taskboard.entities.models import Task, TaskStatus, User, UserRole


def test_records_tolerate_missing_and_unknown_fields() -> None:
    task = Task.from_record({"id": "t1", "status": "Archived", "submissions": "junk"})

    assert task.status == TaskStatus.PENDING
    assert task.submissions == []
    assert task.deadline == ""

    user = User.from_record({"id": "u1", "name": "Kim", "role": "superuser", "theme": "dark"})
    assert user.role == UserRole.EMPLOYEE
    assert user.avatar.startswith("https://ui-avatars.com/api/?name=Kim")
    assert user.to_record()["theme"] == "dark"


def test_persisted_field_names_are_camel_case() -> None:
    rec = {
        "id": "t1",
        "title": "T",
        "description": "D",
        "deadline": "2030-01-01",
        "assignedTo": "u1",
        "status": "Late Submission",
        "createdAt": "2029-12-01T00:00:00.000Z",
        "submissions": [
            {"id": "s1", "submittedAt": "2030-01-02T00:00:00.000Z", "isLate": True, "fileName": "a.txt", "fileSize": 3}
        ],
    }

    assert Task.from_record(rec).to_record() == rec
