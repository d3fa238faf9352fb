from datetime import date, datetime

from app.core.security import create_access_token
from app.models.timetable_slot import SlotStatus, TimetableSlot
from app.services.timetable_views import check_in_window, day_index


def auth_headers(user_id):
    return {"Authorization": f"Bearer {create_access_token(user_id)}"}


def add_slot(db_session, seeded, *, day, period_index=0, status=SlotStatus.scheduled):
    slot = TimetableSlot(
        term_id=seeded.term.id,
        class_id=seeded.classes[0].id,
        subject_id=seeded.subjects[0].id,
        trainer_id=seeded.trainers[0].id,
        room_id=seeded.rooms[0].id,
        lesson_period_id=seeded.periods[period_index].id,
        day_of_week=day,
        status=status,
    )
    db_session.add(slot)
    db_session.commit()
    return slot.id


def test_day_index_counts_sunday_as_zero():
    assert day_index(datetime(2026, 10, 18, 9, 0)) == 0
    assert day_index(datetime(2026, 10, 19, 9, 0)) == 1
    assert day_index(datetime(2026, 10, 24, 9, 0)) == 6


def test_check_in_window_flags():
    before = check_in_window("09:00", datetime(2026, 10, 19, 8, 50))
    assert before.should_notify is True
    assert before.is_grace_period_active is False
    assert before.notify_from == datetime(2026, 10, 19, 8, 45)

    during = check_in_window("09:00", datetime(2026, 10, 19, 9, 20))
    assert during.should_notify is False
    assert during.is_grace_period_active is True
    assert during.grace_period_end == datetime(2026, 10, 19, 9, 30)

    after = check_in_window("09:00", datetime(2026, 10, 19, 9, 31))
    assert after.has_passed_grace_period is True
    assert after.is_grace_period_active is False


def test_trainer_sees_todays_sessions(client, db_session, seed_term):
    seeded = seed_term(working_days=range(7), start_date=date.today())
    today = day_index(datetime.now())
    trainer_id = seeded.trainers[0].id
    first = add_slot(db_session, seeded, day=today, period_index=1)
    second = add_slot(db_session, seeded, day=today, period_index=0)
    add_slot(db_session, seeded, day=(today + 1) % 7)

    response = client.get(f"/api/timetable/trainer/{trainer_id}/today", headers=auth_headers(trainer_id))

    assert response.status_code == 200
    body = response.json()
    assert body["day_of_week"] == today
    assert body["message"] is None
    assert [entry["slot"]["id"] for entry in body["sessions"]] == [second, first]
    assert set(body["sessions"][0]["timing"]) >= {
        "notify_from",
        "grace_period_end",
        "should_notify",
        "is_grace_period_active",
        "has_passed_grace_period",
    }


def test_cancelled_sessions_are_hidden(client, db_session, seed_term):
    seeded = seed_term(working_days=range(7), start_date=date.today())
    trainer_id = seeded.trainers[0].id
    add_slot(db_session, seeded, day=day_index(datetime.now()), status=SlotStatus.cancelled)

    response = client.get(f"/api/timetable/trainer/{trainer_id}/today", headers=auth_headers(trainer_id))

    assert response.json()["sessions"] == []


def test_holiday_and_non_working_day_messages(client, db_session, seed_term):
    seeded = seed_term(working_days=range(7), start_date=date.today())
    trainer_id = seeded.trainers[0].id
    seeded.term.holidays = [date.today().isoformat()]
    db_session.commit()

    holiday = client.get(f"/api/timetable/trainer/{trainer_id}/today", headers=auth_headers(trainer_id))
    assert holiday.json()["message"] == "Today is a holiday for this term"

    seeded.term.holidays = []
    seeded.term.working_days = [day for day in range(7) if day != day_index(datetime.now())]
    db_session.commit()

    closed = client.get(f"/api/timetable/trainer/{trainer_id}/today", headers=auth_headers(trainer_id))
    assert closed.json()["message"] == "Today is not a working day for this term"


def test_other_trainers_cannot_read_a_schedule(client, seed_term):
    seeded = seed_term(subjects=2)

    response = client.get(
        f"/api/timetable/trainer/{seeded.trainers[0].id}/today",
        headers=auth_headers(seeded.trainers[1].id),
    )

    assert response.status_code == 403
