import json
from datetime import date, datetime, time

from backend.reminders import check_block_reminders, due_reminders
from models import Block, Notification, User, db


def make_block(**kwargs):
    defaults = {'id': 'b1', 'title': 'Standup', 'day': date(2024, 6, 3), 'start_time': time(9, 0), 'end_time': time(9, 15)}
    defaults.update(kwargs)
    return Block(**defaults)


def test_due_reminders_window():
    block = make_block(recurrence_type='daily')
    assert due_reminders([block], datetime(2024, 6, 10, 8, 40), 15) == []
    due = due_reminders([block], datetime(2024, 6, 10, 8, 50), 15)
    assert due == [(block, date(2024, 6, 10), datetime(2024, 6, 10, 9, 0))]
    assert due_reminders([block], datetime(2024, 6, 10, 9, 5), 15) == []


def test_due_reminders_looks_across_midnight():
    block = make_block(start_time=time(0, 5), recurrence_type='daily')
    due = due_reminders([block], datetime(2024, 6, 10, 23, 55), 15)
    assert [(b.id, day) for b, day, _ in due] == [('b1', date(2024, 6, 11))]


def test_due_reminders_skip_days_without_occurrence():
    block = make_block(recurrence_type='weekly', recurrence_days_of_week='1')  # Mondays
    assert due_reminders([block], datetime(2024, 6, 11, 8, 50), 15) == []


def _seed_user(email='ada@example.com', settings=None):
    user = User(name='Ada', email=email, settings=json.dumps(settings) if settings else None)
    user.set_password('secret-pass')
    db.session.add(user)
    db.session.commit()
    return user


def test_check_block_reminders_creates_one_notification_per_occurrence(app):
    user = _seed_user()
    db.session.add(make_block(user_id=user.id, recurrence_type='daily'))
    db.session.commit()

    assert check_block_reminders(app, now=datetime(2024, 6, 10, 8, 50)) == 1
    assert check_block_reminders(app, now=datetime(2024, 6, 10, 8, 55)) == 0
    assert check_block_reminders(app, now=datetime(2024, 6, 11, 8, 46)) == 1

    notes = Notification.query.order_by(Notification.id).all()
    assert [n.occurrence_day for n in notes] == [date(2024, 6, 10), date(2024, 6, 11)]
    assert notes[0].title == 'Upcoming: Standup'
    assert notes[0].body == 'Starting in 15 minutes'


def test_check_block_reminders_respects_disabled_notifications(app):
    user = _seed_user(settings={'notifications': {'enabled': False}})
    db.session.add(make_block(user_id=user.id, recurrence_type='daily'))
    db.session.commit()
    assert check_block_reminders(app, now=datetime(2024, 6, 10, 8, 50)) == 0


def test_notification_routes(app, client, register):
    headers = register(email='ada@example.com')
    user = User.query.filter_by(email='ada@example.com').first()
    db.session.add(make_block(user_id=user.id, recurrence_type='daily'))
    db.session.commit()
    check_block_reminders(app, now=datetime(2024, 6, 10, 8, 50))
    check_block_reminders(app, now=datetime(2024, 6, 11, 8, 50))

    items = client.get('/api/notifications', headers=headers).get_json()
    assert len(items) == 2
    first_id = items[0]['id']
    read = client.post(f'/api/notifications/{first_id}/read', headers=headers).get_json()
    assert read['readAt'] is not None

    unread = client.get('/api/notifications?unread=1', headers=headers).get_json()
    assert [n['id'] for n in unread] != [first_id]
    assert len(unread) == 1

    assert client.post('/api/notifications/read-all', headers=headers).get_json() == {'updated': 1}
    assert client.get('/api/notifications?unread=1', headers=headers).get_json() == []
    assert client.post('/api/notifications/999/read', headers=headers).status_code == 404


def test_due_reminders_zero_lead_fires_at_start():
    block = make_block(recurrence_type='daily')
    assert due_reminders([block], datetime(2024, 6, 10, 8, 59, 30), 0) == []
    assert len(due_reminders([block], datetime(2024, 6, 10, 9, 0), 0)) == 1
    assert len(due_reminders([block], datetime(2024, 6, 10, 9, 0, 30), 0)) == 1
    assert due_reminders([block], datetime(2024, 6, 10, 9, 1), 0) == []


def test_check_block_reminders_zero_lead_says_starting_now(app):
    user = _seed_user(settings={'notifications': {'defaultReminder': 0}})
    db.session.add(make_block(user_id=user.id, recurrence_type='daily'))
    db.session.commit()
    assert check_block_reminders(app, now=datetime(2024, 6, 10, 9, 0, 10)) == 1
    assert check_block_reminders(app, now=datetime(2024, 6, 10, 9, 0, 50)) == 0
    assert Notification.query.one().body == 'Starting now'
