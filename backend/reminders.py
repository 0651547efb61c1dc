"""Block reminders: find occurrences about to start and record notifications."""
import os
from datetime import datetime, timedelta

import pytz
from apscheduler.schedulers.background import BackgroundScheduler

from models import db, Block, Notification, User
from recurrence import occurs_on
from settings_store import load_settings


AT_START_WINDOW = timedelta(minutes=1)


def due_reminders(blocks, now, reminder_minutes):
    """
    Occurrences whose reminder time has passed but which have not started yet.

    A zero lead means "at start time": the occurrence stays due for one
    polling interval after it starts.

    `now` is a naive local datetime. Tomorrow is scanned too so a reminder for
    a block just after midnight fires the evening before.
    Returns (block, occurrence_day, start_datetime) tuples.
    """
    lead = timedelta(minutes=reminder_minutes)
    due = []
    blocks = list(blocks)
    for day_value in (now.date(), now.date() + timedelta(days=1)):
        for block in blocks:
            if not block.start_time or not occurs_on(block, day_value):
                continue
            start_at = datetime.combine(day_value, block.start_time)
            window_end = start_at if lead else start_at + AT_START_WINDOW
            if start_at - lead <= now < window_end:
                due.append((block, day_value, start_at))
    return due


def reminder_key(block, day_value):
    return f"{block.id}:{day_value.isoformat()}"


def local_now(app):
    tz = pytz.timezone(app.config.get('DEFAULT_TIMEZONE', 'UTC'))
    return datetime.now(tz).replace(tzinfo=None)


def create_reminders_for_user(user, now):
    """Add reminder notifications for `user`; returns how many were created. Caller commits."""
    prefs = load_settings(user)['notifications']
    if not prefs['enabled']:
        return 0
    minutes = prefs['defaultReminder']
    blocks = Block.query.filter(Block.user_id == user.id, Block.day <= now.date() + timedelta(days=1)).all()
    created = 0
    for block, day_value, _start_at in due_reminders(blocks, now, minutes):
        key = reminder_key(block, day_value)
        if Notification.query.filter_by(dedupe_key=key).first():
            continue
        db.session.add(Notification(
            user_id=user.id,
            block_id=block.id,
            type='reminder',
            title=f"Upcoming: {block.title}",
            body=f"Starting in {minutes} minutes" if minutes else "Starting now",
            occurrence_day=day_value,
            dedupe_key=key,
        ))
        created += 1
    return created


def check_block_reminders(app, now=None):
    """Scheduler entry point: one pass over every user."""
    with app.app_context():
        now = now or local_now(app)
        total = 0
        for user in User.query.all():
            try:
                total += create_reminders_for_user(user, now)
                db.session.commit()
            except Exception as e:
                db.session.rollback()
                app.logger.error(f"Error creating reminders for user {user.id}: {e}")
        if total:
            app.logger.info(f"Created {total} block reminder(s)")
        return total


def start_scheduler(app):
    """Start the background scheduler that polls for due reminders."""
    # Avoid double-start in Flask debug reloader
    if app.debug and os.environ.get('WERKZEUG_RUN_MAIN') != 'true':
        return None
    scheduler = BackgroundScheduler(timezone=app.config.get('DEFAULT_TIMEZONE', 'UTC'))
    scheduler.add_job(
        check_block_reminders,
        'interval',
        minutes=1,
        args=[app],
        id='block_reminders',
        replace_existing=True,
        coalesce=True,
        max_instances=1
    )
    scheduler.start()
    app.logger.info("Reminder scheduler started")
    return scheduler
