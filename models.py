import uuid
from datetime import datetime, date

from flask_sqlalchemy import SQLAlchemy
from flask_login import UserMixin
from werkzeug.security import generate_password_hash, check_password_hash

from services.validation_service import format_time_str, parse_days_of_week

db = SQLAlchemy()


def new_block_id():
    return uuid.uuid4().hex


class User(UserMixin, db.Model):
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    settings = db.Column(db.Text, nullable=True)  # JSON, see settings_store
    reset_token_hash = db.Column(db.String(255), nullable=True)
    reset_token_expires = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    # Relationships
    blocks = db.relationship('Block', backref='owner', lazy=True, cascade="all, delete-orphan")
    categories = db.relationship(
        'CustomCategory',
        backref='owner',
        lazy=True,
        cascade="all, delete-orphan",
        order_by="CustomCategory.created_at"
    )
    notifications = db.relationship('Notification', backref='user', lazy=True, cascade="all, delete-orphan")

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        return check_password_hash(self.password_hash, password)

    def set_reset_token(self, token, expires_at):
        self.reset_token_hash = generate_password_hash(token)
        self.reset_token_expires = expires_at

    def check_reset_token(self, token, now=None):
        if not self.reset_token_hash or not self.reset_token_expires:
            return False
        if (now or datetime.utcnow()) > self.reset_token_expires:
            return False
        return check_password_hash(self.reset_token_hash, token)

    def clear_reset_token(self):
        self.reset_token_hash = None
        self.reset_token_expires = None

    def to_dict(self):
        return {
            'name': self.name,
            'email': self.email,
            'categories': [cat.to_dict() for cat in self.categories],
        }


class Block(db.Model):
    """
    A time block anchored on `day`, optionally repeating.
    Times are naive wall-clock times in the grid's local timezone.
    """
    id = db.Column(db.String(64), primary_key=True, default=new_block_id)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)
    day = db.Column(db.Date, nullable=False, default=date.today)
    start_time = db.Column(db.Time, nullable=False)
    end_time = db.Column(db.Time, nullable=False)
    category = db.Column(db.String(50), nullable=False, default='work')
    color = db.Column(db.String(20), nullable=True)
    priority = db.Column(db.String(10), nullable=True)  # low | medium | high
    has_quiz = db.Column(db.Boolean, default=False)
    recurrence_type = db.Column(db.String(10), nullable=True)  # daily | weekly | monthly
    recurrence_end_date = db.Column(db.Date, nullable=True)
    recurrence_days_of_week = db.Column(db.String(20), nullable=True)  # "1,3,5", 0 = Sunday
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    tasks = db.relationship(
        'BlockTask',
        backref='block',
        lazy=True,
        cascade="all, delete-orphan",
        order_by="BlockTask.order_index"
    )

    def recurring_dict(self):
        if not self.recurrence_type:
            return None
        data = {
            'type': self.recurrence_type,
            'endDate': self.recurrence_end_date.isoformat() if self.recurrence_end_date else None,
        }
        if self.recurrence_type == 'weekly':
            data['daysOfWeek'] = parse_days_of_week(self.recurrence_days_of_week)
        return data

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'date': self.day.isoformat() if self.day else None,
            'startTime': format_time_str(self.start_time),
            'endTime': format_time_str(self.end_time),
            'category': self.category,
            'color': self.color,
            'priority': self.priority,
            'hasQuiz': bool(self.has_quiz),
            'recurring': self.recurring_dict(),
            'tasks': [task.to_dict() for task in self.tasks],
            'createdAt': self.created_at.isoformat() if self.created_at else None,
            'updatedAt': self.updated_at.isoformat() if self.updated_at else None,
        }


class BlockTask(db.Model):
    """Checklist entry inside a block; ids are scoped to their block."""
    pk = db.Column(db.Integer, primary_key=True)
    id = db.Column(db.String(64), nullable=False)
    block_id = db.Column(db.String(64), db.ForeignKey('block.id'), nullable=False, index=True)
    title = db.Column(db.String(200), nullable=False)
    completed = db.Column(db.Boolean, default=False)
    priority = db.Column(db.String(10), nullable=True)
    order_index = db.Column(db.Integer, default=0)

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'completed': bool(self.completed),
            'priority': self.priority,
        }


class CustomCategory(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)
    name = db.Column(db.String(50), nullable=False)
    color = db.Column(db.String(20), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    __table_args__ = (db.UniqueConstraint('user_id', 'name', name='uq_custom_category_user_name'),)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'color': self.color,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
        }


class Notification(db.Model):
    """In-app notification record (block reminders)."""
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)
    block_id = db.Column(db.String(64), nullable=True)
    type = db.Column(db.String(50), nullable=False, default='reminder')
    title = db.Column(db.String(200), nullable=False)
    body = db.Column(db.Text, nullable=True)
    occurrence_day = db.Column(db.Date, nullable=True)
    dedupe_key = db.Column(db.String(120), unique=True, nullable=True)
    read_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'blockId': self.block_id,
            'type': self.type,
            'title': self.title,
            'body': self.body,
            'occurrenceDay': self.occurrence_day.isoformat() if self.occurrence_day else None,
            'readAt': self.read_at.isoformat() if self.read_at else None,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
        }
