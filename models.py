from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import event
from sqlalchemy.engine import Engine
from datetime import datetime
import sqlite3

db = SQLAlchemy()


def _unicode_lower(value):
    return value.lower() if isinstance(value, str) else value


@event.listens_for(Engine, "connect")
def _sqlite_unicode_lower(dbapi_connection, connection_record):
    # SQLite's builtin lower() only folds ASCII; match Python's str.lower()
    if isinstance(dbapi_connection, sqlite3.Connection):
        dbapi_connection.create_function("lower", 1, _unicode_lower, deterministic=True)


class Task(db.Model):
    __tablename__ = 'tasks'

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.Text, nullable=False)
    description = db.Column(db.Text, nullable=False)
    category = db.Column(db.String(20), nullable=False)
    priority = db.Column(db.String(10), nullable=False)
    status = db.Column(db.String(20), nullable=False, default='pending')
    due_date = db.Column(db.DateTime)
    ai_response = db.Column(db.Text)
    image_url = db.Column(db.Text)
    voice_transcript = db.Column(db.Text)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.now)
    completed_at = db.Column(db.DateTime)
    reminders = db.relationship('Reminder', backref='task', lazy=True,
                                cascade='all, delete-orphan')

    def __repr__(self):
        return f'<Task {self.id} {self.title}>'

class Reminder(db.Model):
    __tablename__ = 'reminders'

    id = db.Column(db.Integer, primary_key=True)
    task_id = db.Column(db.Integer, db.ForeignKey('tasks.id'), nullable=False)
    reminder_time = db.Column(db.DateTime, nullable=False)
    sent = db.Column(db.Boolean, nullable=False, default=False)
    # email, notification
    type = db.Column(db.String(20), nullable=False)

    def __repr__(self):
        return f'<Reminder {self.id} task={self.task_id}>'
