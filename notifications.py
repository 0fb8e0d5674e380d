import logging
import time
from datetime import datetime

logger = logging.getLogger(__name__)


def send_email(to, subject, body):
    """Pretend to send an email and return its message id.

    Nothing leaves the process; a mail provider would plug in here.
    """
    message_id = f"msg-{int(time.time() * 1000)}"
    logger.info(f"Sending email to {to}: {subject} ({message_id})")
    return message_id


def reminder_email(task):
    subject = f"Reminder: {task.title}"
    body = f"{task.description}\n\nPriority: {task.priority}\nStatus: {task.status}"
    if task.ai_response:
        body += f"\n\n{task.ai_response}"
    return subject, body


def deliver_due_reminders(storage, recipient, now=None, send=send_email):
    """Dispatch every unsent reminder whose time has come and mark it sent.

    Email reminders go to ``recipient``; with no recipient configured they are
    left unsent. Other reminder types are delivered by logging them.
    """
    now = now or datetime.now()
    delivered = []
    for reminder in storage.get_pending_reminders():
        if reminder.reminder_time > now:
            continue
        task = storage.get_task(reminder.task_id)
        if task is None:
            logger.warning(f"Reminder {reminder.id} points at missing task {reminder.task_id}")
            continue
        if reminder.type == "email":
            if not recipient:
                logger.warning(f"No recipient configured, email reminder {reminder.id} not sent")
                continue
            subject, body = reminder_email(task)
            send(recipient, subject, body)
        else:
            logger.info(f"Notification ({reminder.type}) for task {task.id}: {task.title}")
        delivered.append(storage.mark_reminder_sent(reminder.id))
    logger.info(f"Delivered {len(delivered)} reminder(s)")
    return delivered
