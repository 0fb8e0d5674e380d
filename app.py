from flask import Flask, Blueprint, current_app, request, jsonify, send_from_directory
from flask_cors import CORS
from werkzeug.exceptions import HTTPException
from werkzeug.utils import secure_filename
import click
import logging
import os
import uuid

from assistant import assistant
from config import Config
from errors import ApiError, InternalError, NotFoundError, ValidationError
from models import db
from notifications import deliver_due_reminders, send_email
from schemas import (AssistRequest, EmailRequest, InsertReminder, InsertTask, TaskPatch,
                     dump, parse)
from stats import compute_stats
from storage import create_storage

logger = logging.getLogger(__name__)

api = Blueprint('api', __name__, url_prefix='/api')


def get_storage():
    return current_app.extensions['storage']


def get_task_or_404(task_id):
    task = get_storage().get_task(task_id)
    if task is None:
        raise NotFoundError("Task not found")
    return task


def save_upload(file):
    """Store an uploaded image and return the URL it is served from."""
    name = f"{uuid.uuid4().hex}_{secure_filename(file.filename) or 'upload'}"
    folder = current_app.config['UPLOAD_FOLDER']
    os.makedirs(folder, exist_ok=True)
    file.save(os.path.join(folder, name))
    logger.info(f"Saved upload {name}")
    return f"/uploads/{name}"


@api.errorhandler(ApiError)
def handle_api_error(e):
    if isinstance(e, InternalError):
        logger.error(f"Internal error: {e.message}")
    return jsonify(e.to_dict()), e.status_code


@api.errorhandler(Exception)
def handle_unexpected_error(e):
    if isinstance(e, HTTPException):
        return jsonify({"success": False, "message": e.description}), e.code
    logger.exception(f"Unhandled error on {request.method} {request.path}")
    return jsonify(InternalError().to_dict()), 500


@api.route('/tasks', methods=['GET'])
def get_tasks():
    return jsonify([dump(task) for task in get_storage().get_all_tasks()])


@api.route('/tasks/today', methods=['GET'])
def get_todays_tasks():
    return jsonify([dump(task) for task in get_storage().get_todays_tasks()])


@api.route('/tasks/search', methods=['GET'])
def search_tasks():
    query = (request.args.get('q') or '').strip()
    if not query:
        raise ValidationError.for_field('q', 'Field required', message="Search query is required")
    return jsonify([dump(task) for task in get_storage().search_tasks(query)])


@api.route('/tasks/<int:task_id>', methods=['GET'])
def get_task(task_id):
    return jsonify(dump(get_task_or_404(task_id)))


@api.route('/tasks', methods=['POST'])
def create_task():
    data = parse(InsertTask, request.get_json(silent=True), message="Invalid task data")
    task = get_storage().create_task(data)
    return jsonify(dump(task)), 201


@api.route('/tasks/<int:task_id>', methods=['PATCH'])
def update_task(task_id):
    patch = parse(TaskPatch, request.get_json(silent=True), message="Invalid task update")
    task = get_storage().update_task(task_id, patch)
    if task is None:
        raise NotFoundError("Task not found")
    return jsonify(dump(task))


@api.route('/tasks/<int:task_id>', methods=['DELETE'])
def delete_task(task_id):
    if not get_storage().delete_task(task_id):
        raise NotFoundError("Task not found")
    return '', 204


@api.route('/tasks/ai-assist', methods=['POST'])
def ai_assist():
    # multipart when an image is attached, JSON otherwise
    if request.mimetype == 'multipart/form-data':
        payload = request.form.to_dict()
        image = request.files.get('image')
        if image is not None and not image.filename:
            image = None
    else:
        payload = request.get_json(silent=True) or {}
        image = None
    data = parse(AssistRequest, payload, message="Invalid assist request")

    # unknown task is a 404 before anything is generated or saved
    if data.task_id is not None:
        get_task_or_404(data.task_id)

    image_url = save_upload(image) if image is not None else None
    message = assistant.invoke({
        'description': data.description,
        'category': data.category,
        'image': image_url,
    })
    body = {'response': message.content}

    if data.task_id is not None:
        changes = {'ai_response': message.content}
        if image_url:
            changes['image_url'] = image_url
        task = get_storage().update_task(data.task_id, TaskPatch(**changes))
        if task is None:
            raise NotFoundError("Task not found")
        body['task'] = dump(task)
    return jsonify(body)


@api.route('/reminders', methods=['GET'])
def get_reminders():
    task_id = request.args.get('taskId', type=int)
    if task_id:
        reminders = get_storage().get_reminders_by_task(task_id)
    else:
        reminders = get_storage().get_pending_reminders()
    return jsonify([dump(reminder) for reminder in reminders])


@api.route('/reminders', methods=['POST'])
def create_reminder():
    data = parse(InsertReminder, request.get_json(silent=True), message="Invalid reminder data")
    reminder = get_storage().create_reminder(data)
    return jsonify(dump(reminder)), 201


@api.route('/send-email', methods=['POST'])
def send_email_endpoint():
    data = parse(EmailRequest, request.get_json(silent=True), message="Invalid email request")
    message_id = send_email(data.to, data.subject, data.body)
    return jsonify({"success": True, "messageId": message_id})


@api.route('/stats', methods=['GET'])
def get_stats():
    return jsonify(dump(compute_stats(get_storage().get_all_tasks())))


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)

    logging.basicConfig(level=app.config['LOG_LEVEL'])

    if not os.path.isabs(app.config['UPLOAD_FOLDER']):
        app.config['UPLOAD_FOLDER'] = os.path.join(app.instance_path, app.config['UPLOAD_FOLDER'])

    CORS(app, resources={r"/api/*": {"origins": "*"}})

    backend = app.config['STORAGE_BACKEND']
    if backend == 'database':
        db.init_app(app)
        with app.app_context():
            db.create_all()
    app.extensions['storage'] = create_storage(backend)
    logger.info(f"Using {backend} storage")

    app.register_blueprint(api)

    @app.route('/uploads/<path:name>')
    def uploaded_file(name):
        return send_from_directory(app.config['UPLOAD_FOLDER'], name)

    @app.cli.command('send-reminders')
    def send_reminders_command():
        """Deliver every reminder that is due."""
        delivered = deliver_due_reminders(get_storage(), app.config['REMINDER_EMAIL_TO'])
        click.echo(f"Delivered {len(delivered)} reminder(s)")

    return app


if __name__ == '__main__':
    app = create_app()
    app.run(host='0.0.0.0', port=8080, debug=True)
