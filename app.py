import os

from dotenv import load_dotenv
from flask import Flask, request, jsonify
from itsdangerous import BadSignature, URLSafeTimedSerializer
from werkzeug.exceptions import HTTPException

load_dotenv()

from models import db, User, Block, BlockTask, CustomCategory, Notification

app = Flask(__name__)
app.config['SQLALCHEMY_DATABASE_URI'] = os.environ.get('DATABASE_URL', 'sqlite:///blocks.db')
app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
app.config['SECRET_KEY'] = os.environ.get('SECRET_KEY', 'dev-secret-key-change-in-production')
app.config['DEFAULT_TIMEZONE'] = os.environ.get('DEFAULT_TIMEZONE', 'UTC')
app.config['AUTH_TOKEN_MAX_AGE'] = int(os.environ.get('AUTH_TOKEN_MAX_AGE', 7 * 24 * 60 * 60))  # 7 days
app.config['PASSWORD_RESET_MAX_AGE'] = int(os.environ.get('PASSWORD_RESET_MAX_AGE', 60 * 60))
app.config['GRID_ORIGIN_HOUR'] = int(os.environ.get('GRID_ORIGIN_HOUR', 4))
app.config['GRID_PIXELS_PER_HOUR'] = float(os.environ.get('GRID_PIXELS_PER_HOUR', 49))
app.config['FRONTEND_URL'] = os.environ.get('FRONTEND_URL', 'http://localhost:5173')
app.config['ENABLE_REMINDER_JOBS'] = os.environ.get('ENABLE_REMINDER_JOBS', '1') == '1'

db.init_app(app)
scheduler = None

AUTH_TOKEN_SALT = 'block-planner-auth'


def _token_serializer():
    return URLSafeTimedSerializer(app.config['SECRET_KEY'], salt=AUTH_TOKEN_SALT)


def issue_auth_token(user):
    return _token_serializer().dumps({'id': user.id, 'email': user.email})


def get_current_user():
    """Resolve the user from an `Authorization: Bearer <token>` header."""
    header = request.headers.get('Authorization') or ''
    scheme, _, token = header.partition(' ')
    if scheme.lower() != 'bearer' or not token.strip():
        return None
    try:
        payload = _token_serializer().loads(token.strip(), max_age=app.config['AUTH_TOKEN_MAX_AGE'])
    except BadSignature:
        return None
    try:
        user_id = int(payload.get('id'))
    except (AttributeError, TypeError, ValueError):
        return None
    user = db.session.get(User, user_id)
    if user and user.is_active:
        return user
    return None


def _now_local():
    return reminders.local_now(app)


def grid_settings():
    """(grid_origin_hour, pixels_per_minute) for day/week layouts."""
    return app.config['GRID_ORIGIN_HOUR'], app.config['GRID_PIXELS_PER_HOUR'] / 60


@app.errorhandler(HTTPException)
def _handle_http_error(exc):
    if not request.path.startswith('/api/'):
        return exc
    return jsonify({'error': exc.description or exc.name}), exc.code


@app.errorhandler(Exception)
def _handle_unexpected_error(exc):
    app.logger.exception(f"Unhandled error on {request.method} {request.path}: {exc}")
    db.session.rollback()
    return jsonify({'error': 'Server error'}), 500


with app.app_context():
    db.create_all()


from backend import reminders
from services import auth_routes, block_routes, category_routes, notification_routes, settings_routes

# --- Auth & profile ---
app.add_url_rule('/api/register', view_func=auth_routes.register, methods=['POST'])
app.add_url_rule('/api/login', view_func=auth_routes.login, methods=['POST'])
app.add_url_rule('/api/profile', view_func=auth_routes.profile, methods=['GET'])
app.add_url_rule('/api/request-password-reset', view_func=auth_routes.request_password_reset, methods=['POST'])
app.add_url_rule('/api/reset-password', view_func=auth_routes.reset_password, methods=['POST'])

# --- Categories ---
app.add_url_rule('/api/categories', view_func=category_routes.categories, methods=['GET', 'POST'])
app.add_url_rule('/api/categories/<name>', view_func=category_routes.delete_category, methods=['DELETE'])

# --- Blocks ---
app.add_url_rule('/api/blocks', view_func=block_routes.blocks, methods=['GET', 'POST'])
app.add_url_rule('/api/blocks/day', view_func=block_routes.day_view, methods=['GET'])
app.add_url_rule('/api/blocks/week', view_func=block_routes.week_view, methods=['GET'])
app.add_url_rule('/api/blocks/<block_id>', view_func=block_routes.block_detail, methods=['GET', 'PUT', 'DELETE'])
app.add_url_rule(
    '/api/blocks/<block_id>/tasks/<task_id>',
    view_func=block_routes.update_task,
    methods=['PATCH']
)

# --- Settings ---
app.add_url_rule('/api/settings', view_func=settings_routes.settings, methods=['GET', 'PUT'])
app.add_url_rule('/api/settings/reset', view_func=settings_routes.reset, methods=['POST'])

# --- Notifications ---
app.add_url_rule('/api/notifications', view_func=notification_routes.list_notifications, methods=['GET'])
app.add_url_rule(
    '/api/notifications/<int:notification_id>/read',
    view_func=notification_routes.mark_read,
    methods=['POST']
)
app.add_url_rule('/api/notifications/read-all', view_func=notification_routes.mark_all_read, methods=['POST'])


# Start scheduler on process startup (not request-dependent).
if app.config['ENABLE_REMINDER_JOBS']:
    try:
        scheduler = reminders.start_scheduler(app)
    except Exception as e:
        app.logger.error(f"Error starting scheduler on startup: {e}")
