"""Registration, login, profile and password-reset routes."""
import re
import secrets
from datetime import datetime, timedelta
from urllib.parse import quote

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MIN_PASSWORD_LENGTH = 6


def _normalize_email(raw):
    return str(raw or '').strip().lower()


def _token_response(user):
    import app as a

    return {'token': a.issue_auth_token(user), 'name': user.name, 'email': user.email}


def register():
    import app as a

    User = a.User
    app = a.app
    db = a.db
    jsonify = a.jsonify
    request = a.request

    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'error': 'JSON object required'}), 400
    name = str(data.get('name') or '').strip()
    email = _normalize_email(data.get('email'))
    password = str(data.get('password') or '')

    if not name or not email or not password:
        return jsonify({'error': 'Missing fields'}), 400
    if not EMAIL_PATTERN.match(email):
        return jsonify({'error': 'Invalid email'}), 400
    if len(password) < MIN_PASSWORD_LENGTH:
        return jsonify({'error': f'Password must be at least {MIN_PASSWORD_LENGTH} characters'}), 400
    if User.query.filter_by(email=email).first():
        return jsonify({'error': 'Email already registered'}), 409

    user = User(name=name, email=email)
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    app.logger.info(f"Registered user {user.id}")
    return jsonify(_token_response(user)), 201


def login():
    import app as a

    User = a.User
    jsonify = a.jsonify
    request = a.request

    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'error': 'JSON object required'}), 400
    email = _normalize_email(data.get('email'))
    password = str(data.get('password') or '')

    user = User.query.filter_by(email=email).first() if email else None
    if not user or not user.check_password(password):
        return jsonify({'error': 'Invalid credentials'}), 401
    return jsonify(_token_response(user))


def profile():
    import app as a

    jsonify = a.jsonify

    user = a.get_current_user()
    if not user:
        return jsonify({'error': 'Unauthorized'}), 401
    return jsonify(user.to_dict())


def request_password_reset():
    import app as a
    from backend import mailer

    User = a.User
    app = a.app
    db = a.db
    jsonify = a.jsonify
    request = a.request

    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'error': 'JSON object required'}), 400
    email = _normalize_email(data.get('email'))
    if not email:
        return jsonify({'error': 'Email required'}), 400

    user = User.query.filter_by(email=email).first()
    if not user:
        # Same answer for unknown addresses.
        return jsonify({'success': True})

    token = secrets.token_hex(32)
    expires_at = datetime.utcnow() + timedelta(seconds=app.config['PASSWORD_RESET_MAX_AGE'])
    user.set_reset_token(token, expires_at)
    db.session.commit()

    reset_url = f"{app.config['FRONTEND_URL'].rstrip('/')}/reset-password?token={token}&email={quote(email)}"
    mailer.send_password_reset_async(app, email, reset_url)
    app.logger.info(f"Password reset requested for user {user.id}")
    return jsonify({'success': True})


def reset_password():
    import app as a

    User = a.User
    app = a.app
    db = a.db
    jsonify = a.jsonify
    request = a.request

    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'error': 'JSON object required'}), 400
    email = _normalize_email(data.get('email'))
    token = str(data.get('token') or '').strip()
    password = str(data.get('password') or '')
    if not email or not token or not password:
        return jsonify({'error': 'Missing fields'}), 400
    if len(password) < MIN_PASSWORD_LENGTH:
        return jsonify({'error': f'Password must be at least {MIN_PASSWORD_LENGTH} characters'}), 400

    user = User.query.filter_by(email=email).first()
    if not user or not user.check_reset_token(token):
        return jsonify({'error': 'Invalid or expired token'}), 400

    user.set_password(password)
    user.clear_reset_token()
    db.session.commit()
    app.logger.info(f"Password reset completed for user {user.id}")
    return jsonify({'success': True})
