"""In-app notification routes."""
from datetime import datetime

from services.validation_service import parse_bool

MAX_NOTIFICATIONS = 100


def list_notifications():
    import app as a

    Notification = a.Notification
    jsonify = a.jsonify
    request = a.request
    user = a.get_current_user()
    if not user:
        return jsonify({'error': 'Unauthorized'}), 401

    query = Notification.query.filter_by(user_id=user.id)
    if parse_bool(request.args.get('unread')):
        query = query.filter(Notification.read_at.is_(None))
    items = query.order_by(Notification.created_at.desc(), Notification.id.desc()).limit(MAX_NOTIFICATIONS).all()
    return jsonify([n.to_dict() for n in items])


def mark_read(notification_id):
    import app as a

    Notification = a.Notification
    db = a.db
    jsonify = a.jsonify
    user = a.get_current_user()
    if not user:
        return jsonify({'error': 'Unauthorized'}), 401

    notification = Notification.query.filter_by(id=notification_id, user_id=user.id).first()
    if not notification:
        return jsonify({'error': 'Notification not found'}), 404
    if not notification.read_at:
        notification.read_at = datetime.utcnow()
        db.session.commit()
    return jsonify(notification.to_dict())


def mark_all_read():
    import app as a

    Notification = a.Notification
    db = a.db
    jsonify = a.jsonify
    user = a.get_current_user()
    if not user:
        return jsonify({'error': 'Unauthorized'}), 401

    now = datetime.utcnow()
    updated = Notification.query.filter(
        Notification.user_id == user.id,
        Notification.read_at.is_(None)
    ).update({'read_at': now}, synchronize_session=False)
    db.session.commit()
    return jsonify({'updated': updated})
