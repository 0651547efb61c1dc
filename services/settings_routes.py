"""Calendar settings routes backed by settings_store."""
from settings_store import load_settings, reset_settings, save_settings


def settings():
    import app as a

    db = a.db
    jsonify = a.jsonify
    request = a.request
    user = a.get_current_user()
    if not user:
        return jsonify({'error': 'Unauthorized'}), 401

    if request.method == 'GET':
        return jsonify(load_settings(user))

    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'error': 'JSON object required'}), 400
    updated = save_settings(user, data)
    db.session.commit()
    return jsonify(updated)


def reset():
    import app as a

    db = a.db
    jsonify = a.jsonify
    user = a.get_current_user()
    if not user:
        return jsonify({'error': 'Unauthorized'}), 401

    defaults = reset_settings(user)
    db.session.commit()
    return jsonify(defaults)
