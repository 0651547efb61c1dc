"""Default and custom category routes."""
from categories import all_categories, is_reserved_category, normalize_category_name
from services.validation_service import normalize_color

MAX_CATEGORY_NAME_LENGTH = 50


def categories():
    import app as a

    CustomCategory = a.CustomCategory
    app = a.app
    db = a.db
    jsonify = a.jsonify
    request = a.request
    user = a.get_current_user()
    if not user:
        return jsonify({'error': 'Unauthorized'}), 401

    if request.method == 'GET':
        merged = all_categories(user.categories)
        return jsonify({
            'default': [{'name': c['name'], 'color': c['color']} for c in merged if c['isDefault']],
            'custom': [{'name': c['name'], 'color': c['color']} for c in merged if not c['isDefault']],
        })

    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'error': 'JSON object required'}), 400
    name = normalize_category_name(data.get('name'))
    color = normalize_color(data.get('color'))
    if not name or not data.get('color'):
        return jsonify({'error': 'Missing fields'}), 400
    if len(name) > MAX_CATEGORY_NAME_LENGTH:
        return jsonify({'error': 'Category name is too long'}), 400
    if not color:
        return jsonify({'error': 'Invalid color'}), 400
    if is_reserved_category(name) or CustomCategory.query.filter_by(user_id=user.id, name=name).first():
        return jsonify({'error': 'Category already exists'}), 409

    category = CustomCategory(user_id=user.id, name=name, color=color)
    db.session.add(category)
    db.session.commit()
    app.logger.info(f"Added category '{name}' for user {user.id}")
    return jsonify(category.to_dict()), 201


def delete_category(name):
    import app as a

    CustomCategory = a.CustomCategory
    db = a.db
    jsonify = a.jsonify
    user = a.get_current_user()
    if not user:
        return jsonify({'error': 'Unauthorized'}), 401

    category = CustomCategory.query.filter_by(user_id=user.id, name=normalize_category_name(name)).first()
    if not category:
        return jsonify({'error': 'Category not found'}), 404
    # Blocks keep their category key and fall back to the default color.
    db.session.delete(category)
    db.session.commit()
    return jsonify({'success': True})
