"""Block CRUD plus the day/week grid views."""
from categories import resolve_category_color
from models import new_block_id
from recurrence import layout_day, occurrences_for_range, week_days
from services.validation_service import (
    days_of_week_to_string,
    normalize_color,
    normalize_priority,
    parse_bool,
    parse_day_value,
    parse_recurrence,
    parse_time_str,
)
from settings_store import load_settings

MAX_RANGE_DAYS = 62
MAX_BLOCK_ID_LENGTH = 64


def _user_blocks(user):
    import app as a

    Block = a.Block
    return Block.query.filter_by(user_id=user.id).order_by(Block.day.asc(), Block.start_time.asc()).all()


def _apply_tasks(block, raw_tasks):
    import app as a

    BlockTask = a.BlockTask
    if not isinstance(raw_tasks, list):
        raise ValueError('tasks must be a list')
    block.tasks.clear()
    seen = set()
    for idx, raw in enumerate(raw_tasks):
        if not isinstance(raw, dict):
            continue
        title = str(raw.get('title') or '').strip()
        if not title:
            continue
        task_id = str(raw.get('id') or '').strip() or new_block_id()
        if task_id in seen:
            task_id = new_block_id()
        seen.add(task_id)
        priority = raw.get('priority')
        block.tasks.append(BlockTask(
            id=task_id,
            title=title,
            completed=parse_bool(raw.get('completed')),
            priority=normalize_priority(priority) if priority else None,
            order_index=idx,
        ))


def _apply_recurrence(block, raw):
    rule = parse_recurrence(raw)
    if not rule:
        block.recurrence_type = None
        block.recurrence_end_date = None
        block.recurrence_days_of_week = None
        return
    block.recurrence_type = rule['type']
    block.recurrence_end_date = rule['endDate']
    block.recurrence_days_of_week = days_of_week_to_string(rule['daysOfWeek'])


def apply_block_payload(block, data, partial=False):
    """Copy validated payload fields onto `block`. Raises ValueError on bad input."""
    if not partial or 'title' in data:
        title = str(data.get('title') or '').strip()
        if not title:
            raise ValueError('Title is required')
        block.title = title[:200]
    if 'description' in data:
        block.description = str(data.get('description') or '').strip() or None
    if not partial or 'date' in data:
        day_value = parse_day_value(data.get('date'))
        if not day_value:
            raise ValueError('Invalid date')
        block.day = day_value
    for key, attr in (('startTime', 'start_time'), ('endTime', 'end_time')):
        if not partial or key in data:
            parsed = parse_time_str(data.get(key))
            if not parsed:
                raise ValueError(f'Invalid {key}')
            setattr(block, attr, parsed)
    if not partial or 'category' in data:
        category = str(data.get('category') or '').strip().lower()
        block.category = category[:50] or 'work'
    if 'color' in data:
        block.color = normalize_color(data.get('color'))
    if 'priority' in data:
        block.priority = normalize_priority(data.get('priority')) if data.get('priority') else None
    if 'hasQuiz' in data:
        block.has_quiz = parse_bool(data.get('hasQuiz'))
    if 'recurring' in data:
        _apply_recurrence(block, data.get('recurring'))
    if 'tasks' in data:
        _apply_tasks(block, data.get('tasks') or [])


def _grid_entry(block, position, custom_categories):
    data = block.to_dict()
    data['top'] = position['top']
    data['height'] = position['height']
    data['displayColor'] = resolve_category_color(block.category, custom_categories)
    return data


def blocks():
    import app as a

    Block = a.Block
    app = a.app
    db = a.db
    jsonify = a.jsonify
    request = a.request
    user = a.get_current_user()
    if not user:
        return jsonify({'error': 'Unauthorized'}), 401

    if request.method == 'GET':
        start_raw = request.args.get('start')
        end_raw = request.args.get('end')
        if not start_raw and not end_raw:
            return jsonify([b.to_dict() for b in _user_blocks(user)])

        start_day = parse_day_value(start_raw)
        end_day = parse_day_value(end_raw) if end_raw else start_day
        if not start_day or not end_day:
            return jsonify({'error': 'Invalid start/end date'}), 400
        if end_day < start_day:
            return jsonify({'error': 'end must be on/after start'}), 400
        if (end_day - start_day).days >= MAX_RANGE_DAYS:
            return jsonify({'error': f'Range is limited to {MAX_RANGE_DAYS} days'}), 400
        by_day = occurrences_for_range(_user_blocks(user), start_day, end_day)
        return jsonify({
            'start': start_day.isoformat(),
            'end': end_day.isoformat(),
            'blocks': {day: [b.to_dict() for b in items] for day, items in by_day.items()},
        })

    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'error': 'JSON object required'}), 400

    block_id = str(data.get('id') or '').strip() or new_block_id()
    if len(block_id) > MAX_BLOCK_ID_LENGTH:
        return jsonify({'error': 'id is too long'}), 400
    if db.session.get(Block, block_id):
        return jsonify({'error': 'Block id already exists'}), 409

    block = Block(id=block_id, user_id=user.id)
    try:
        apply_block_payload(block, data)
    except ValueError as exc:
        return jsonify({'error': str(exc)}), 400

    db.session.add(block)
    db.session.commit()
    app.logger.info(f"Created block {block.id} for user {user.id}")
    return jsonify(block.to_dict()), 201


def block_detail(block_id):
    import app as a

    Block = a.Block
    app = a.app
    db = a.db
    jsonify = a.jsonify
    request = a.request
    user = a.get_current_user()
    if not user:
        return jsonify({'error': 'Unauthorized'}), 401

    block = Block.query.filter_by(id=block_id, user_id=user.id).first()
    if not block:
        return jsonify({'error': 'Block not found'}), 404

    if request.method == 'GET':
        return jsonify(block.to_dict())

    if request.method == 'DELETE':
        db.session.delete(block)
        db.session.commit()
        app.logger.info(f"Deleted block {block_id} for user {user.id}")
        return jsonify({'success': True})

    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'error': 'JSON object required'}), 400
    try:
        apply_block_payload(block, data, partial=True)
    except ValueError as exc:
        db.session.rollback()
        return jsonify({'error': str(exc)}), 400
    db.session.commit()
    return jsonify(block.to_dict())


def update_task(block_id, task_id):
    import app as a

    Block = a.Block
    db = a.db
    jsonify = a.jsonify
    request = a.request
    user = a.get_current_user()
    if not user:
        return jsonify({'error': 'Unauthorized'}), 401

    block = Block.query.filter_by(id=block_id, user_id=user.id).first()
    if not block:
        return jsonify({'error': 'Block not found'}), 404
    task = next((t for t in block.tasks if t.id == task_id), None)
    if not task:
        return jsonify({'error': 'Task not found'}), 404

    data = request.get_json(silent=True)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        return jsonify({'error': 'JSON object required'}), 400
    if 'completed' in data:
        task.completed = parse_bool(data.get('completed'))
    else:
        task.completed = not task.completed
    if data.get('title'):
        task.title = str(data['title']).strip()[:200] or task.title
    db.session.commit()
    return jsonify(task.to_dict())


def day_view():
    import app as a

    jsonify = a.jsonify
    request = a.request
    user = a.get_current_user()
    if not user:
        return jsonify({'error': 'Unauthorized'}), 401

    day_raw = request.args.get('date')
    day_value = parse_day_value(day_raw) if day_raw else a._now_local().date()
    if not day_value:
        return jsonify({'error': 'Invalid date'}), 400

    origin_hour, pixels_per_minute = a.grid_settings()
    placed = layout_day(_user_blocks(user), day_value, origin_hour, pixels_per_minute)
    custom = list(user.categories)
    return jsonify({
        'date': day_value.isoformat(),
        'blocks': [_grid_entry(block, position, custom) for block, position in placed],
    })


def week_view():
    import app as a

    jsonify = a.jsonify
    request = a.request
    user = a.get_current_user()
    if not user:
        return jsonify({'error': 'Unauthorized'}), 401

    day_raw = request.args.get('date')
    anchor = parse_day_value(day_raw) if day_raw else a._now_local().date()
    if not anchor:
        return jsonify({'error': 'Invalid date'}), 400

    week_starts_on = load_settings(user)['weekStartsOn']
    days = week_days(anchor, week_starts_on)
    origin_hour, pixels_per_minute = a.grid_settings()
    user_blocks = _user_blocks(user)
    custom = list(user.categories)
    by_day = {}
    for day_value in days:
        placed = layout_day(user_blocks, day_value, origin_hour, pixels_per_minute)
        by_day[day_value.isoformat()] = [_grid_entry(block, position, custom) for block, position in placed]
    return jsonify({
        'start': days[0].isoformat(),
        'end': days[-1].isoformat(),
        'weekStartsOn': week_starts_on,
        'days': by_day,
    })
