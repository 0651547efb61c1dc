from categories import FALLBACK_COLOR, all_categories, is_reserved_category, resolve_category_color


def test_default_category_color():
    assert resolve_category_color('work') == '#3b82f6'
    assert resolve_category_color(' Meeting ') == '#f59e0b'


def test_custom_category_color_from_dicts_or_objects():
    class Cat:
        name = 'gym'
        color = '#112233'

    assert resolve_category_color('gym', [Cat()]) == '#112233'
    assert resolve_category_color('Reading', [{'name': 'reading', 'color': '#445566'}]) == '#445566'


def test_unknown_category_uses_fallback():
    assert resolve_category_color('unknown', []) == FALLBACK_COLOR
    assert resolve_category_color(None) == FALLBACK_COLOR


def test_all_categories_lists_defaults_first():
    merged = all_categories([{'name': 'gym', 'color': '#112233'}])
    assert merged[0] == {'name': 'work', 'color': '#3b82f6', 'isDefault': True}
    assert merged[-1] == {'name': 'gym', 'color': '#112233', 'isDefault': False}
    assert is_reserved_category('Study')
    assert not is_reserved_category('gym')
