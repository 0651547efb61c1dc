def test_categories_default_and_custom(client, auth_headers):
    listing = client.get('/api/categories', headers=auth_headers).get_json()
    assert {'name': 'work', 'color': '#3b82f6'} in listing['default']
    assert listing['custom'] == []

    created = client.post('/api/categories', json={'name': ' Side Project ', 'color': '#ABC'}, headers=auth_headers)
    assert created.status_code == 201
    assert created.get_json()['name'] == 'side project'
    assert created.get_json()['color'] == '#abc'

    listing = client.get('/api/categories', headers=auth_headers).get_json()
    assert [c['name'] for c in listing['custom']] == ['side project']
    profile = client.get('/api/profile', headers=auth_headers).get_json()
    assert [c['name'] for c in profile['categories']] == ['side project']


def test_category_validation(client, auth_headers):
    assert client.post('/api/categories', json={'name': 'gym'}, headers=auth_headers).status_code == 400
    assert client.post('/api/categories', json={'name': 'gym', 'color': 'red'}, headers=auth_headers).status_code == 400
    assert client.post('/api/categories', json={'name': 'Work', 'color': '#000000'}, headers=auth_headers).status_code == 409
    client.post('/api/categories', json={'name': 'gym', 'color': '#000000'}, headers=auth_headers)
    assert client.post('/api/categories', json={'name': 'GYM', 'color': '#111111'}, headers=auth_headers).status_code == 409


def test_delete_category(client, auth_headers):
    client.post('/api/categories', json={'name': 'gym', 'color': '#000000'}, headers=auth_headers)
    assert client.delete('/api/categories/gym', headers=auth_headers).get_json() == {'success': True}
    assert client.delete('/api/categories/gym', headers=auth_headers).status_code == 404


def test_settings_defaults_update_and_reset(client, auth_headers):
    settings = client.get('/api/settings', headers=auth_headers).get_json()
    assert settings['defaultView'] == 'weekly'
    assert settings['notifications']['defaultReminder'] == 15

    updated = client.put('/api/settings', json={
        'defaultView': 'daily',
        'notifications': {'defaultReminder': 30},
        'theme': 'neon',
    }, headers=auth_headers).get_json()
    assert updated['defaultView'] == 'daily'
    assert updated['notifications']['defaultReminder'] == 30
    assert updated['notifications']['enabled'] is True
    assert updated['theme'] == 'system'
    assert client.get('/api/settings', headers=auth_headers).get_json() == updated

    reset = client.post('/api/settings/reset', headers=auth_headers).get_json()
    assert reset['defaultView'] == 'weekly'
    assert client.put('/api/settings', json=[1, 2], headers=auth_headers).status_code == 400


def test_category_create_rejects_non_object_json(client, auth_headers):
    assert client.post('/api/categories', json=[1], headers=auth_headers).status_code == 400


def test_category_listing_lists_every_default(client, auth_headers):
    listing = client.get('/api/categories', headers=auth_headers).get_json()
    assert [c['name'] for c in listing['default']] == ['work', 'study', 'personal', 'meeting', 'break']
