from parkmaster.extensions import bcrypt
from parkmaster.services.settings_service import default_settings


def test_login_with_default_credentials(client):
    res = client.post('/api/auth/login', json={'username': 'admin', 'password': 'admin123'})
    assert res.status_code == 200
    assert res.get_json() == {'success': True, 'message': 'Login successful'}


def test_login_failure_does_not_say_which_field(client):
    wrong_password = client.post('/api/auth/login', json={'username': 'admin', 'password': 'nope'})
    wrong_user = client.post('/api/auth/login', json={'username': 'root', 'password': 'admin123'})
    assert wrong_password.status_code == wrong_user.status_code == 401
    assert wrong_password.get_json() == wrong_user.get_json() == {
        'success': False, 'message': 'Invalid credentials'
    }


def test_login_requires_both_fields(client):
    res = client.post('/api/auth/login', json={'username': 'admin'})
    assert res.status_code == 400
    assert res.get_json()['success'] is False


def test_environment_overrides_stored_credentials(app, client):
    app.config['ADMIN_USERNAME'] = 'boss'
    app.config['ADMIN_PASSWORD'] = 'hunter2'
    assert client.post('/api/auth/login', json={'username': 'admin', 'password': 'admin123'}).status_code == 401
    assert client.post('/api/auth/login', json={'username': 'boss', 'password': 'hunter2'}).status_code == 200


def test_login_follows_credentials_changed_in_settings(client):
    settings = default_settings()
    settings['credentials'] = {'username': 'gate', 'password': 'open sesame'}
    assert client.put('/api/settings', json=settings).status_code == 200
    assert client.post('/api/auth/login', json={'username': 'gate', 'password': 'open sesame'}).status_code == 200


def test_login_with_bcrypt_hashed_password(app, client):
    with app.app_context():
        hashed = bcrypt.generate_password_hash('s3cret').decode('utf-8')
    settings = default_settings()
    settings['credentials'] = {'username': 'admin', 'password': hashed}
    client.put('/api/settings', json=settings)

    assert client.post('/api/auth/login', json={'username': 'admin', 'password': 's3cret'}).status_code == 200
    assert client.post('/api/auth/login', json={'username': 'admin', 'password': hashed}).status_code == 401


def test_login_with_malformed_stored_hash_is_rejected(client):
    settings = default_settings()
    settings['credentials'] = {'username': 'admin', 'password': '$2b$not-a-hash'}
    client.put('/api/settings', json=settings)

    res = client.post('/api/auth/login', json={'username': 'admin', 'password': 'anything'})
    assert res.status_code == 401
