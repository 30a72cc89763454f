from medihub import db
from medihub.models import Patient


def test_init_db(make_app):
    app = make_app()
    result = app.test_cli_runner().invoke(args=['init-db'])

    assert 'Database initialised.' in result.output
    with app.app_context():
        assert Patient.query.count() == 0
        db.drop_all()


def test_generate_keys(make_app):
    result = make_app().test_cli_runner().invoke(args=['generate-keys'])

    lines = result.output.splitlines()
    assert lines[0].startswith('AES_KEY=')
    assert lines[1].startswith('HMAC_KEY=')


def test_unknown_route_is_json(client):
    response = client.get('/nowhere')
    assert response.status_code == 404
    assert response.get_json()['error'] == 'Not Found'


def test_landing_and_cache_headers(client):
    response = client.get('/')
    assert response.get_json()['roles'] == ['patient', 'doctor', 'admin', 'employee', 'supplier']
    assert 'no-store' in response.headers['Cache-Control']
