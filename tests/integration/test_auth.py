"""
Login, logout and registration through the auth blueprint.
"""

import pytest

from rab_maker.exceptions import BusinessLogicError, UnauthorizedError
from rab_maker.models import AppUser
from rab_maker.services.auth_service import authenticate, register_user


class TestRegister:

    def test_register_logs_in(self, client, session):
        response = client.post('/auth/register', json={
            'username': 'andi', 'password': 'rahasia123', 'full_name': 'Andi Wijaya'
        })

        assert response.status_code == 201
        assert response.get_json()['user']['username'] == 'andi'
        assert client.get('/dashboard/').status_code == 200

        user = session.query(AppUser).filter_by(username='andi').one()
        assert user.check_password('rahasia123')

    def test_duplicate_username(self, client, user1):
        response = client.post('/auth/register', json={'username': 'Budi', 'password': 'rahasia123'})

        assert response.status_code == 400
        assert 'sudah digunakan' in response.get_json()['message']

    @pytest.mark.parametrize('username, password', [('ab', 'rahasia123'), ('andi', '123')])
    def test_validation(self, session, username, password):
        with pytest.raises(BusinessLogicError):
            register_user(session, username, password)

        assert session.query(AppUser).count() == 0


class TestLogin:

    def test_login_grants_access(self, client, user1):
        assert client.get('/projects/').status_code == 401

        response = client.post('/auth/login', json={'username': 'budi', 'password': 'password123'})

        assert response.status_code == 200
        assert response.get_json()['user']['id'] == user1.id
        assert client.get('/projects/').status_code == 200
        assert client.get('/auth/me').get_json()['user']['username'] == 'budi'

    def test_wrong_password(self, client, user1):
        response = client.post('/auth/login', json={'username': 'budi', 'password': 'salah'})

        assert response.status_code == 401
        assert client.get('/projects/').status_code == 401

    def test_inactive_user(self, session, user1):
        user1.active = False
        session.commit()

        with pytest.raises(UnauthorizedError):
            authenticate(session, 'budi', 'password123')

    def test_missing_fields(self, client):
        response = client.post('/auth/login', json={'username': 'budi'})

        assert response.status_code == 400

    def test_form_post(self, client, user1):
        response = client.post('/auth/login', data={'username': 'budi', 'password': 'password123'})

        assert response.status_code == 200


class TestLogout:

    def test_logout_ends_session(self, client, user1):
        client.post('/auth/login', json={'username': 'budi', 'password': 'password123'})
        assert client.get('/dashboard/').status_code == 200

        response = client.post('/auth/logout')

        assert response.status_code == 200
        assert client.get('/dashboard/').status_code == 401
        assert client.get('/auth/me').status_code == 401
