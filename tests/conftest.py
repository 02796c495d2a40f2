"""
Pytest configuration and fixtures for the API tests
"""
from datetime import date, timedelta

import pytest

from asset_registry.app import create_app, db
from asset_registry.app.models import User
from asset_registry.config import TestConfig


@pytest.fixture
def app():
    """Create a Flask application backed by an in-memory database"""
    app = create_app(TestConfig)

    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin(app):
    user = User(username='admin', email='admin@example.com', role='admin')
    user.set_password('password')
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def auth_client(client, admin):
    """Test client with a logged-in session"""
    response = client.post('/api/auth/login', json={'username': 'admin', 'password': 'password'})
    assert response.status_code == 200
    return client


@pytest.fixture
def create_asset(auth_client):
    """Create an asset through the API and return its JSON body"""
    counter = iter(range(1, 1000))

    def _create(**overrides):
        payload = {
            'name': 'Dell Latitude 5420',
            'type': 'Laptop',
            'make_model': 'Dell 5420 i7',
            'serial_number': f'SN-{next(counter):04d}',
            'purchase_date': (date.today() - timedelta(days=30)).isoformat(),
            'warranty_expiry_date': (date.today() + timedelta(days=700)).isoformat(),
            'condition': 'Good',
        }
        payload.update(overrides)
        response = auth_client.post('/api/assets', json=payload)
        assert response.status_code == 201, response.get_json()
        return response.get_json()

    return _create


@pytest.fixture
def create_employee(auth_client):
    counter = iter(range(1, 1000))

    def _create(**overrides):
        n = next(counter)
        payload = {
            'full_name': f'Employee {n}',
            'department': 'IT',
            'email': f'employee{n}@company.com',
            'phone_number': f'98765{n:05d}',
            'designation': 'Engineer',
        }
        payload.update(overrides)
        response = auth_client.post('/api/employees', json=payload)
        assert response.status_code == 201, response.get_json()
        return response.get_json()

    return _create


@pytest.fixture
def assign(auth_client):
    """Hand an asset to an employee and return the assignment record"""
    def _assign(asset_id, employee_id, **extra):
        response = auth_client.post('/api/assethistories', json={
            'asset_id': asset_id, 'employee_id': employee_id, **extra})
        assert response.status_code == 201, response.get_json()
        return response.get_json()

    return _assign
