import base64
from datetime import date, timedelta

import pytest
from sqlalchemy import text
from sqlalchemy.orm.exc import StaleDataError

from asset_registry.app import db
from asset_registry.app.lifecycle import AssetStatus
from asset_registry.app.models import Asset, AssignmentRecord


def asset_payload(**overrides):
    payload = {
        'name': 'HP LaserJet Pro MFP',
        'type': 'Printer',
        'make_model': 'HP M404dw',
        'serial_number': 'HP-404-PRN',
        'purchase_date': (date.today() - timedelta(days=10)).isoformat(),
        'warranty_expiry_date': (date.today() + timedelta(days=365)).isoformat(),
        'condition': 'New',
    }
    payload.update(overrides)
    return payload


def test_assets_require_login(client):
    response = client.get('/api/assets')
    assert response.status_code == 401
    assert response.get_json()['error'] == 'Unauthorized'


def test_add_asset(auth_client):
    response = auth_client.post('/api/assets', json=asset_payload())
    assert response.status_code == 201

    body = response.get_json()
    assert body['status'] == 'Available'
    assert body['employee_id'] is None
    assert response.headers['Location'].endswith(f"/api/assets/{body['id']}")

    asset = db.session.get(Asset, body['id'])
    assert asset is not None
    assert asset.serial_number == 'HP-404-PRN'
    assert asset.status == AssetStatus.AVAILABLE


def test_create_status_follows_condition(auth_client):
    expected = {'New': 'Available', 'Good': 'Available',
                'Needs Repair': 'Under Repair', 'Damaged': 'Retired'}
    for n, (condition, status) in enumerate(expected.items()):
        response = auth_client.post('/api/assets', json=asset_payload(
            serial_number=f'SN-{n}', condition=condition, status='Assigned'))
        assert response.status_code == 201
        assert response.get_json()['status'] == status


def test_condition_is_case_insensitive(auth_client):
    response = auth_client.post('/api/assets', json=asset_payload(condition='needs repair'))
    assert response.get_json()['condition'] == 'Needs Repair'


def test_invalid_condition_rejected(auth_client):
    response = auth_client.post('/api/assets', json=asset_payload(condition='Broken'))
    assert response.status_code == 400
    assert response.get_json()['error'] == 'ValidationError'


def test_missing_serial_number_rejected(auth_client):
    response = auth_client.post('/api/assets', json=asset_payload(serial_number='   '))
    assert response.status_code == 400
    assert response.get_json()['error'] == 'ValidationError'


def test_duplicate_serial_number(auth_client, create_asset):
    first = create_asset(serial_number='DL-2023-001')
    second = create_asset(serial_number='DL-2023-002')

    response = auth_client.post('/api/assets', json=asset_payload(serial_number='DL-2023-001'))
    assert response.status_code == 409
    assert response.get_json()['error'] == 'DuplicateKey'

    # Renaming onto another asset's serial is a duplicate as well
    response = auth_client.put(f"/api/assets/{second['id']}",
                               json=asset_payload(serial_number='DL-2023-001'))
    assert response.status_code == 409

    response = auth_client.put(f"/api/assets/{second['id']}",
                               json=asset_payload(serial_number='DL-2023-003'))
    assert response.status_code == 200

    # Keeping your own serial is fine
    response = auth_client.put(f"/api/assets/{first['id']}",
                               json=asset_payload(serial_number='DL-2023-001', name='Renamed'))
    assert response.status_code == 200
    assert response.get_json()['asset']['name'] == 'Renamed'


def test_future_purchase_date(auth_client):
    tomorrow = (date.today() + timedelta(days=1)).isoformat()
    response = auth_client.post('/api/assets', json=asset_payload(purchase_date=tomorrow))
    assert response.status_code == 400
    assert response.get_json()['error'] == 'FutureDate'


def test_warranty_before_purchase(auth_client):
    response = auth_client.post('/api/assets', json=asset_payload(
        purchase_date='2024-01-10', warranty_expiry_date='2024-01-09'))
    assert response.status_code == 400
    assert response.get_json()['error'] == 'InvalidDateOrder'

    response = auth_client.post('/api/assets', json=asset_payload(
        purchase_date='2024-01-10', warranty_expiry_date='2024-01-10'))
    assert response.status_code == 201


def test_get_missing_asset(auth_client):
    response = auth_client.get('/api/assets/999')
    assert response.status_code == 404
    assert response.get_json()['error'] == 'NotFound'


def test_update_id_mismatch(auth_client, create_asset):
    asset = create_asset()
    response = auth_client.put(f"/api/assets/{asset['id']}", json=asset_payload(id=asset['id'] + 1))
    assert response.status_code == 400
    assert 'mismatch' in response.get_json()['message']

    response = auth_client.put(f"/api/assets/{asset['id']}", json=asset_payload(id=str(asset['id'])))
    assert response.status_code == 200

    response = auth_client.put(f"/api/assets/{asset['id']}", json=asset_payload(id='abc'))
    assert response.status_code == 400
    assert 'integer' in response.get_json()['message']


def test_condition_edit_keeps_assignment(auth_client, create_asset, create_employee, assign):
    asset = create_asset(serial_number='LAPTOP-001', condition='New')
    employee = create_employee()
    assign(asset['id'], employee['id'])

    response = auth_client.put(f"/api/assets/{asset['id']}",
                               json=asset_payload(serial_number='LAPTOP-001', condition='Good'))
    body = response.get_json()['asset']
    assert body['status'] == 'Assigned'
    assert body['employee_id'] == employee['id']


def test_damage_ends_assignment(auth_client, create_asset, create_employee, assign):
    asset = create_asset(serial_number='LAPTOP-001')
    employee = create_employee()
    record = assign(asset['id'], employee['id'])

    response = auth_client.put(f"/api/assets/{asset['id']}",
                               json=asset_payload(serial_number='LAPTOP-001', condition='Damaged'))
    body = response.get_json()['asset']
    assert body['status'] == 'Retired'
    assert body['employee_id'] is None

    # The hand-over is closed along with it
    stored = db.session.get(AssignmentRecord, record['id'])
    assert stored.returned_date is not None
    assert 'Damaged' in stored.notes


def test_repaired_asset_can_be_reassigned(auth_client, create_asset, create_employee, assign):
    asset = create_asset(serial_number='LAPTOP-001', condition='Good')
    first = create_employee()
    second = create_employee()
    assign(asset['id'], first['id'])

    auth_client.put(f"/api/assets/{asset['id']}",
                    json=asset_payload(serial_number='LAPTOP-001', condition='Damaged'))
    response = auth_client.put(f"/api/assets/{asset['id']}",
                               json=asset_payload(serial_number='LAPTOP-001', condition='Good'))
    body = response.get_json()['asset']
    assert body['status'] == 'Available'
    assert body['employee_id'] is None

    rows = auth_client.get('/api/reports/employee-utilization').get_json()
    assert all(row['assigned_assets'] == 0 for row in rows)

    assign(asset['id'], second['id'])
    stored = db.session.get(Asset, asset['id'])
    assert stored.status == AssetStatus.ASSIGNED
    assert stored.employee_id == second['id']


def test_repairing_a_handed_out_broken_asset(auth_client, create_asset, create_employee, assign):
    asset = create_asset(serial_number='LAPTOP-001', condition='Damaged')
    employee = create_employee()
    assign(asset['id'], employee['id'])

    response = auth_client.put(f"/api/assets/{asset['id']}",
                               json=asset_payload(serial_number='LAPTOP-001', condition='Good'))
    body = response.get_json()['asset']
    assert body['status'] == 'Assigned'
    assert body['employee_id'] == employee['id']


def test_client_cannot_set_status_or_employee(auth_client, create_asset, create_employee):
    asset = create_asset(serial_number='LAPTOP-001')
    employee = create_employee()
    response = auth_client.put(f"/api/assets/{asset['id']}", json=asset_payload(
        serial_number='LAPTOP-001', condition='Good', status='Assigned', employee_id=employee['id']))
    body = response.get_json()['asset']
    assert body['status'] == 'Available'
    assert body['employee_id'] is None


def test_delete_asset(auth_client, create_asset):
    asset = create_asset()
    response = auth_client.delete(f"/api/assets/{asset['id']}")
    assert response.status_code == 200
    assert db.session.get(Asset, asset['id']) is None


def test_cannot_delete_assigned_asset(auth_client, create_asset, create_employee, assign):
    asset = create_asset()
    employee = create_employee()
    record = assign(asset['id'], employee['id'])

    response = auth_client.delete(f"/api/assets/{asset['id']}")
    assert response.status_code == 409
    assert response.get_json()['error'] == 'AssetInUse'

    auth_client.put(f"/api/assethistories/{record['id']}",
                    json={'returned_date': date.today().isoformat() + 'T23:59:59'})
    response = auth_client.delete(f"/api/assets/{asset['id']}")
    assert response.status_code == 200
    # History goes with the asset
    assert AssignmentRecord.query.filter_by(asset_id=asset['id']).count() == 0


def test_search_assets(auth_client, create_asset):
    create_asset(name='Dell Latitude', type='Laptop', serial_number='LAPTOP-001')
    create_asset(name='iPhone 15', type='Mobile Device', serial_number='MOBILE-001')
    create_asset(name='ThinkPad X1', type='Laptop', serial_number='LAPTOP-002', condition='Damaged')

    # Search by serial number
    serials = {a['serial_number'] for a in auth_client.get('/api/assets?q=LAPTOP').get_json()}
    assert serials == {'LAPTOP-001', 'LAPTOP-002'}

    # Search by type
    serials = {a['serial_number'] for a in auth_client.get('/api/assets?type=Mobile+Device').get_json()}
    assert serials == {'MOBILE-001'}

    # Search by status
    serials = {a['serial_number'] for a in auth_client.get('/api/assets?status=Retired').get_json()}
    assert serials == {'LAPTOP-002'}


def test_asset_qr_code(auth_client, create_asset):
    asset = create_asset(serial_number='LAPTOP-003')
    response = auth_client.get(f"/api/assets/{asset['id']}/qr")
    assert response.status_code == 200

    body = response.get_json()
    assert body['serial_number'] == 'LAPTOP-003'
    assert base64.b64decode(body['qr_code']).startswith(b'\x89PNG')


def test_concurrent_writes_to_an_asset_conflict(create_asset):
    asset = create_asset()
    stored = db.session.get(Asset, asset['id'])
    assert stored.version == 1

    # Another writer commits first
    db.session.execute(text('UPDATE asset SET version = version + 1 WHERE id = :id'),
                       {'id': asset['id']})
    stored.name = 'Lost update'
    with pytest.raises(StaleDataError):
        db.session.commit()
    db.session.rollback()
