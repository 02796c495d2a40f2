import logging
from datetime import date, datetime, timedelta

from flask import current_app

from asset_registry.app import db, lifecycle
from asset_registry.app.database import transaction
from asset_registry.app.lifecycle import AssetCondition
from asset_registry.app.models import Asset, AssignmentRecord, Employee, EmployeeStatus, User

logger = logging.getLogger(__name__)


def seed_admin():
    username = current_app.config['ADMIN_USERNAME']
    if User.query.filter_by(username=username).first():
        logger.info('Admin user already exists.')
        return

    with transaction() as session:
        admin = User(username=username, email=f'{username}@local', role='admin')
        admin.set_password(current_app.config['ADMIN_PASSWORD'])
        session.add(admin)
    logger.info('Admin user seeded successfully')


def seed_sample_data():
    if Employee.query.count() == 0:
        with transaction() as session:
            session.add_all([
                Employee(full_name='John Doe', department='IT', designation='System Admin',
                         email='john.doe@company.com', phone_number='9876543210'),
                Employee(full_name='Jane Smith', department='Finance', designation='Accountant',
                         email='jane.smith@company.com', phone_number='9988776655'),
                Employee(full_name='David Miller', department='Operations', designation='Coordinator',
                         email='david.miller@company.com', phone_number='9123456780',
                         status=EmployeeStatus.INACTIVE),
            ])
        logger.info('Seeded employees')

    if Asset.query.count() == 0:
        today = date.today()
        assets = [
            Asset(name='Dell Latitude 5420', type='Laptop', make_model='Dell 5420 i7',
                  serial_number='DL-2023-001', condition=AssetCondition.GOOD,
                  purchase_date=today, warranty_expiry_date=today + timedelta(days=2 * 365)),
            Asset(name='HP LaserJet Pro MFP', type='Printer', make_model='HP M404dw',
                  serial_number='HP-404-PRN', condition=AssetCondition.NEW,
                  purchase_date=today, warranty_expiry_date=today + timedelta(days=365)),
            Asset(name='MacBook Air M2', type='Laptop', make_model='Apple M2 Air',
                  serial_number='MB-M2-0001', condition=AssetCondition.NEW, is_spare=True,
                  purchase_date=today, warranty_expiry_date=today + timedelta(days=3 * 365)),
        ]
        with transaction() as session:
            for asset in assets:
                asset.status = lifecycle.derive_status_on_create(asset.condition)
            session.add_all(assets)
        logger.info('Seeded assets')

    if AssignmentRecord.query.count() == 0:
        asset = Asset.query.filter_by(serial_number='HP-404-PRN').first()
        employee = Employee.query.filter_by(status=EmployeeStatus.ACTIVE).order_by(Employee.id).first()
        if asset is None or employee is None:
            return
        if lifecycle.check_assignable(asset, asset.open_assignment()) is not None:
            return

        with transaction() as session:
            asset.status, asset.employee_id = lifecycle.on_assign(asset, employee)
            session.add(AssignmentRecord(asset=asset, employee=employee,
                                         assigned_date=datetime.now() - timedelta(days=15),
                                         notes='Assigned during onboarding'))
        logger.info('Seeded asset history')


def seed_db():
    """Create the admin account and, when enabled, the sample records."""
    seed_admin()
    if current_app.config['SEED_SAMPLE_DATA']:
        seed_sample_data()
    db.session.remove()
