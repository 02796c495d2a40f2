"""Read-only report queries.

Each report returns explicit row types rather than loose query rows.
"""
from datetime import date, timedelta
from typing import NamedTuple, Optional

from sqlalchemy import func

from asset_registry.app import db
from asset_registry.app.lifecycle import AssetStatus
from asset_registry.app.models import Asset, AssignmentRecord, Employee


class AssetStatusRow(NamedTuple):
    id: int
    name: str
    serial_number: str
    condition: str
    status: str
    warranty_expiry_date: date


class ExpiringAssetRow(NamedTuple):
    id: int
    name: str
    serial_number: str
    warranty_expiry_date: date
    days_remaining: int


class UtilizationRow(NamedTuple):
    employee_id: int
    full_name: str
    assigned_assets: int


class AssetExportRow(NamedTuple):
    serial_number: str
    name: str
    type: str
    condition: str
    status: str
    warranty_expiry_date: date
    assigned_to: Optional[str]


def assets_by_status():
    """Per-status counts (every status present, zero included) and the asset rows."""
    counts = {status.value: 0 for status in AssetStatus}
    for status, total in db.session.query(Asset.status, func.count(Asset.id)).group_by(Asset.status):
        counts[status.value] = total

    rows = [
        AssetStatusRow(a.id, a.name, a.serial_number, a.condition.value, a.status.value,
                       a.warranty_expiry_date)
        for a in Asset.query.order_by(Asset.status, Asset.id)
    ]
    return counts, rows


def expiring_assets(window_days, today=None):
    # Already expired warranties are included
    today = today or date.today()
    cutoff = today + timedelta(days=window_days)
    assets = (Asset.query
              .filter(Asset.warranty_expiry_date <= cutoff)
              .order_by(Asset.warranty_expiry_date, Asset.id))
    return [
        ExpiringAssetRow(a.id, a.name, a.serial_number, a.warranty_expiry_date,
                         (a.warranty_expiry_date - today).days)
        for a in assets
    ]


def employee_utilization():
    """Open assignments per employee, busiest first."""
    open_count = func.count(AssignmentRecord.id)
    rows = (db.session.query(Employee.id, Employee.full_name, open_count)
            .outerjoin(AssignmentRecord,
                       (AssignmentRecord.employee_id == Employee.id)
                       & AssignmentRecord.returned_date.is_(None))
            .group_by(Employee.id, Employee.full_name)
            .order_by(open_count.desc(), Employee.full_name)
            .all())
    return [UtilizationRow(*row) for row in rows]


def asset_export():
    return [
        AssetExportRow(a.serial_number, a.name, a.type, a.condition.value, a.status.value,
                       a.warranty_expiry_date, a.employee.full_name if a.employee else '')
        for a in Asset.query.order_by(Asset.id)
    ]
