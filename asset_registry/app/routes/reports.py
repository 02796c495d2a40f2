from flask import Blueprint, current_app, jsonify, make_response
from flask_login import login_required
import io
import csv

from asset_registry.app import reports
from asset_registry.app.validation import isoformat

reports_bp = Blueprint('reports', __name__)


def _row_dict(row):
    return {key: isoformat(value) for key, value in row._asdict().items()}


@reports_bp.route('/assets-by-status')
@login_required
def assets_by_status():
    counts, rows = reports.assets_by_status()
    return jsonify({'counts': counts, 'assets': [_row_dict(row) for row in rows]})


@reports_bp.route('/expiring-assets')
@login_required
def expiring_assets():
    rows = reports.expiring_assets(current_app.config['WARRANTY_EXPIRY_WINDOW_DAYS'])
    return jsonify([_row_dict(row) for row in rows])


@reports_bp.route('/employee-utilization')
@login_required
def employee_utilization():
    return jsonify([_row_dict(row) for row in reports.employee_utilization()])


@reports_bp.route('/assets.csv')
@login_required
def download_report():
    output = io.StringIO()
    writer = csv.writer(output)

    writer.writerow(['Serial Number', 'Name', 'Type', 'Condition', 'Status',
                     'Warranty Expiry', 'Assigned To'])

    for row in reports.asset_export():
        writer.writerow([isoformat(value) for value in row])

    output.seek(0)

    response = make_response(output.getvalue())
    response.headers["Content-Disposition"] = "attachment; filename=asset_report.csv"
    response.headers["Content-type"] = "text/csv"

    return response
