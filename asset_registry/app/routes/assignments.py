import logging
from datetime import datetime

from flask import current_app, request, jsonify, url_for
from flask_login import login_required
from flask_mail import Message

from asset_registry.app import db, lifecycle, mail
from asset_registry.app.database import transaction, get_or_404
from asset_registry.app.errors import NotFound, ValidationError
from asset_registry.app.lifecycle import AssignmentPolicy
from asset_registry.app.models import Asset, AssignmentRecord, Employee
from asset_registry.app.routes import assignments_bp as bp
from asset_registry.app.validation import (check_id_matches, get_payload, optional_text,
                                           parse_datetime, parse_enum, parse_int)

logger = logging.getLogger(__name__)

RETURN_ORDER_MESSAGE = "Returned date cannot be earlier than assigned date."


def send_assignment_email(record):
    msg = Message('New Asset Assignment',
                  recipients=[record.employee.email])
    msg.body = f'''Dear {record.employee.full_name},

You have been assigned a new asset:
Asset: {record.asset.name} ({record.asset.serial_number})
Type: {record.asset.type}
Assigned on: {record.assigned_date.strftime('%Y-%m-%d')}

Please contact the IT department if any details are incorrect.

Thank you,
IT Department
'''
    mail.send(msg)


def _notify(record):
    if not current_app.config.get('MAIL_SERVER'):
        return
    try:
        send_assignment_email(record)
    except Exception:
        # The assignment is already committed; a mail outage must not undo it
        logger.exception('Could not send assignment email to %s', record.employee.email)


def _assignment_policy():
    return parse_enum(AssignmentPolicy, current_app.config['ASSIGNMENT_POLICY'],
                      'assignment policy')


@bp.route('', methods=['GET'])
@login_required
def list_assignments():
    query = AssignmentRecord.query
    if request.args.get('asset_id', type=int):
        query = query.filter_by(asset_id=request.args.get('asset_id', type=int))
    if request.args.get('employee_id', type=int):
        query = query.filter_by(employee_id=request.args.get('employee_id', type=int))
    if request.args.get('open') == 'true':
        query = query.filter(AssignmentRecord.returned_date.is_(None))
    records = query.order_by(AssignmentRecord.id).all()
    return jsonify([record.to_dict() for record in records])


@bp.route('/<int:id>', methods=['GET'])
@login_required
def get_assignment(id):
    return jsonify(get_or_404(AssignmentRecord, id, 'Asset history').to_dict())


@bp.route('', methods=['POST'])
@login_required
def create_assignment():
    payload = get_payload(request)
    asset_id = parse_int(payload, 'asset_id')
    employee_id = parse_int(payload, 'employee_id')
    assigned_date = parse_datetime(payload.get('assigned_date'), 'assigned_date',
                                   required=False) or datetime.now()
    returned_date = parse_datetime(payload.get('returned_date'), 'returned_date', required=False)
    notes = optional_text(payload, 'notes', 300)

    error = lifecycle.validate_date_order(assigned_date, returned_date, RETURN_ORDER_MESSAGE)
    if error:
        raise error

    with transaction() as session:
        asset = db.session.get(Asset, asset_id)
        if asset is None:
            raise NotFound(f"Invalid Asset ID: {asset_id}")
        employee = db.session.get(Employee, employee_id)
        if employee is None:
            raise NotFound(f"Invalid Employee ID: {employee_id}")

        if returned_date is None:
            error = lifecycle.check_assignable(asset, asset.open_assignment(), _assignment_policy())
            if error:
                raise error
            asset.status, asset.employee_id = lifecycle.on_assign(asset, employee)

        # A record that arrives already returned is back-filled history and
        # leaves the asset alone
        record = AssignmentRecord(asset=asset, employee=employee, assigned_date=assigned_date,
                                  returned_date=returned_date, notes=notes)
        session.add(record)

    if record.is_open:
        logger.info('Asset %s assigned to %s (status %s)',
                    asset.serial_number, employee.email, asset.status.value)
        _notify(record)
    else:
        logger.info('Back-filled history for asset %s', asset.serial_number)

    return (jsonify(record.to_dict()), 201,
            {'Location': url_for('assignments.get_assignment', id=record.id)})


@bp.route('/<int:id>', methods=['PUT'])
@login_required
def update_assignment(id):
    payload = get_payload(request)
    check_id_matches(payload, id, 'History')

    with transaction():
        record = get_or_404(AssignmentRecord, id, 'Asset history')

        for field in ('asset_id', 'employee_id'):
            if field in payload and payload[field] != getattr(record, field):
                raise ValidationError(
                    f"'{field}' of an assignment cannot be changed; "
                    "record a return and a new assignment instead.")

        # Fields left out of the body keep their stored values
        assigned_date = record.assigned_date
        if 'assigned_date' in payload:
            assigned_date = parse_datetime(payload['assigned_date'], 'assigned_date')
        returned_date = record.returned_date
        if 'returned_date' in payload:
            returned_date = parse_datetime(payload['returned_date'], 'returned_date',
                                           required=False)
        notes = record.notes
        if 'notes' in payload:
            notes = optional_text(payload, 'notes', 300)

        error = lifecycle.validate_date_order(assigned_date, returned_date, RETURN_ORDER_MESSAGE)
        if error:
            raise error
        if not record.is_open and returned_date is None:
            raise ValidationError("A returned assignment cannot be reopened.")

        returning = record.is_open and returned_date is not None
        record.assigned_date = assigned_date
        record.returned_date = returned_date
        record.notes = notes

        if returning:
            asset = record.asset
            asset.status, asset.employee_id = lifecycle.on_return(asset)

    if returning:
        logger.info('Asset %s returned, now %s', record.asset.serial_number,
                    record.asset.status.value)
    return jsonify({'message': 'Asset history updated successfully.', 'history': record.to_dict()})


@bp.route('/<int:id>', methods=['DELETE'])
@login_required
def delete_assignment(id):
    with transaction() as session:
        record = get_or_404(AssignmentRecord, id, 'Asset history')
        if record.is_open:
            # Deleting the open record cancels the hand-over
            asset = record.asset
            asset.status, asset.employee_id = lifecycle.on_return(asset)
        session.delete(record)

    logger.info('Asset history %s deleted', id)
    return jsonify({'message': 'Asset history deleted successfully.'})
