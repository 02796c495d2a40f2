import logging

from flask import request, jsonify, url_for
from flask_login import login_required

from asset_registry.app import lifecycle
from asset_registry.app.database import transaction, get_or_404
from asset_registry.app.errors import DuplicateKey
from asset_registry.app.models import Employee, EmployeeStatus
from asset_registry.app.routes import employees_bp as bp
from asset_registry.app.validation import (check_id_matches, get_payload, normalize_email,
                                           normalize_phone, parse_enum, require_text)

logger = logging.getLogger(__name__)


def _employee_fields(payload):
    return {
        'full_name': require_text(payload, 'full_name', 100, min_length=3),
        'department': require_text(payload, 'department', 100),
        'email': normalize_email(payload.get('email')),
        'phone_number': normalize_phone(payload.get('phone_number')),
        'designation': require_text(payload, 'designation', 100),
        'status': parse_enum(EmployeeStatus, payload.get('status'), 'status',
                             default=EmployeeStatus.ACTIVE),
    }


def _check_unique(fields, exclude_id=None):
    another = 'Another employee' if exclude_id is not None else 'Employee'
    if Employee.email_taken(fields['email'], exclude_id=exclude_id):
        raise DuplicateKey(f"{another} with email '{fields['email']}' already exists.")
    if Employee.phone_taken(fields['phone_number'], exclude_id=exclude_id):
        raise DuplicateKey(f"{another} with phone '{fields['phone_number']}' already exists.")


@bp.route('', methods=['GET'])
@login_required
def list_employees():
    employees = Employee.query.order_by(Employee.id).all()
    return jsonify([employee.to_dict() for employee in employees])


@bp.route('/<int:id>', methods=['GET'])
@login_required
def get_employee(id):
    return jsonify(get_or_404(Employee, id, 'Employee').to_dict())


@bp.route('/<int:id>/history', methods=['GET'])
@login_required
def employee_history(id):
    employee = get_or_404(Employee, id, 'Employee')
    # Most recent hand-over first
    assignments = sorted(employee.assignments, key=lambda a: a.assigned_date, reverse=True)
    return jsonify([assignment.to_dict() for assignment in assignments])


@bp.route('', methods=['POST'])
@login_required
def create_employee():
    fields = _employee_fields(get_payload(request))

    with transaction() as session:
        _check_unique(fields)
        employee = Employee(**fields)
        session.add(employee)

    logger.info('Employee %s created', employee.email)
    return jsonify(employee.to_dict()), 201, {'Location': url_for('employees.get_employee', id=employee.id)}


@bp.route('/<int:id>', methods=['PUT'])
@login_required
def update_employee(id):
    payload = get_payload(request)
    check_id_matches(payload, id, 'Employee')
    fields = _employee_fields(payload)

    with transaction():
        employee = get_or_404(Employee, id, 'Employee')
        _check_unique(fields, exclude_id=id)
        for key, value in fields.items():
            setattr(employee, key, value)

    logger.info('Employee %s updated', employee.email)
    return jsonify({'message': 'Employee updated successfully.', 'employee': employee.to_dict()})


@bp.route('/<int:id>', methods=['DELETE'])
@login_required
def delete_employee(id):
    with transaction() as session:
        employee = get_or_404(Employee, id, 'Employee')
        error = lifecycle.check_employee_deletable(employee)
        if error:
            raise error
        email = employee.email
        # Assets still pointing at the employee lose the reference
        session.delete(employee)

    logger.info('Employee %s deleted', email)
    return jsonify({'message': 'Employee deleted successfully.'})
