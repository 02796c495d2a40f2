# app/routes/assets.py
import base64
import logging
from datetime import date, datetime
from io import BytesIO

import qrcode
from flask import request, jsonify, url_for
from flask_login import login_required

from asset_registry.app import lifecycle
from asset_registry.app.database import transaction, get_or_404
from asset_registry.app.errors import DuplicateKey
from asset_registry.app.lifecycle import AssetCondition, AssetStatus
from asset_registry.app.models import Asset
from asset_registry.app.routes import assets_bp as bp
from asset_registry.app.validation import (check_id_matches, get_payload, optional_text,
                                           parse_bool, parse_date, parse_enum, require_text)

logger = logging.getLogger(__name__)


def _asset_fields(payload):
    """Editable asset fields from a request body, with the date rules applied."""
    fields = {
        'name': require_text(payload, 'name', 100),
        'type': require_text(payload, 'type', 50),
        'make_model': optional_text(payload, 'make_model', 100),
        'serial_number': require_text(payload, 'serial_number', 100),
        'purchase_date': parse_date(payload.get('purchase_date'), 'purchase_date',
                                    required=False) or date.today(),
        'warranty_expiry_date': parse_date(payload.get('warranty_expiry_date'),
                                           'warranty_expiry_date'),
        'condition': parse_enum(AssetCondition, payload.get('condition'), 'condition',
                                default=AssetCondition.NEW),
        'is_spare': parse_bool(payload, 'is_spare'),
        'specifications': optional_text(payload, 'specifications', 500),
    }
    error = lifecycle.first_error(
        lifecycle.validate_purchase_date(fields['purchase_date']),
        lifecycle.validate_date_order(
            fields['purchase_date'], fields['warranty_expiry_date'],
            "Warranty expiry date cannot be earlier than purchase date."),
    )
    if error:
        raise error
    return fields



def _close_record(record, condition):
    record.returned_date = max(datetime.now(), record.assigned_date)
    note = f"Returned on condition change to {condition.value}."
    record.notes = (f"{record.notes} {note}" if record.notes else note)[:300]


@bp.route('', methods=['GET'])
@login_required
def list_assets():
    query = request.args.get('q', '')
    asset_type = request.args.get('type', '')
    status = request.args.get('status', '')

    assets_query = Asset.query

    if query:
        assets_query = assets_query.filter(
            Asset.name.ilike(f'%{query}%') | Asset.serial_number.ilike(f'%{query}%'))

    if asset_type:
        assets_query = assets_query.filter(Asset.type.ilike(asset_type))

    if status:
        assets_query = assets_query.filter_by(status=parse_enum(AssetStatus, status, 'status'))

    assets = assets_query.order_by(Asset.id).all()
    return jsonify([asset.to_dict() for asset in assets])


@bp.route('/<int:id>', methods=['GET'])
@login_required
def get_asset(id):
    return jsonify(get_or_404(Asset, id, 'Asset').to_dict())


@bp.route('', methods=['POST'])
@login_required
def create_asset():
    fields = _asset_fields(get_payload(request))

    with transaction() as session:
        if Asset.serial_number_taken(fields['serial_number']):
            raise DuplicateKey(
                f"Asset with Serial Number '{fields['serial_number']}' already exists.")
        asset = Asset(**fields)
        asset.status = lifecycle.derive_status_on_create(asset.condition)
        session.add(asset)

    logger.info('Asset %s created with status %s', asset.serial_number, asset.status.value)
    return jsonify(asset.to_dict()), 201, {'Location': url_for('assets.get_asset', id=asset.id)}


@bp.route('/<int:id>', methods=['PUT'])
@login_required
def update_asset(id):
    payload = get_payload(request)
    check_id_matches(payload, id, 'Asset')
    fields = _asset_fields(payload)

    with transaction():
        asset = get_or_404(Asset, id, 'Asset')
        if Asset.serial_number_taken(fields['serial_number'], exclude_id=id):
            raise DuplicateKey(
                f"Another asset with Serial Number '{fields['serial_number']}' already exists.")

        previous_status = asset.status
        open_record = asset.open_assignment()
        for key, value in fields.items():
            setattr(asset, key, value)

        # A repaired asset that is still handed out goes back to Assigned
        held_status = AssetStatus.ASSIGNED if open_record is not None else previous_status
        asset.status = lifecycle.derive_status_on_update(asset.condition, held_status)
        if asset.status == AssetStatus.ASSIGNED and open_record is not None:
            asset.employee_id = open_record.employee_id

        # Damage or repair ends the assignment
        if previous_status == AssetStatus.ASSIGNED and asset.status != AssetStatus.ASSIGNED:
            logger.info('Asset %s dropped out of assignment (%s)',
                        asset.serial_number, asset.condition.value)
            asset.employee_id = None
            if open_record is not None:
                _close_record(open_record, asset.condition)

    logger.info('Asset %s updated', asset.serial_number)
    return jsonify({'message': 'Asset updated successfully.', 'asset': asset.to_dict()})


@bp.route('/<int:id>', methods=['DELETE'])
@login_required
def delete_asset(id):
    with transaction() as session:
        asset = get_or_404(Asset, id, 'Asset')
        error = lifecycle.check_asset_deletable(asset)
        if error:
            raise error
        serial_number = asset.serial_number
        session.delete(asset)

    logger.info('Asset %s deleted', serial_number)
    return jsonify({'message': 'Asset deleted successfully.'})


@bp.route('/<int:id>/qr', methods=['GET'])
@login_required
def get_asset_qr(id):
    asset = get_or_404(Asset, id, 'Asset')

    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_L,
        box_size=10,
        border=4,
    )

    qr_data = {
        'id': asset.id,
        'serial_number': asset.serial_number,
        'type': asset.type,
        'url': url_for('assets.get_asset', id=asset.id),
    }
    qr.add_data(str(qr_data))
    qr.make(fit=True)

    img_buffer = BytesIO()
    qr.make_image(fill_color="black", back_color="white").save(img_buffer, format='PNG')
    img_str = base64.b64encode(img_buffer.getvalue()).decode()

    return jsonify({'asset_id': asset.id, 'serial_number': asset.serial_number, 'qr_code': img_str})
