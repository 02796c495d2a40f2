# app/errors.py
import logging

from flask import jsonify
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm.exc import StaleDataError
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)


class AssetRegistryError(Exception):
    """Base class for every error kind the API reports to its callers.

    The lifecycle engine returns instances of these as values; request
    handlers raise them and the handlers registered below render them.
    """
    status_code = 400

    def __init__(self, message):
        super().__init__(message)
        self.message = message

    @property
    def kind(self):
        return type(self).__name__

    def to_dict(self):
        return {'error': self.kind, 'message': self.message}

    def __eq__(self, other):
        return type(self) is type(other) and self.message == other.message

    def __hash__(self):
        return hash((self.kind, self.message))


class ValidationError(AssetRegistryError):
    status_code = 400


class InvalidDateOrder(AssetRegistryError):
    status_code = 400


class FutureDate(AssetRegistryError):
    status_code = 400


class NotFound(AssetRegistryError):
    status_code = 404


class DuplicateKey(AssetRegistryError):
    status_code = 409


class AssetInUse(AssetRegistryError):
    status_code = 409


class EmployeeHasAssignedAssets(AssetRegistryError):
    status_code = 409


class AssetNotServiceable(AssetRegistryError):
    status_code = 409


class ConcurrentModification(AssetRegistryError):
    status_code = 409


def register_error_handlers(app):
    from asset_registry.app import db

    @app.errorhandler(AssetRegistryError)
    def handle_registry_error(error):
        db.session.rollback()
        logger.warning('%s: %s', error.kind, error.message)
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(error):
        db.session.rollback()
        logger.warning('Integrity error: %s', error.orig)
        return jsonify(DuplicateKey('A record with the same unique value already exists.').to_dict()), 409

    @app.errorhandler(StaleDataError)
    def handle_stale_data(error):
        db.session.rollback()
        logger.warning('Concurrent modification: %s', error)
        body = ConcurrentModification('The record was modified by another request. Reload and retry.')
        return jsonify(body.to_dict()), 409

    @app.errorhandler(HTTPException)
    def handle_http_exception(error):
        return jsonify({'error': error.name, 'message': error.description}), error.code

    @app.errorhandler(Exception)
    def handle_unexpected(error):
        db.session.rollback()
        logger.exception('Unhandled error')
        return jsonify({'error': 'InternalServerError', 'message': 'An unexpected error occurred.'}), 500
