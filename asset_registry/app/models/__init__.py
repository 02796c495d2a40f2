# app/models/__init__.py
from asset_registry.app import db

# Import models after db
from .asset import Asset
from .employee import Employee, EmployeeStatus
from .assignment import AssignmentRecord
from .user import User

__all__ = ['Asset', 'Employee', 'EmployeeStatus', 'AssignmentRecord', 'User']
