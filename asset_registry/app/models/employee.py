# app/models/employee.py
from datetime import datetime
from enum import Enum
from asset_registry.app import db
from asset_registry.app.validation import isoformat


class EmployeeStatus(Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"


class Employee(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    full_name = db.Column(db.String(100), nullable=False)
    department = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(254), unique=True, nullable=False)
    # Empty string means "no phone"; uniqueness only applies to real numbers
    phone_number = db.Column(db.String(15), nullable=False, default='')
    designation = db.Column(db.String(100), nullable=False)
    status = db.Column(
        db.Enum(EmployeeStatus, values_callable=lambda e: [m.value for m in e],
                native_enum=False, length=10),
        nullable=False, default=EmployeeStatus.ACTIVE)
    created_date = db.Column(db.DateTime, nullable=False, default=datetime.now)

    __table_args__ = (
        db.Index('uq_employee_phone_number', 'phone_number', unique=True,
                 sqlite_where=db.text("phone_number != ''"),
                 postgresql_where=db.text("phone_number != ''")),
    )

    assets = db.relationship('Asset', backref='employee', lazy=True)
    assignments = db.relationship('AssignmentRecord', backref='employee', lazy=True,
                                  cascade='all, delete-orphan')

    @classmethod
    def email_taken(cls, email, exclude_id=None):
        query = cls.query.filter(db.func.lower(cls.email) == email.lower())
        if exclude_id is not None:
            query = query.filter(cls.id != exclude_id)
        return db.session.query(query.exists()).scalar()

    @classmethod
    def phone_taken(cls, phone_number, exclude_id=None):
        if not phone_number:
            return False
        query = cls.query.filter(cls.phone_number == phone_number)
        if exclude_id is not None:
            query = query.filter(cls.id != exclude_id)
        return db.session.query(query.exists()).scalar()

    def to_dict(self, include_assets=True):
        data = {
            'id': self.id,
            'full_name': self.full_name,
            'department': self.department,
            'email': self.email,
            'phone_number': self.phone_number,
            'designation': self.designation,
            'status': self.status.value,
            'created_date': isoformat(self.created_date),
        }
        if include_assets:
            data['assets'] = [asset.to_dict(include_employee=False) for asset in self.assets]
        return data

    def __repr__(self):
        return f'<Employee {self.email}>'
