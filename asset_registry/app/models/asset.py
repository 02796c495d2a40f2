# app/models/asset.py
from datetime import date, datetime
from asset_registry.app import db
from asset_registry.app.lifecycle import AssetCondition, AssetStatus
from asset_registry.app.validation import isoformat


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class Asset(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    type = db.Column(db.String(50), nullable=False)
    make_model = db.Column(db.String(100), nullable=False, default='')
    serial_number = db.Column(db.String(100), unique=True, nullable=False)
    purchase_date = db.Column(db.Date, nullable=False, default=date.today)
    warranty_expiry_date = db.Column(db.Date, nullable=False)
    condition = db.Column(
        db.Enum(AssetCondition, values_callable=_enum_values, native_enum=False, length=20),
        nullable=False, default=AssetCondition.NEW)
    status = db.Column(
        db.Enum(AssetStatus, values_callable=_enum_values, native_enum=False, length=20),
        nullable=False, default=AssetStatus.AVAILABLE)
    is_spare = db.Column(db.Boolean, nullable=False, default=False)
    specifications = db.Column(db.String(500), nullable=False, default='')
    created_date = db.Column(db.DateTime, nullable=False, default=datetime.now)
    employee_id = db.Column(db.Integer, db.ForeignKey('employee.id'), nullable=True, index=True)
    version = db.Column(db.Integer, nullable=False)

    assignments = db.relationship('AssignmentRecord', backref='asset', lazy=True,
                                  cascade='all, delete-orphan')

    __mapper_args__ = {'version_id_col': version}

    @classmethod
    def serial_number_taken(cls, serial_number, exclude_id=None):
        query = cls.query.filter(cls.serial_number == serial_number)
        if exclude_id is not None:
            query = query.filter(cls.id != exclude_id)
        return db.session.query(query.exists()).scalar()

    def open_assignment(self):
        return next((a for a in self.assignments if a.returned_date is None), None)

    def to_dict(self, include_employee=True):
        data = {
            'id': self.id,
            'name': self.name,
            'type': self.type,
            'make_model': self.make_model,
            'serial_number': self.serial_number,
            'purchase_date': isoformat(self.purchase_date),
            'warranty_expiry_date': isoformat(self.warranty_expiry_date),
            'condition': self.condition.value,
            'status': self.status.value,
            'is_spare': self.is_spare,
            'specifications': self.specifications,
            'created_date': isoformat(self.created_date),
            'employee_id': self.employee_id,
        }
        if include_employee:
            data['employee'] = self.employee.to_dict(include_assets=False) if self.employee else None
        return data

    def __repr__(self):
        return f'<Asset {self.serial_number}: {self.name} ({self.status.value})>'
