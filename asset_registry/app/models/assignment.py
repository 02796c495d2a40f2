# app/models/assignment.py
from datetime import datetime
from asset_registry.app import db
from asset_registry.app.validation import isoformat


class AssignmentRecord(db.Model):
    """One hand-over of an asset to an employee; open until returned."""
    __tablename__ = 'assignment_record'

    id = db.Column(db.Integer, primary_key=True)
    asset_id = db.Column(db.Integer, db.ForeignKey('asset.id'), nullable=False, index=True)
    employee_id = db.Column(db.Integer, db.ForeignKey('employee.id'), nullable=False, index=True)
    assigned_date = db.Column(db.DateTime, nullable=False, default=datetime.now)
    returned_date = db.Column(db.DateTime)
    notes = db.Column(db.String(300), nullable=False, default='')

    @property
    def is_open(self):
        return self.returned_date is None

    def to_dict(self):
        return {
            'id': self.id,
            'asset_id': self.asset_id,
            'employee_id': self.employee_id,
            'assigned_date': isoformat(self.assigned_date),
            'returned_date': isoformat(self.returned_date),
            'notes': self.notes,
        }

    def __repr__(self):
        return f"AssignmentRecord(asset={self.asset_id}, employee={self.employee_id}, open={self.is_open})"
