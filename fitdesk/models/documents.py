from datetime import datetime
from fitdesk.extensions import db

STAFF_DOCUMENT_TYPES = ("contract", "certificate", "identification", "medical", "other")


class StaffDocument(db.Model):
    __tablename__ = "staff_documents"

    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(db.Integer, db.ForeignKey("companies.id"), nullable=False, index=True)
    staff_id = db.Column(db.Integer, db.ForeignKey("staff.id"), nullable=False, index=True)
    document_type = db.Column(db.String(30), nullable=False, default="other")
    description = db.Column(db.Text)
    expiry_date = db.Column(db.Date)
    file_name = db.Column(db.String(255), nullable=False)
    file_path = db.Column(db.String(500), nullable=False)
    file_type = db.Column(db.String(100), nullable=False)
    file_size = db.Column(db.Integer, nullable=False)
    uploaded_by = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    staff = db.relationship("Staff", back_populates="documents")

    def to_dict(self):
        return {
            "id": self.id,
            "staff_id": self.staff_id,
            "document_type": self.document_type,
            "description": self.description,
            "expiry_date": self.expiry_date.isoformat() if self.expiry_date else None,
            "file_name": self.file_name,
            "file_type": self.file_type,
            "file_size": self.file_size,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class StudentDocument(db.Model):
    __tablename__ = "student_documents"

    id = db.Column(db.Integer, primary_key=True)
    student_id = db.Column(db.Integer, db.ForeignKey("students.id"), nullable=False, index=True)
    description = db.Column(db.Text)
    file_name = db.Column(db.String(255), nullable=False)
    file_path = db.Column(db.String(500), nullable=False)
    file_type = db.Column(db.String(100), nullable=False)
    file_size = db.Column(db.Integer, nullable=False)
    uploaded_by = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    student = db.relationship("Student", back_populates="documents")

    def to_dict(self):
        return {
            "id": self.id,
            "student_id": self.student_id,
            "description": self.description,
            "file_name": self.file_name,
            "file_type": self.file_type,
            "file_size": self.file_size,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
