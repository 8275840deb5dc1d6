from escola.extensions import db
from .mixins import SerializerMixin, TimestampMixin, new_id


class Attendance(TimestampMixin, SerializerMixin, db.Model):
    __tablename__ = "attendance"
    __table_args__ = (db.UniqueConstraint("enrollment_id", "date", name="uq_attendance_enrollment_date"),)

    id = db.Column(db.String(32), primary_key=True, default=new_id)
    enrollment_id = db.Column(db.String(32), db.ForeignKey("enrollments.id", ondelete="CASCADE"), nullable=False)
    date = db.Column(db.Date, nullable=False)
    status = db.Column(db.String(20), nullable=False)  # present | absent | late | excused
    notes = db.Column(db.Text)

    enrollment = db.relationship("Enrollment")

    def __repr__(self):
        return f"<Attendance {self.enrollment_id} {self.date} {self.status}>"
