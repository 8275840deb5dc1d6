from escola.extensions import db
from .mixins import SerializerMixin, TimestampMixin, new_id


class Assignment(TimestampMixin, SerializerMixin, db.Model):
    __tablename__ = "assignments"

    id = db.Column(db.String(32), primary_key=True, default=new_id)
    course_id = db.Column(db.String(32), db.ForeignKey("courses.id", ondelete="CASCADE"), nullable=False)
    teacher_id = db.Column(db.String(32), db.ForeignKey("teachers.id", ondelete="CASCADE"), nullable=False)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text)
    type = db.Column(db.String(20), nullable=False)  # exam | assignment | project | activity
    due_date = db.Column(db.Date, nullable=False)
    max_grade = db.Column(db.Numeric(5, 2))

    def __repr__(self):
        return f"<Assignment {self.title}>"


class Grade(TimestampMixin, SerializerMixin, db.Model):
    __tablename__ = "grades"

    id = db.Column(db.String(32), primary_key=True, default=new_id)
    enrollment_id = db.Column(db.String(32), db.ForeignKey("enrollments.id", ondelete="CASCADE"), nullable=False)
    assignment_id = db.Column(db.String(32), db.ForeignKey("assignments.id", ondelete="SET NULL"))
    grade = db.Column(db.Numeric(5, 2), nullable=False)
    type = db.Column(db.String(40), nullable=False)
    description = db.Column(db.Text)

    enrollment = db.relationship("Enrollment")

    def __repr__(self):
        return f"<Grade {self.enrollment_id} {self.grade}>"
