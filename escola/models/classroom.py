from escola.extensions import db
from .mixins import SerializerMixin, TimestampMixin, new_id


class Classroom(TimestampMixin, SerializerMixin, db.Model):
    __tablename__ = "classrooms"
    __table_args__ = (db.CheckConstraint("capacity > 0", name="ck_classrooms_capacity"),)

    id = db.Column(db.String(32), primary_key=True, default=new_id)
    name = db.Column(db.String(120), nullable=False, unique=True)
    capacity = db.Column(db.Integer, nullable=False)
    location = db.Column(db.String(120))
    description = db.Column(db.Text)
    status = db.Column(db.String(20), nullable=False, default="available")  # available | occupied | maintenance

    def __repr__(self):
        return f"<Classroom {self.name}>"
