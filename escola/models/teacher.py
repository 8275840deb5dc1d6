from escola.extensions import db
from .mixins import SerializerMixin, TimestampMixin, new_id


class Teacher(TimestampMixin, SerializerMixin, db.Model):
    __tablename__ = "teachers"

    id = db.Column(db.String(32), primary_key=True, default=new_id)
    user_id = db.Column(db.String(32), db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    cpf = db.Column(db.String(14), nullable=False, unique=True)
    phone = db.Column(db.String(30))
    birth_date = db.Column(db.Date)
    address = db.Column(db.String(255))
    city = db.Column(db.String(120))
    state = db.Column(db.String(40))
    zip_code = db.Column(db.String(20))
    specialization = db.Column(db.String(120))
    hire_date = db.Column(db.Date, nullable=False)
    salary = db.Column(db.Numeric(10, 2))
    status = db.Column(db.String(20), nullable=False, default="active")  # active | inactive | suspended

    user = db.relationship("User")

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["user"] = self.user.to_dict() if self.user else None
        return data

    def __repr__(self):
        return f"<Teacher {self.cpf}>"
