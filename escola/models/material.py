from escola.extensions import db
from .mixins import SerializerMixin, TimestampMixin, new_id, utcnow

ENTRY = "entry"
EXIT = "exit"
DIRECTIONS = (ENTRY, EXIT)


class Material(TimestampMixin, SerializerMixin, db.Model):
    __tablename__ = "materials"
    __table_args__ = (
        db.CheckConstraint("quantity >= 0", name="ck_materials_quantity"),
        db.CheckConstraint("min_quantity >= 0", name="ck_materials_min_quantity"),
    )

    id = db.Column(db.String(32), primary_key=True, default=new_id)
    name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text)
    category = db.Column(db.String(120))
    # alterado somente pelo ledger (escola.ledger)
    quantity = db.Column(db.Integer, nullable=False, default=0)
    min_quantity = db.Column(db.Integer, nullable=False, default=0)
    unit = db.Column(db.String(40), nullable=False, default="unidade")
    price = db.Column(db.Numeric(10, 2))
    supplier = db.Column(db.String(200))
    location = db.Column(db.String(200))

    # a exclusão em cascata fica a cargo do banco (ON DELETE CASCADE)
    movements = db.relationship(
        "MaterialMovement",
        back_populates="material",
        passive_deletes="all",
        order_by="MaterialMovement.created_at",
    )

    def to_dict(self) -> dict:
        from escola.ledger import stock_status

        data = super().to_dict()
        data["stock_status"] = stock_status(self.quantity, self.min_quantity)
        return data

    def __repr__(self):
        return f"<Material {self.name} ({self.quantity} {self.unit})>"


class MaterialMovement(SerializerMixin, db.Model):
    """Lançamento de entrada/saída. Nunca é alterado depois de criado."""

    __tablename__ = "material_movements"
    __table_args__ = (
        db.CheckConstraint("quantity > 0", name="ck_material_movements_quantity"),
        db.CheckConstraint("direction IN ('entry', 'exit')", name="ck_material_movements_direction"),
    )

    id = db.Column(db.String(32), primary_key=True, default=new_id)
    material_id = db.Column(
        db.String(32), db.ForeignKey("materials.id", ondelete="CASCADE"), nullable=False, index=True
    )
    direction = db.Column(db.String(10), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    reason = db.Column(db.Text)
    user_id = db.Column(db.String(32), db.ForeignKey("users.id", ondelete="SET NULL"))
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    material = db.relationship("Material", back_populates="movements")
    user = db.relationship("User")

    @property
    def delta(self) -> int:
        return self.quantity if self.direction == ENTRY else -self.quantity

    def __repr__(self):
        return f"<MaterialMovement {self.direction} {self.quantity} material={self.material_id}>"
