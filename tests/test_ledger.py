"""
Razão de estoque: saldo, movimentações e histórico imutável.
"""
import pytest
from sqlalchemy.exc import IntegrityError

from escola import ledger
from escola.actions.estoque import (
    add_material_movement,
    create_material,
    delete_material,
    get_material_balance,
    list_material_movements,
)
from escola.errors import ImmutableRecordError, InsufficientStock, NotFound, ValidationFailed
from escola.extensions import db
from escola.models import Material, MaterialMovement


@pytest.fixture
def ream(app, people, act_as):
    """Resma de papel com 10 unidades e mínimo 5."""
    with act_as(people.admin):
        result = create_material({"name": "Resma de Papel", "quantity": 10, "min_quantity": 5})
    assert result["success"], result
    return result["id"]


def _quantity(material_id):
    return db.session.get(Material, material_id).quantity


def _movement_count(material_id):
    return MaterialMovement.query.filter_by(material_id=material_id).count()


def _between_read_and_update(monkeypatch, statement):
    """Executa ``statement`` logo depois que o razão lê o material."""
    original = db.session.get

    def get_then_interfere(*args, **kwargs):
        material = original(*args, **kwargs)
        db.session.execute(statement)
        return material

    monkeypatch.setattr(db.session, "get", get_then_interfere)


class TestStockScenarios:

    def test_exit_decrements(self, ream, people, act_as):
        with act_as(people.admin):
            result = add_material_movement({"material_id": ream, "direction": "exit", "quantity": 3})
            assert result["success"] is True
            assert result["quantity"] == 7
            assert _quantity(ream) == 7
            assert _movement_count(ream) == 2

    def test_exit_beyond_stock_is_rejected(self, ream, people, act_as):
        with act_as(people.admin):
            result = add_material_movement({"material_id": ream, "direction": "exit", "quantity": 10})
            assert result["success"] is True

            result = add_material_movement({"material_id": ream, "direction": "exit", "quantity": 1})
            assert result == {
                "success": False,
                "kind": "InsufficientStock",
                "serverError": "Quantidade insuficiente em estoque",
            }
            assert _quantity(ream) == 0

    def test_insufficient_stock_leaves_no_trace(self, ream, people, act_as):
        with act_as(people.admin):
            add_material_movement({"material_id": ream, "direction": "exit", "quantity": 3})
            result = add_material_movement({"material_id": ream, "direction": "exit", "quantity": 10})
            assert result["kind"] == "InsufficientStock"
            assert _quantity(ream) == 7
            assert _movement_count(ream) == 2

    def test_entry_increments(self, ream, people, act_as):
        with act_as(people.admin):
            add_material_movement({"material_id": ream, "direction": "exit", "quantity": 3})
            result = add_material_movement({"material_id": ream, "direction": "entry", "quantity": 3})
            assert result["quantity"] == 10
            assert _movement_count(ream) == 3

    def test_zero_quantity_is_validation_failure(self, ream, people, act_as):
        with act_as(people.admin):
            result = add_material_movement({"material_id": ream, "direction": "exit", "quantity": 0})
            assert result["kind"] == "ValidationFailed"
            assert "quantity" in result["validationErrors"]
            assert _quantity(ream) == 10
            assert _movement_count(ream) == 1

    def test_unauthenticated_caller(self, ream, act_as):
        with act_as(None):
            result = add_material_movement({"material_id": ream, "direction": "exit", "quantity": 1})
            assert result == {"success": False, "kind": "Unauthenticated", "serverError": "Não autenticado"}
            assert _quantity(ream) == 10

    def test_delete_material_removes_movements(self, ream, people, act_as):
        with act_as(people.admin):
            add_material_movement({"material_id": ream, "direction": "exit", "quantity": 2})
            assert delete_material({"id": ream})["success"] is True
            assert db.session.get(Material, ream) is None
            assert _movement_count(ream) == 0

    def test_teacher_can_move_stock(self, ream, people, act_as):
        with act_as(people.teacher_user):
            result = add_material_movement({"material_id": ream, "direction": "exit", "quantity": 1})
            assert result["success"] is True
            movement = db.session.get(MaterialMovement, result["id"])
            assert movement.user_id == people.teacher_user

    def test_student_cannot_move_stock(self, ream, people, act_as):
        with act_as(people.student_user):
            result = add_material_movement({"material_id": ream, "direction": "exit", "quantity": 1})
            assert result["kind"] == "Forbidden"

    def test_unknown_material(self, app, people, act_as):
        with act_as(people.admin):
            result = add_material_movement({"material_id": "nao-existe", "direction": "entry", "quantity": 1})
            assert result["kind"] == "NotFound"


class TestReconciliation:

    def test_opening_balance_is_an_entry(self, ream, people, act_as):
        with act_as(people.admin):
            (opening,) = ledger.movement_history(ream)
            assert opening.direction == "entry"
            assert opening.quantity == 10
            assert opening.reason == ledger.OPENING_REASON
            assert opening.user_id == people.admin

    def test_zero_opening_balance_books_nothing(self, app, people, act_as):
        with act_as(people.admin):
            result = create_material({"name": "Giz", "quantity": 0})
            assert _movement_count(result["id"]) == 0
            assert ledger.ledger_balance(result["id"]) == 0

    def test_balance_matches_history_after_mixed_movements(self, ream, people, act_as):
        with act_as(people.admin):
            for direction, qty in [("exit", 4), ("entry", 7), ("exit", 13), ("exit", 1), ("entry", 2)]:
                add_material_movement({"material_id": ream, "direction": direction, "quantity": qty})

            result = get_material_balance({"material_id": ream})
            assert result["quantity"] == 10 - 4 + 7 - 13 - 1 + 2
            assert result["ledger_balance"] == result["quantity"]
            assert result["consistent"] is True

    def test_history_newest_first(self, ream, people, act_as):
        with act_as(people.admin):
            add_material_movement({"material_id": ream, "direction": "exit", "quantity": 1, "reason": "Sala 3"})
            movements = list_material_movements({"material_id": ream})["movements"]
            assert [m["direction"] for m in movements] == ["exit", "entry"]
            assert movements[0]["reason"] == "Sala 3"
            assert movements[0]["user"]["id"] == people.admin

    def test_quantity_never_negative(self, ream, people, act_as):
        with act_as(people.admin):
            for _ in range(15):
                add_material_movement({"material_id": ream, "direction": "exit", "quantity": 1})
            assert _quantity(ream) == 0
            assert ledger.ledger_balance(ream) == 0
            # abertura + 10 saídas; as 5 recusadas não deixam lançamento
            assert _movement_count(ream) == 11


class TestRecordMovement:

    def test_rejects_bad_direction(self, ream, app):
        with app.app_context():
            with pytest.raises(ValidationFailed) as exc:
                ledger.record_movement(ream, "sideways", 1)
            assert "direction" in exc.value.fields

    @pytest.mark.parametrize("qty", [0, -1, 1.5, True])
    def test_rejects_non_positive_integers(self, ream, app, qty):
        with app.app_context():
            with pytest.raises(ValidationFailed):
                ledger.record_movement(ream, "entry", qty)

    def test_insufficient_stock_carries_details(self, ream, app):
        with app.app_context():
            with pytest.raises(InsufficientStock) as exc:
                ledger.record_movement(ream, "exit", 11)
            assert exc.value.details == {"available": 10, "requested": 11}

    def test_failed_insert_rolls_back_quantity(self, ream, app):
        with app.app_context():
            # usuário inexistente: a FK da movimentação falha depois do UPDATE
            with pytest.raises(IntegrityError):
                ledger.record_movement(ream, "exit", 3, acting_user_id="usuario-fantasma")
            assert _quantity(ream) == 10
            assert _movement_count(ream) == 1

    def test_handler_crash_rolls_back(self, ream, app, monkeypatch):
        def broken(**kwargs):
            raise RuntimeError("disco cheio")

        monkeypatch.setattr(ledger, "MaterialMovement", broken)
        with app.app_context():
            with pytest.raises(RuntimeError):
                ledger.record_movement(ream, "exit", 3)
        monkeypatch.undo()

        with app.app_context():
            assert _quantity(ream) == 10
            assert _movement_count(ream) == 1

    def test_concurrent_exit_loses_cleanly(self, ream, app, monkeypatch):
        """Baixa paralela consumiu o saldo entre a leitura e o UPDATE."""
        _between_read_and_update(
            monkeypatch,
            Material.__table__.update().where(Material.__table__.c.id == ream).values(quantity=2),
        )
        with app.app_context():
            with pytest.raises(InsufficientStock):
                ledger.record_movement(ream, "exit", 5)
            monkeypatch.undo()
            assert _quantity(ream) == 10
            assert _movement_count(ream) == 1

    def test_stale_cached_material_does_not_block_exit(self, ream, app):
        """Entrada gravada por outro processo depois que o material foi carregado."""
        with app.app_context():
            material = db.session.get(Material, ream)
            assert material.quantity == 10
            db.session.execute(
                Material.__table__.update().where(Material.__table__.c.id == ream).values(quantity=20)
            )
            result = ledger.record_movement(ream, "exit", 15)
            assert result.quantity == 5
            assert _quantity(ream) == 5
            assert _movement_count(ream) == 2

    def test_material_deleted_before_update(self, ream, app, monkeypatch):
        _between_read_and_update(
            monkeypatch,
            Material.__table__.delete().where(Material.__table__.c.id == ream),
        )
        with app.app_context():
            with pytest.raises(NotFound):
                ledger.record_movement(ream, "exit", 1)


class TestImmutableHistory:

    def test_movement_cannot_be_edited(self, ream, app):
        with app.app_context():
            (movement,) = ledger.movement_history(ream)
            movement.quantity = 99
            with pytest.raises(ImmutableRecordError):
                db.session.commit()
            db.session.rollback()
            assert ledger.ledger_balance(ream) == 10

    def test_movement_cannot_be_deleted(self, ream, app):
        with app.app_context():
            (movement,) = ledger.movement_history(ream)
            db.session.delete(movement)
            with pytest.raises(ImmutableRecordError):
                db.session.flush()
            db.session.rollback()
            assert _movement_count(ream) == 1


class TestStockStatus:

    @pytest.mark.parametrize("quantity, minimum, status", [
        (5, 0, None),
        (0, 5, "critical"),
        (5, 5, "critical"),
        (7, 5, "low"),
        (8, 5, "normal"),
        (100, 5, "normal"),
    ])
    def test_thresholds(self, quantity, minimum, status):
        assert ledger.stock_status(quantity, minimum) == status
