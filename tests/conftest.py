"""
Fixtures compartilhadas: app em SQLite em memória, cliente HTTP e usuários
de cada papel (admin, professor com cadastro, aluno com cadastro).
"""
from contextlib import contextmanager
from datetime import date
from types import SimpleNamespace

import pytest
from flask_login import login_user

from config import TestConfig
from escola import create_app
from escola.extensions import db
from escola.models import Student, Teacher, User
from escola.pipeline import ActionClient, Caller

PASSWORD = "senha1234"


@pytest.fixture
def app():
    app = create_app(TestConfig)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def _user(name, email, role):
    u = User(name=name, email=email, role=role, active=True)
    u.set_password(PASSWORD)
    db.session.add(u)
    db.session.flush()
    return u


@pytest.fixture
def people(app):
    """Ids de um admin, um professor e um aluno (com seus cadastros)."""
    with app.app_context():
        admin = _user("Admin", "admin@escola.com.br", "admin")

        prof_user = _user("Maria Professora", "maria@escola.com.br", "teacher")
        teacher = Teacher(user_id=prof_user.id, cpf="11122233344", hire_date=date(2024, 2, 1))

        aluno_user = _user("João Aluno", "joao@escola.com.br", "student")
        student = Student(user_id=aluno_user.id, cpf="55566677788", enrollment_number="2024001")

        db.session.add_all([teacher, student])
        db.session.commit()

        return SimpleNamespace(
            admin=admin.id,
            teacher_user=prof_user.id,
            teacher=teacher.id,
            student_user=aluno_user.id,
            student=student.id,
        )


@pytest.fixture
def act_as(app):
    """Executa operações dentro de um request com o usuário logado.

        with act_as(people.admin):
            result = create_material({...})
    """
    @contextmanager
    def _act_as(user_id=None):
        with app.test_request_context():
            if user_id is not None:
                login_user(db.session.get(User, user_id))
            yield
    return _act_as


@pytest.fixture
def login(client):
    def _login(email, password=PASSWORD):
        resp = client.post("/auth/login", json={"email": email, "password": password})
        assert resp.status_code == 200, resp.get_json()
        return resp
    return _login


@pytest.fixture
def stub_client():
    """ActionClient sem Flask: sessão e views desatualizadas controladas pelo teste."""
    state = SimpleNamespace(caller=Caller(user_id="u-admin", role="admin"), stale=[])
    client = ActionClient(
        resolve_session=lambda: state.caller,
        notify_stale=state.stale.extend,
    )
    state.client = client
    return state
