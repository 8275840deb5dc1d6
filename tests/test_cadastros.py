"""
Cadastros administrativos: usuários, alunos, professores, salas e cursos.
"""
from datetime import date

import pytest

from escola.actions import alunos, cursos, professores, salas, usuarios
from escola.extensions import db
from escola.models import Course, Enrollment, Student, Teacher, User


def _student_payload(**overrides):
    payload = {
        "name": "Ana Souza",
        "email": "ana@escola.com.br",
        "password": "segredo123",
        "cpf": "123.456.789-09",
        "enrollment_number": "2024100",
    }
    payload.update(overrides)
    return payload


def _teacher_payload(**overrides):
    payload = {
        "name": "Carlos Lima",
        "email": "carlos@escola.com.br",
        "password": "segredo123",
        "cpf": "98765432100",
        "hire_date": "2023-03-01",
        "salary": "4.500,00",
    }
    payload.update(overrides)
    return payload


class TestUsuarios:

    def test_list_flags_profiles(self, people, act_as):
        with act_as(people.admin):
            result = usuarios.list_users()
        by_id = {u["id"]: u for u in result["users"]}
        assert by_id[people.student_user]["has_student_profile"] is True
        assert by_id[people.teacher_user]["has_teacher_profile"] is True
        assert by_id[people.admin]["has_student_profile"] is False
        assert "password_hash" not in by_id[people.admin]

    def test_create_and_duplicate_email(self, people, act_as):
        with act_as(people.admin):
            payload = {"name": "Secretaria", "email": "secretaria@escola.com.br", "password": "123456", "role": "admin"}
            assert usuarios.create_user(payload)["success"] is True
            again = usuarios.create_user({**payload, "email": "SECRETARIA@escola.com.br"})
        assert again == {"success": False, "kind": "Conflict", "serverError": "E-mail já cadastrado"}

    def test_cannot_change_own_role(self, people, act_as):
        with act_as(people.admin):
            result = usuarios.update_user_role({"id": people.admin, "role": "student"})
        assert result["kind"] == "Forbidden"

    def test_change_role(self, people, act_as):
        with act_as(people.admin):
            assert usuarios.update_user_role({"id": people.student_user, "role": "teacher"})["success"]
            assert db.session.get(User, people.student_user).role == "teacher"

    def test_cannot_delete_self(self, people, act_as):
        with act_as(people.admin):
            assert usuarios.delete_user({"id": people.admin})["kind"] == "Forbidden"

    def test_teacher_cannot_list_users(self, people, act_as):
        with act_as(people.teacher_user):
            assert usuarios.list_users()["kind"] == "Forbidden"


class TestAlunos:

    def test_create_student_with_login(self, people, act_as):
        with act_as(people.admin):
            result = alunos.create_student(_student_payload())
            student = db.session.get(Student, result["id"])
            assert student.cpf == "12345678909"
            assert student.user.role == "student"
            assert student.user.check_password("segredo123")

    @pytest.mark.parametrize("overrides, message", [
        ({"email": "joao@escola.com.br"}, "E-mail já cadastrado"),
        ({"cpf": "555.666.777-88"}, "CPF já cadastrado"),
        ({"enrollment_number": "2024001"}, "Número de matrícula já cadastrado"),
    ])
    def test_conflicts(self, people, act_as, overrides, message):
        with act_as(people.admin):
            result = alunos.create_student(_student_payload(**overrides))
        assert result == {"success": False, "kind": "Conflict", "serverError": message}

    def test_invalid_cpf_and_short_password(self, people, act_as):
        with act_as(people.admin):
            result = alunos.create_student(_student_payload(cpf="123", password="curta"))
        assert result["validationErrors"]["cpf"] == "CPF inválido"
        assert "password" in result["validationErrors"]

    def test_update_ignores_blank_password(self, people, act_as):
        with act_as(people.admin):
            result = alunos.update_student({"id": people.student, "password": "", "city": "Recife"})
            assert result["success"] is True
            student = db.session.get(Student, people.student)
            assert student.city == "Recife"
            assert student.user.check_password("senha1234")

    def test_update_renames_user(self, people, act_as):
        with act_as(people.admin):
            alunos.update_student({"id": people.student, "name": "João Pedro"})
            assert db.session.get(User, people.student_user).name == "João Pedro"

    def test_delete_removes_login(self, people, act_as):
        with act_as(people.admin):
            assert alunos.delete_student({"id": people.student})["success"] is True
            assert db.session.get(User, people.student_user) is None
            assert Student.query.count() == 0

    def test_list_and_get(self, people, act_as):
        with act_as(people.admin):
            listed = alunos.list_students()
            got = alunos.get_student({"id": people.student})
        assert [s["id"] for s in listed["students"]] == [people.student]
        assert got["student"]["user"]["email"] == "joao@escola.com.br"


class TestProfessores:

    def test_create_teacher(self, people, act_as):
        with act_as(people.admin):
            result = professores.create_teacher(_teacher_payload())
            teacher = db.session.get(Teacher, result["id"])
            assert teacher.hire_date == date(2023, 3, 1)
            assert str(teacher.salary) == "4500.00"
            assert teacher.user.role == "teacher"

    def test_hire_date_required(self, people, act_as):
        payload = _teacher_payload()
        del payload["hire_date"]
        with act_as(people.admin):
            result = professores.create_teacher(payload)
        assert result["validationErrors"] == {"hire_date": "Campo obrigatório"}

    def test_cpf_conflict(self, people, act_as):
        with act_as(people.admin):
            result = professores.create_teacher(_teacher_payload(cpf="111.222.333-44"))
        assert result["serverError"] == "CPF já cadastrado"

    def test_delete_teacher_keeps_course(self, people, act_as):
        with act_as(people.admin):
            course = cursos.create_course({"name": "Violão", "code": "VIO-1", "price": "300", "teacher_id": people.teacher})
            assert professores.delete_teacher({"id": people.teacher})["success"] is True
            assert db.session.get(Course, course["id"]).teacher_id is None


class TestSalas:

    def test_crud(self, people, act_as):
        with act_as(people.admin):
            created = salas.create_classroom({"name": "Sala 1", "capacity": 30})
            assert salas.update_classroom({"id": created["id"], "status": "maintenance"})["success"]
            assert salas.get_classroom({"id": created["id"]})["classroom"]["status"] == "maintenance"
            assert salas.delete_classroom({"id": created["id"]})["success"]
            assert salas.list_classrooms()["classrooms"] == []

    def test_name_conflict_and_capacity(self, people, act_as):
        with act_as(people.admin):
            salas.create_classroom({"name": "Sala 1", "capacity": 30})
            assert salas.create_classroom({"name": "Sala 1", "capacity": 10})["kind"] == "Conflict"
            assert "capacity" in salas.create_classroom({"name": "Sala 2", "capacity": 0})["validationErrors"]


class TestCursos:

    def test_references_must_exist(self, people, act_as):
        with act_as(people.admin):
            result = cursos.create_course({
                "name": "Piano", "code": "PIA-1", "price": 500,
                "teacher_id": "nao-existe", "classroom_id": "nao-existe",
            })
        assert result["validationErrors"] == {
            "teacher_id": "Professor não encontrado",
            "classroom_id": "Sala não encontrada",
        }

    def test_end_before_start(self, people, act_as):
        with act_as(people.admin):
            result = cursos.create_course({
                "name": "Piano", "code": "PIA-1", "price": 500,
                "start_date": "2024-06-01", "end_date": "2024-01-01",
            })
        assert "end_date" in result["validationErrors"]

    def test_code_conflict(self, people, act_as):
        with act_as(people.admin):
            cursos.create_course({"name": "Piano", "code": "PIA-1", "price": 500})
            assert cursos.create_course({"name": "Piano 2", "code": "PIA-1", "price": 500})["kind"] == "Conflict"

    def test_enroll_student_once(self, people, act_as):
        with act_as(people.admin):
            course = cursos.create_course({"name": "Piano", "code": "PIA-1", "price": 500, "teacher_id": people.teacher})
            first = cursos.enroll_student({"course_id": course["id"], "student_id": people.student})
            second = cursos.enroll_student({"course_id": course["id"], "student_id": people.student})
            assert first["success"] is True
            assert second == {"success": False, "kind": "Conflict", "serverError": "Aluno já matriculado neste curso"}
            assert Enrollment.query.count() == 1

            listed = cursos.list_course_enrollments({"id": course["id"]})
            assert listed["enrollments"][0]["student"]["id"] == people.student

    def test_list_includes_teacher_name(self, people, act_as):
        with act_as(people.admin):
            cursos.create_course({"name": "Piano", "code": "PIA-1", "price": 500, "teacher_id": people.teacher})
            (course,) = cursos.list_courses()["courses"]
        assert course["teacher"]["name"] == "Maria Professora"
        assert course["price"] == "500.00"
