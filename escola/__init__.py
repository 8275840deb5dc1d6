import logging

from flask import Flask, g, jsonify

from config import Config

from .errors import NotFound, Unauthenticated
from .extensions import db, login_manager
from .logs import configure_logging

logger = logging.getLogger(__name__)


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    configure_logging(app)
    db.init_app(app)
    login_manager.init_app(app)

    from .models import User

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, user_id)

    @login_manager.unauthorized_handler
    def unauthorized():
        err = Unauthenticated()
        return jsonify(err.to_result()), err.http_status

    # Blueprints
    from .blueprints.auth import auth_bp
    from .blueprints.estoque import estoque_bp
    from .blueprints.usuarios import usuarios_bp
    from .blueprints.alunos import alunos_bp
    from .blueprints.professores import professores_bp
    from .blueprints.salas import salas_bp
    from .blueprints.cursos import cursos_bp
    from .blueprints.financeiro import financeiro_bp
    from .blueprints.portal_professor import portal_professor_bp
    from .blueprints.portal_aluno import portal_aluno_bp
    from .blueprints.relatorios import relatorios_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(estoque_bp)
    app.register_blueprint(usuarios_bp)
    app.register_blueprint(alunos_bp)
    app.register_blueprint(professores_bp)
    app.register_blueprint(salas_bp)
    app.register_blueprint(cursos_bp)
    app.register_blueprint(financeiro_bp)
    app.register_blueprint(portal_professor_bp)
    app.register_blueprint(portal_aluno_bp)
    app.register_blueprint(relatorios_bp)

    @app.errorhandler(404)
    def not_found(e):
        err = NotFound("Rota não encontrada")
        return jsonify(err.to_result()), 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return jsonify({"success": False, "kind": "MethodNotAllowed", "serverError": "Método não permitido"}), 405

    @app.after_request
    def stale_views_header(response):
        stale = g.get("stale_views")
        if stale:
            response.headers["X-Stale-Views"] = ", ".join(dict.fromkeys(stale))
        return response

    @app.get("/")
    def index():
        return jsonify({"app": "escola", "status": "ok"})

    # cria tabelas + admin padrão
    with app.app_context():
        db.create_all()
        if app.config.get("SEED_ADMIN"):
            seed_admin(app.config)

    return app


def seed_admin(config):
    from .models import User

    email = config["DEFAULT_ADMIN_EMAIL"].lower()
    if User.query.filter_by(email=email).first():
        return None

    u = User(name="Administrador", email=email, role="admin", active=True, email_verified=True)
    u.set_password(config["DEFAULT_ADMIN_PASSWORD"])
    db.session.add(u)
    db.session.commit()
    logger.info("admin padrão criado: %s", email)
    return u
