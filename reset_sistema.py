"""Reset do sistema: apaga e recria as tabelas e cria o admin padrão.

Uso:
  python reset_sistema.py

Usa DATABASE_URL (ou escola.db local). O admin vem de DEFAULT_ADMIN_EMAIL /
DEFAULT_ADMIN_PASSWORD (padrão admin@escola.com.br / admin123).
"""
from config import Config
from escola import create_app, seed_admin
from escola.extensions import db


class _ResetConfig(Config):
    # o seed roda depois do drop_all, não na criação do app
    SEED_ADMIN = False


def resetar_banco(config_class=_ResetConfig):
    app = create_app(config_class)
    with app.app_context():
        db.drop_all()
        db.create_all()
        seed_admin(app.config)
    return app


if __name__ == "__main__":
    app = resetar_banco()
    print("OK! Banco recriado.")
    print(f"Login: {app.config['DEFAULT_ADMIN_EMAIL']}  |  Senha: {app.config['DEFAULT_ADMIN_PASSWORD']}")
