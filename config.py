import os


def _database_url():
    db_url = os.getenv("DATABASE_URL")
    if not db_url:
        return "sqlite:///escola.db"
    if db_url.startswith("postgres://"):
        db_url = db_url.replace("postgres://", "postgresql+psycopg://", 1)
    return db_url


class Config:
    SQLALCHEMY_DATABASE_URI = _database_url()
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret")

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # admin padrão criado na primeira subida
    SEED_ADMIN = True
    DEFAULT_ADMIN_EMAIL = os.getenv("DEFAULT_ADMIN_EMAIL", "admin@escola.com.br")
    DEFAULT_ADMIN_PASSWORD = os.getenv("DEFAULT_ADMIN_PASSWORD", "admin123")


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SECRET_KEY = "test"
    LOG_LEVEL = "WARNING"
    SEED_ADMIN = False
