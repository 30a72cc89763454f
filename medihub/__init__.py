import base64
import os

import click
from flask import Flask
from flask.cli import with_appcontext
from flask_sqlalchemy import SQLAlchemy
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from dotenv import load_dotenv

from medihub import config

load_dotenv()  # Load environment variables from .env file

db = SQLAlchemy()
limiter = Limiter(key_func=get_remote_address, default_limits=[])


def create_app(overrides=None):
    app = Flask(__name__)
    app.config['SECRET_KEY'] = config.SECRET_KEY
    app.config['SQLALCHEMY_DATABASE_URI'] = config.DB_URI
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
    app.config['SESSION_COOKIE_HTTPONLY'] = True
    app.config['LOGIN_RATE_LIMIT'] = config.LOGIN_RATE_LIMIT
    app.config['ADMIN_SECURITY_CODE'] = config.ADMIN_SECURITY_CODE
    app.config['EMPLOYEE_SECURITY_CODE'] = config.EMPLOYEE_SECURITY_CODE
    app.config['SUPPLIER_SECURITY_CODE'] = config.SUPPLIER_SECURITY_CODE
    app.config.setdefault('RATELIMIT_STORAGE_URI', 'memory://')
    if overrides:
        app.config.update(overrides)

    app.logger.setLevel(app.config.get('LOG_LEVEL', config.LOG_LEVEL))

    db.init_app(app)
    limiter.init_app(app)

    from medihub.errors import register_error_handlers
    register_error_handlers(app)

    from medihub.routes import register_blueprints
    register_blueprints(app)

    app.cli.add_command(init_db_command)
    app.cli.add_command(generate_keys_command)

    return app


@click.command('init-db')
@with_appcontext
def init_db_command():
    """Initialise the database tables."""
    from medihub import models  # noqa: F401
    db.create_all()
    click.echo('Database initialised.')


@click.command('generate-keys')
def generate_keys_command():
    """Print a fresh AES_KEY and HMAC_KEY for the .env file."""
    from cryptography.fernet import Fernet

    hmac_key_b64 = base64.urlsafe_b64encode(os.urandom(32)).decode()
    click.echo(f'AES_KEY={Fernet.generate_key().decode()}')
    click.echo(f'HMAC_KEY={hmac_key_b64}')
