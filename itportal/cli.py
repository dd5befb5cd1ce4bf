# itportal/cli.py
# Operational commands: flask --app itportal.app <command>
import click
from flask import current_app
from werkzeug.security import generate_password_hash

from .extensions import db
from .models import User, Role


def register_commands(app):
    @app.cli.command("init-db")
    def init_db():
        """Create all tables."""
        db.create_all()
        click.echo("Database tables created.")

    @app.cli.command("create-admin")
    @click.argument("email")
    @click.password_option()
    def create_admin(email, password):
        """Provision an administrator account."""
        email = email.strip().lower()
        existing = User.query.filter_by(email=email).first()
        if existing:
            click.echo(f"Admin user with email {email} already exists. User ID: {existing.id}")
            return
        admin = User(role=Role.ADMIN, email=email, agreed_policies=[], completed_tools=[])
        admin.set_password(password)
        db.session.add(admin)
        db.session.commit()
        current_app.logger.info("Provisioned admin %s", admin.id)
        click.echo(f"Admin user created: {email} (User ID: {admin.id})")

    @app.cli.command("reset-password")
    @click.argument("email")
    @click.password_option()
    def reset_password(email, password):
        """Set a new password for an existing administrator."""
        user = User.query.filter_by(role=Role.ADMIN, email=email.strip().lower()).first()
        if not user:
            raise click.ClickException(f"Admin not found: {email}")
        user.set_password(password)
        db.session.commit()
        click.echo(f"Password reset successful for: {user.email}")

    @app.cli.command("hash-password")
    @click.argument("password")
    def hash_password(password):
        """Print the hash stored for PASSWORD with the configured method."""
        method = current_app.config["PASSWORD_HASH_METHOD"]
        click.echo(generate_password_hash(password, method=method))
