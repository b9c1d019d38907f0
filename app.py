# app.py

import logging
import os
from datetime import timedelta

import click
from flask import Flask, session, jsonify

import config
from database import (
    DuplicateUserError, add_user, create_tables, generate_secure_password, get_all_sites,
    get_all_users, get_session_timeout, set_db_path, set_site_access, set_user_status
)
from auth.permissions import ROLES

# --- Import Blueprints from the 'routes' package ---
# These blueprints contain the organized routes for different
# parts of the API.
from routes.auth_routes import auth_bp
from routes.site_routes import site_bp
from routes.data_routes import data_bp
from routes.alerts_routes import alerts_bp
from routes.analytics_routes import analytics_bp
from routes.system_routes import system_bp

logger = logging.getLogger(__name__)


def create_app(test_config=None):
    """
    Creates and configures the Flask application.
    This factory pattern is useful for testing and scalability.
    """
    config.setup_logging()

    app = Flask(__name__)
    app.config['SECRET_KEY'] = config.SECRET_KEY
    app.config['DATABASE'] = config.DB_PATH
    app.json.sort_keys = False
    if test_config:
        app.config.update(test_config)

    # Every database function reads and writes this file from now on.
    set_db_path(app.config['DATABASE'])
    create_tables()

    # Configure session lifetime
    timeout_minutes = get_session_timeout(config.DEFAULT_SESSION_TIMEOUT_MINUTES)
    app.config['PERMANENT_SESSION_LIFETIME'] = timedelta(minutes=timeout_minutes)

    # This function runs before each request to enforce the timeout
    @app.before_request
    def make_session_permanent():
        session.permanent = True

    # --- Register Blueprints ---
    app.register_blueprint(auth_bp, url_prefix='/api')
    app.register_blueprint(site_bp, url_prefix='/api')
    app.register_blueprint(data_bp, url_prefix='/api')
    app.register_blueprint(alerts_bp, url_prefix='/api')
    app.register_blueprint(system_bp, url_prefix='/api')
    app.register_blueprint(analytics_bp, url_prefix='/api/analytics')

    # --- JSON error pages ---
    @app.errorhandler(404)
    def not_found(error):
        return jsonify({"status": "error", "message": "Resource not found."}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({"status": "error", "message": "Method not allowed."}), 405

    @app.errorhandler(500)
    def internal_error(error):
        logger.error("Unhandled error: %s", error)
        return jsonify({"status": "error", "message": "Server error."}), 500

    register_commands(app)
    logger.info("Eau Vigilance API ready (database: %s)", app.config['DATABASE'])
    return app


def register_commands(app):
    """Adds the administration commands to the 'flask' CLI."""

    def _check_sites(site_ids, param_hint):
        known_sites = {site['id'] for site in get_all_sites()}
        unknown = [site_id for site_id in site_ids if site_id not in known_sites]
        if unknown:
            raise click.BadParameter(f"unknown site(s): {', '.join(unknown)}", param_hint=param_hint)

    @app.cli.command('init-db')
    def init_db_command():
        """Creates the tables and default sites if they do not exist."""
        create_tables()
        click.echo(f"Database ready at {app.config['DATABASE']}.")

    @app.cli.command('create-user')
    @click.option('--name', required=True)
    @click.option('--email', required=True)
    @click.option('--role', type=click.Choice(ROLES), required=True)
    @click.option('--site', 'sites', multiple=True, help='Site id the user may access. Repeatable.')
    @click.option('--password', default=None, help='Defaults to a generated password.')
    def create_user_command(name, email, role, sites, password):
        """Creates a user account and prints its password."""
        _check_sites(sites, '--site')

        password = password or generate_secure_password()
        try:
            user_id = add_user(name, email, password, role, site_ids=sites)
        except DuplicateUserError as e:
            raise click.ClickException(str(e))
        click.echo(f"Created user {email} ({role}) with id {user_id}.")
        click.echo(f"Password: {password}")

    def _user_by_email(email):
        for user in get_all_users():
            if user['email'] == email:
                return user
        raise click.ClickException(f"No user with email '{email}'.")

    @app.cli.command('list-users')
    def list_users_command():
        """Prints every account with its role, status and sites."""
        for user in get_all_users():
            sites = ', '.join(user['site_access']) or '-'
            click.echo(f"{user['email']:<35} {user['role']:<20} {user['status']:<9} {sites}")

    @app.cli.command('set-user-status')
    @click.argument('email')
    @click.argument('status', type=click.Choice(['Active', 'Inactive']))
    def set_user_status_command(email, status):
        """Activates or deactivates an account. Inactive users cannot log in."""
        user = _user_by_email(email)
        set_user_status(user['id'], status)
        click.echo(f"{email} is now {status}.")

    @app.cli.command('set-user-sites')
    @click.argument('email')
    @click.argument('site_ids', nargs=-1)
    def set_user_sites_command(email, site_ids):
        """Replaces the list of sites an account may access."""
        _check_sites(site_ids, 'SITE_IDS')
        user = _user_by_email(email)
        set_site_access(user['id'], site_ids)
        click.echo(f"{email} can access: {', '.join(site_ids) or 'no sites'}.")


# --- App Execution ---
if __name__ == '__main__':
    create_app().run(host='0.0.0.0', port=int(os.environ.get('PORT', 5000)))
