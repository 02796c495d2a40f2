from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from flask_bcrypt import Bcrypt
from flask_mail import Mail
from asset_registry.config import BASE_DIR, Config

db = SQLAlchemy()
bcrypt = Bcrypt()
login_manager = LoginManager()
mail = Mail()


def create_app(config_class=Config):
    from asset_registry.app.log_config import configure_logging
    from asset_registry.app.errors import register_error_handlers

    app = Flask(__name__)
    app.config.from_object(config_class)
    configure_logging(app.config['LOG_LEVEL'])

    if app.config['SQLALCHEMY_DATABASE_URI'].startswith(f'sqlite:///{BASE_DIR}'):
        (BASE_DIR / 'data').mkdir(exist_ok=True)

    db.init_app(app)
    bcrypt.init_app(app)
    login_manager.init_app(app)
    mail.init_app(app)

    from asset_registry.app.models import User

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'error': 'Unauthorized', 'message': 'Login required.'}), 401

    register_error_handlers(app)

    with app.app_context():
        # Import blueprints inside context
        from asset_registry.app.routes import assets_bp, employees_bp, assignments_bp
        from asset_registry.app.routes.auth import auth_bp
        from asset_registry.app.routes.reports import reports_bp

        # Register blueprints
        app.register_blueprint(assets_bp)
        app.register_blueprint(employees_bp)
        app.register_blueprint(assignments_bp)
        app.register_blueprint(auth_bp, url_prefix='/api/auth')
        app.register_blueprint(reports_bp, url_prefix='/api/reports')

        # Create all database tables
        db.create_all()

    app.logger.info('Asset registry started with %s assignment policy',
                    app.config['ASSIGNMENT_POLICY'])
    return app
