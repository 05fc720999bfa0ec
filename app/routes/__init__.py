"""Routes package for the forum application."""


def register_routes(app):
    """Register all route blueprints with the application."""
    from .auth import auth_bp
    from .profile import profile_bp

    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(profile_bp, url_prefix='/api/profile')
