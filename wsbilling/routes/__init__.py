# wsbilling/routes/__init__.py
from __future__ import annotations


def register_routes(app):
    # Importa y registra blueprints aquí para evitar imports circulares
    from wsbilling.routes.pages import bp as pages_bp
    app.register_blueprint(pages_bp)

    from wsbilling.routes.auth import bp as auth_bp
    app.register_blueprint(auth_bp)

    from wsbilling.routes.workspaces import bp as workspaces_bp
    app.register_blueprint(workspaces_bp)
