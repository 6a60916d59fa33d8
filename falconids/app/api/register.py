from flask import Flask

from falconids.modules.auth.routes import bp as auth_bp
from falconids.modules.profile.routes import bp as profile_bp
from falconids.modules.orders.routes import bp as orders_bp
from falconids.modules.admin.routes import bp as admin_bp


def register_api_blueprints(app: Flask) -> None:
    app.register_blueprint(auth_bp, url_prefix="/api")
    app.register_blueprint(profile_bp, url_prefix="/api")
    app.register_blueprint(orders_bp, url_prefix="/api")
    app.register_blueprint(admin_bp, url_prefix="/api")

    # Root API document
    @app.get("/api")
    def api_index():
        return {
            "name": "Falcon IDs API",
            "version": "0.1.0",
            "endpoints": {
                "auth": ["/users", "/auth/login", "/auth/logout", "/users/me"],
                "profile": ["/profile", "/profiles/<principal>"],
                "orders": [
                    "/orders",
                    "/orders/<id>",
                    "/orders/<id>/status",
                    "/orders/validate-field",
                    "/prices",
                ],
                "admin": [
                    "/admin/access",
                    "/admin/panel/login",
                    "/admin/panel/logout",
                    "/admin/restore",
                    "/admin/roles",
                    "/admin/orders",
                    "/admin/orders/<id>",
                    "/admin/orders/<id>/status",
                    "/admin/orders/<id>/payment-contact",
                    "/admin/orders/<id>/tracking",
                    "/admin/users",
                    "/admin/bans",
                    "/admin/bans/<principal>",
                    "/admin/invitation",
                    "/admin/invitation/accept",
                    "/admin/invitation/decline",
                    "/admin/invitations",
                ],
            },
        }, 200
