from __future__ import annotations

import click
from flask import Blueprint, current_app

from falconids.app.backend.types import UserRole
from falconids.app.common.identity import create_account, is_valid_principal
from falconids.app.extensions import db
from falconids.app.models import Account, Profile, RoleAssignment

cli_bp = Blueprint("cli", __name__, cli_group=None)

DEMO_EMAIL = "user@example.com"
DEMO_PASSWORD = "Password123!"


@cli_bp.cli.command("init-db")
def init_db() -> None:
    """Create tables."""
    db.create_all()
    print("DB initialized (tables created).")


@cli_bp.cli.command("seed")
def seed_data() -> None:
    """Seed a demo customer with a profile.

    Safe to run multiple times; it will no-op if data exists.
    """
    db.create_all()
    account = Account.query.filter_by(email=DEMO_EMAIL).first()
    if not account:
        account = create_account(DEMO_EMAIL, DEMO_PASSWORD)

    if db.session.get(Profile, account.principal) is None:
        db.session.add(Profile(principal=account.principal, name="Demo User", email=DEMO_EMAIL, phone="555-010-0100"))
    if db.session.get(RoleAssignment, account.principal) is None:
        db.session.add(RoleAssignment(principal=account.principal, role=UserRole.user.value))

    db.session.commit()
    print(f"Seed complete. Login: {DEMO_EMAIL} / {DEMO_PASSWORD} (principal {account.principal})")


@cli_bp.cli.command("grant-admin")
@click.argument("principal")
def grant_admin(principal: str) -> None:
    """Give PRINCIPAL the admin role directly in the database."""
    if not is_valid_principal(principal):
        raise click.BadParameter("Invalid principal ID format", param_hint="PRINCIPAL")
    row = db.session.get(RoleAssignment, principal)
    if row is None:
        db.session.add(RoleAssignment(principal=principal, role=UserRole.admin.value))
    else:
        row.role = UserRole.admin.value
    db.session.commit()
    current_app.logger.info("granted admin to %s from the command line", principal)
    print(f"{principal} is now an admin.")
