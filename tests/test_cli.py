from falconids.app.backend.types import UserRole
from falconids.app.extensions import db
from falconids.app.models import Account, RoleAssignment


def test_seed_is_idempotent(app):
    runner = app.test_cli_runner()
    first = runner.invoke(args=["seed"])
    assert first.exit_code == 0, first.output
    assert "user@example.com" in first.output
    assert runner.invoke(args=["seed"]).exit_code == 0

    with app.app_context():
        assert Account.query.filter_by(email="user@example.com").count() == 1


def test_grant_admin(app):
    runner = app.test_cli_runner()
    principal = "abcde-fghij-klmno-pqrst-uvwx"
    result = runner.invoke(args=["grant-admin", principal])
    assert result.exit_code == 0, result.output
    with app.app_context():
        assert db.session.get(RoleAssignment, principal).role == UserRole.admin.value


def test_grant_admin_rejects_bad_principal(app):
    result = app.test_cli_runner().invoke(args=["grant-admin", "nope"])
    assert result.exit_code != 0
    assert "Invalid principal ID format" in result.output


def test_init_db(app):
    result = app.test_cli_runner().invoke(args=["init-db"])
    assert result.exit_code == 0
    assert "DB initialized" in result.output
