"""Who is calling: the identity held in the Flask session and its principal."""

from __future__ import annotations

import base64
import re
import secrets
from typing import Optional

from flask import session
from werkzeug.security import check_password_hash, generate_password_hash

from falconids.app.extensions import db
from falconids.app.models import Account

SESSION_KEY = "principal"

# five-character base32 groups joined by dashes, last group may be shorter
PRINCIPAL_RE = re.compile(r"^[a-z2-7]{5}(-[a-z2-7]{5})*(-[a-z2-7]{1,5})?$")


def new_principal() -> str:
    raw = base64.b32encode(secrets.token_bytes(15)).decode("ascii").lower().rstrip("=")
    return "-".join(raw[i:i + 5] for i in range(0, len(raw), 5))


def is_valid_principal(text: str) -> bool:
    return bool(PRINCIPAL_RE.fullmatch((text or "").strip()))


def current_principal() -> Optional[str]:
    return session.get(SESSION_KEY)


def is_authenticated() -> bool:
    return current_principal() is not None


def create_account(email: str, password: str) -> Account:
    account = Account(
        email=email.strip().lower(),
        password_hash=generate_password_hash(password),
        principal=new_principal(),
    )
    db.session.add(account)
    db.session.commit()
    return account


def authenticate(email: str, password: str) -> Optional[Account]:
    account = Account.query.filter_by(email=(email or "").strip().lower()).first()
    if not account or not check_password_hash(account.password_hash, password or ""):
        return None
    return account


def sign_in(account: Account) -> str:
    session[SESSION_KEY] = account.principal
    return account.principal


def sign_out() -> Optional[str]:
    return session.pop(SESSION_KEY, None)
