from __future__ import annotations

from flask import Blueprint

from falconids.app.backend.connection import get_actor
from falconids.app.backend.types import UserProfile
from falconids.app.common.auth import login_required
from falconids.app.common.forms import validate_profile
from falconids.app.common.validation import abort_if_errors, get_json, text
from falconids.app.queries.profile import caller_profile, profile_gate, save_caller_profile

bp = Blueprint("profile", __name__)


def profile_to_dict(profile: UserProfile | None):
    if profile is None:
        return None
    return {"name": profile.name, "email": profile.email, "phone": profile.phone}


@bp.get("/profile")
@login_required
def get_profile():
    actor = get_actor()
    result = caller_profile(actor)
    if result.error is not None:
        raise result.error
    gate = profile_gate(actor)
    return {
        "principal": actor.caller,
        "profile": profile_to_dict(result.data),
        "must_setup_profile": gate.must_setup_profile,
    }, 200


@bp.put("/profile")
@login_required
def put_profile():
    data = get_json()
    profile = UserProfile(
        name=text(data, "name").strip(),
        email=text(data, "email").strip(),
        phone=text(data, "phone").strip(),
    )
    abort_if_errors(validate_profile(profile.name, profile.email, profile.phone), "All fields are required")

    save_caller_profile(get_actor(), profile)
    return {"profile": profile_to_dict(profile)}, 200


@bp.get("/profiles/<principal>")
@login_required
def get_user_profile(principal: str):
    """Own profile, or anyone's for admins."""
    profile = get_actor().get_user_profile(principal)
    return {"principal": principal, "profile": profile_to_dict(profile)}, 200
