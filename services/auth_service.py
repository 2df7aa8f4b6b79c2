from datetime import datetime, timezone
from werkzeug.security import generate_password_hash, check_password_hash

from utils.mongodb import get_db
from models.user import UserRegister, UserCreate


def register_user(user_info: UserRegister):
    """Create a user with a hashed password. Returns (user, error)."""
    db = get_db()
    users_collection = db["users"]

    email = user_info.email.lower()
    existing_user = users_collection.find_one({"email": email})
    if existing_user:
        return None, "User already exists"

    now = datetime.now(timezone.utc)
    user = UserCreate(
        email=email,
        name=user_info.name,
        password_hash=generate_password_hash(user_info.password),
        created_at=now,
        updated_at=now,
    )
    try:
        user_id = users_collection.insert_one(user.model_dump()).inserted_id
    except Exception as e:
        raise Exception(f"Failed to create user: {e}")

    created = users_collection.find_one({"_id": user_id})
    created["_id"] = str(created["_id"])
    return created, None


def authenticate_user(email: str, password: str):
    """Return the user document when the credentials match, else None."""
    if not email or not password:
        return None
    db = get_db()
    user = db["users"].find_one({"email": email.lower()})
    if not user or not check_password_hash(user.get("password_hash", ""), password):
        return None
    user["_id"] = str(user["_id"])
    return user
