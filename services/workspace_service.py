from datetime import datetime, timezone
from pymongo import DESCENDING

from models.workspace import WorkspaceCreate
from utils.mongodb import get_db, to_object_id


def create_workspace(user_id: str, name: str) -> dict:
    now = datetime.now(timezone.utc)
    workspace = WorkspaceCreate(user_id=user_id, name=name, created_at=now, updated_at=now)
    try:
        db = get_db()
        collection = db['workspaces']
        result = collection.insert_one(workspace.model_dump()).inserted_id
        return collection.find_one({"_id": result})
    except Exception as e:
        raise Exception(f"Error creating workspace: {e}")


def get_workspaces(user_id: str) -> list:
    try:
        db = get_db()
        cursor = db['workspaces'].find({"user_id": user_id}).sort("created_at", DESCENDING)
        return list(cursor)
    except Exception as e:
        raise Exception(f"Error fetching workspaces for user {user_id}: {e}")


def get_workspace_by_id(workspace_id: str, user_id: str):
    """The workspace if it exists and belongs to the user, else None."""
    object_id = to_object_id(workspace_id)
    if object_id is None:
        return None
    try:
        db = get_db()
        return db['workspaces'].find_one({"_id": object_id, "user_id": user_id})
    except Exception as e:
        raise Exception(f"Error fetching workspace {workspace_id}: {e}")
