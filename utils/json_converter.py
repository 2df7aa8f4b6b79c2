from bson import ObjectId
from datetime import datetime

# Recursive function to serialize documents with non-serializable types
def json_converter(obj):
    if isinstance(obj, dict):
        # If it's a dictionary, recursively serialize the keys and values
        return {key: json_converter(value) for key, value in obj.items()}
    elif isinstance(obj, list):
        return [json_converter(item) for item in obj]
    elif isinstance(obj, ObjectId):
        return str(obj)  # Convert ObjectId to string
    elif isinstance(obj, datetime):
        return obj.isoformat()  # Convert datetime to ISO 8601 string
    return obj  # Return the value as is if it's already serializable


def rename_id_field(document):
    """Rename _id to id and convert it to a string."""
    if document and "_id" in document:
        document["id"] = str(document["_id"])
        del document["_id"]
    return document


def serialize_document(document):
    """Shape a Mongo document for a JSON response."""
    if document is None:
        return None
    return json_converter(rename_id_field(dict(document)))
