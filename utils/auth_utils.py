import jwt
import datetime
from flask import current_app
from werkzeug.security import generate_password_hash, check_password_hash

def hash_password(password):
    return generate_password_hash(password)

def verify_password(hash, password):
    return check_password_hash(hash, password)

def generate_token(user_id, email):
    hours = current_app.config.get("JWT_EXPIRES_HOURS", 24)
    payload = {
        "user_id": user_id,
        "email": email,
        "exp": datetime.datetime.now(datetime.timezone.utc) + datetime.timedelta(hours=hours)
    }
    return jwt.encode(payload, current_app.config['SECRET_KEY'], algorithm="HS256")

def decode_token(token):
    """Return the payload of a session token; raises jwt.InvalidTokenError."""
    data = jwt.decode(token, current_app.config['SECRET_KEY'], algorithms=["HS256"])
    if data.get("type") == "reset":
        raise jwt.InvalidTokenError("reset token used as session token")
    if "user_id" not in data or "email" not in data:
        raise jwt.InvalidTokenError("incomplete payload")
    return data

def generate_reset_token(email):
    minutes = current_app.config.get("RESET_TOKEN_MINUTES", 15)
    payload = {
        "email": email,
        "type": "reset",
        "exp": datetime.datetime.now(datetime.timezone.utc) + datetime.timedelta(minutes=minutes)
    }
    return jwt.encode(payload, current_app.config['SECRET_KEY'], algorithm="HS256")

def verify_reset_token(token):
    try:
        data = jwt.decode(token, current_app.config['SECRET_KEY'], algorithms=["HS256"])
    except jwt.InvalidTokenError:
        return None
    if data.get('type') != 'reset':
        return None
    return data.get('email')
