import os
import time

import jwt
import requests
from dotenv import load_dotenv

from utils.config import GITHUB_API_ENDPOINT
from utils.errors import ConfigurationError

load_dotenv()

APP_ID = os.getenv('GITHUB_APP_ID')

_cached_jwt = None
_jwt_expiration = 0  # Epoch time


def _private_key():
    key = os.getenv('GITHUB_PRIVATE_KEY')
    if not key:
        raise ConfigurationError("'GITHUB_PRIVATE_KEY' environment variable is missing")
    return key.replace("\\n", "\n")  # .env files keep the PEM on one line


def generate_jwt():
    global _cached_jwt, _jwt_expiration
    if not APP_ID:
        raise ConfigurationError("'GITHUB_APP_ID' environment variable is missing")
    now = int(time.time())
    payload = {
        "iat": now - 60,
        "exp": now + (9 * 60),
        "iss": APP_ID
    }
    _cached_jwt = jwt.encode(payload, _private_key(), algorithm="RS256")
    _jwt_expiration = now + (8 * 60)  # refresh a minute before GitHub rejects it
    return _cached_jwt


def get_jwt():
    now = int(time.time())
    if _cached_jwt is None or now >= _jwt_expiration:
        return generate_jwt()
    return _cached_jwt


def get_installation_access_token(installation_id, api_endpoint=GITHUB_API_ENDPOINT):
    headers = {
        "Authorization": f"Bearer {get_jwt()}",
        "Accept": "application/vnd.github+json"
    }
    url = f"{api_endpoint}/app/installations/{installation_id}/access_tokens"
    r = requests.post(url, headers=headers, timeout=30)
    r.raise_for_status()
    return r.json()["token"]
