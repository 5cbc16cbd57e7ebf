import hashlib
import hmac
import os

from flask import abort


def verify_signature(request, secret=None):
    """Reject webhook deliveries whose X-Hub-Signature-256 doesn't match the shared secret."""
    secret = secret or os.getenv('GITHUB_WEBHOOK_SECRET')
    if not secret:
        abort(500, 'Webhook secret is not configured')
    header_signature = request.headers.get('X-Hub-Signature-256')
    if header_signature is None:
        abort(400, 'Missing signature')
    sha_name, _, signature = header_signature.partition('=')
    if sha_name != 'sha256' or not signature:
        abort(400, 'Unsupported signature algorithm')
    mac = hmac.new(secret.encode(), msg=request.get_data(), digestmod=hashlib.sha256)
    if not hmac.compare_digest(mac.hexdigest(), signature):
        abort(401, 'Invalid signature')
