import threading
import requests
from flask import Flask, request, jsonify
from dotenv import load_dotenv
load_dotenv()
from utils.errors import FrogbotError
from utils.pr_processor import process_pull_request
from utils.signature_verifier import verify_signature

PR_ACTIONS = ("opened", "reopened", "synchronize")

app = Flask(__name__)


def handle_event(payload):
    # runs in its own thread so the webhook delivery gets its 202 right away
    pr = payload["pull_request"]
    print(f"🔄 Processing PR #{pr['number']} ({payload.get('action')})")
    try:
        rows = process_pull_request(payload)
    except (FrogbotError, requests.RequestException) as e:
        print(f"❌ Scanning PR #{pr['number']} failed: {e}")
        return
    print(f"✅ Finished processing PR #{pr['number']}, {len(rows)} new issue(s)")


@app.route("/health", methods=["GET"])
def health_check():
    return "OK", 200


@app.route("/webhook", methods=["POST"])
def github_webhook():
    verify_signature(request)
    payload = request.get_json(silent=True) or {}

    if payload.get("action") in PR_ACTIONS and "pull_request" in payload:
        print(f"🚀 Webhook received: action={payload['action']}, repo={payload['repository']['full_name']}")
        threading.Thread(target=handle_event, args=(payload,), daemon=True).start()
        return jsonify({"status": "accepted"}), 202

    print("ℹ️ Ignoring non-PR webhook event.")
    return jsonify({"status": "ignored"}), 200


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=5000)
