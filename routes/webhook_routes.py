from flask import Blueprint, current_app, jsonify, request

from handlers.webhook_worker import WorkerUnavailable
from logging_setup import get_logger

logger = get_logger(__name__)

webhook_bp = Blueprint('webhook', __name__, url_prefix='/api/plaid')


@webhook_bp.route('/webhook', methods=['POST'])
def receive_plaid_webhook():
    """
    Plaid webhook endpoint
    Acknowledges right away; the webhook worker does the processing.
    Answers 503 when the worker can't take events, so Plaid redelivers.
    """
    data = request.get_json(silent=True)

    if not isinstance(data, dict):
        return jsonify({"error": "No data provided"}), 400

    try:
        current_app.extensions["webhook_worker"].enqueue(data)
    except WorkerUnavailable:
        logger.error(f"Rejected webhook {data.get('webhook_type')}/{data.get('webhook_code')}: worker unavailable")
        return jsonify({"error": "Webhook worker unavailable"}), 503
    except Exception as e:
        logger.exception("Error queueing webhook")
        return jsonify({"error": f"Failed to handle webhook: {e}"}), 500

    logger.info(f"Queued webhook {data.get('webhook_type')}/{data.get('webhook_code')} for item {data.get('item_id')}")
    return jsonify({"received": True}), 200
