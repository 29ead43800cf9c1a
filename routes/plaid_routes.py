from flask import Blueprint, current_app, jsonify, request

from clients.plaid_client import PlaidError
from config import ConfigError
from logging_setup import get_logger
from storage.base import StorageError

logger = get_logger(__name__)

plaid_bp = Blueprint('plaid', __name__, url_prefix='/api/plaid')


def _plaid_client():
    # Async views run on a fresh event loop per request, so clients are per request too
    return current_app.extensions["plaid_client_factory"]()


@plaid_bp.route('/create-link-token', methods=['POST'])
async def create_link_token():
    """Create a link token for initializing Plaid Link"""
    data = request.get_json(silent=True) or {}
    user_id = data.get("user_id")

    if not user_id:
        return jsonify({"error": "user_id is required"}), 400

    try:
        plaid = _plaid_client()
        try:
            link_token = await plaid.create_link_token(user_id)
        finally:
            await plaid.close()
    except (PlaidError, ConfigError) as e:
        logger.error(f"Error creating link token: {e}")
        return jsonify({"error": "Failed to create link token"}), 500

    return jsonify({"link_token": link_token}), 200


@plaid_bp.route('/exchange-public-token', methods=['POST'])
async def exchange_public_token():
    """Exchange a public token and remember the linked item"""
    data = request.get_json(silent=True) or {}
    public_token = data.get("public_token")
    user_id = data.get("user_id")

    if not public_token or not user_id:
        return jsonify({"error": "public_token and user_id are required"}), 400

    try:
        plaid = _plaid_client()
        try:
            exchanged = await plaid.exchange_public_token(public_token)
        finally:
            await plaid.close()
    except (PlaidError, ConfigError) as e:
        logger.error(f"Error exchanging public token: {e}")
        return jsonify({"error": "Failed to exchange public token"}), 500

    try:
        store = await current_app.extensions["store_factory"]()
        await store.insert_linked_item({
            "user_id": user_id,
            "item_id": exchanged["item_id"],
            "access_token": exchanged["access_token"],
            "status": "ACTIVE",
        })
    except (StorageError, ConfigError) as e:
        logger.error(f"Error storing access token: {e}")
        return jsonify({"error": "Failed to store access token"}), 500

    logger.info(f"Linked item {exchanged['item_id']} for user {user_id}")
    return jsonify({"success": True}), 200
