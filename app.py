from flask import Flask, jsonify

from config import load_settings
from handlers.webhook_worker import WebhookWorker
from logging_setup import get_logger, setup_logging
from routes import plaid_bp, webhook_bp
import services

logger = get_logger(__name__)


def create_app(settings=None, worker=None, plaid_client_factory=None, store_factory=None):
    """
    Build the Flask app

    Collaborators can be passed in (tests do); otherwise they are built
    from Settings and the webhook worker thread is started here.
    Run under gunicorn with: gunicorn "app:create_app()"
    """
    settings = settings or load_settings()
    setup_logging(settings.log_level)

    app = Flask(__name__)
    app.config["SETTINGS"] = settings

    if worker is None:
        worker = WebhookWorker(lambda: services.build_dispatcher(settings))
        worker.start()

    app.extensions["webhook_worker"] = worker
    app.extensions["plaid_client_factory"] = plaid_client_factory or (lambda: services.make_plaid_client(settings))
    app.extensions["store_factory"] = store_factory or (lambda: services.make_store(settings))

    # Register blueprints
    app.register_blueprint(webhook_bp)
    app.register_blueprint(plaid_bp)

    @app.route('/health', methods=['GET'])
    def health_check():
        """Health check endpoint"""
        return jsonify({"status": "ok"}), 200

    return app


if __name__ == '__main__':
    app = create_app()
    port = app.config["SETTINGS"].port

    logger.info(f"FoodFeed API running on port {port}")
    logger.info("Webhook: /api/plaid/webhook")
    logger.info("Link:    /api/plaid/create-link-token, /api/plaid/exchange-public-token")

    app.run(host='0.0.0.0', port=port, debug=False)
