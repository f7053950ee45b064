import os
from flask import Flask, jsonify, send_from_directory
from config.config import config
from doublevision.database import init_db
from doublevision.utils.logger import get_logger

logger = get_logger(__name__)


def create_app(config_name=None):
    """Application factory"""
    config_name = config_name or os.environ.get('FLASK_ENV', 'default')
    settings = config.get(config_name, config['default'])

    app = Flask(__name__)
    app.config.from_object(settings)
    app.config['MAX_CONTENT_LENGTH'] = settings.MAX_UPLOAD_BYTES + 1024 * 1024

    init_db()

    from doublevision.routes import admin, assignments, photos, ratings, reviews, users
    app.register_blueprint(assignments.bp, url_prefix='/api/assignments')
    app.register_blueprint(reviews.bp, url_prefix='/api/reviews')
    app.register_blueprint(ratings.bp, url_prefix='/api/rate-reviews')
    app.register_blueprint(users.bp, url_prefix='/api/user')
    app.register_blueprint(photos.bp, url_prefix='/api/photos')
    app.register_blueprint(admin.bp, url_prefix='/api/admin')

    @app.route('/health', methods=['GET'])
    def health():
        return jsonify({'status': 'ok'}), 200

    @app.route('/uploads/<path:filename>', methods=['GET'])
    def uploaded_file(filename):
        return send_from_directory(os.path.abspath(settings.UPLOAD_FOLDER), filename)

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({'error': 'Not found'}), 404

    @app.errorhandler(413)
    def too_large(error):
        return jsonify({'error': 'File too large. Maximum size is 10MB.'}), 413

    logger.info(f"DoubleVision app created with '{config_name}' config")
    return app
