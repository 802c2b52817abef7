#!/usr/bin/env python3
"""
Megapost - Web Application
Flask server with WebSocket support for real-time per-category updates
"""

import asyncio
import io
import logging
import threading

from dotenv import load_dotenv
from flask import Flask, jsonify, request, send_file
from flask_cors import CORS
from flask_socketio import SocketIO, emit

from megapost.config import Settings, configure_logging
from megapost.models.schemas import ALL_CATEGORIES, CATEGORY_TITLES, Category, GenerationProgress
from megapost.services.downloads import build_zip, card_download_filename
from megapost.services.errors import FetchFailed, InvalidSourceUrl
from megapost.services.image_converter import decode_data_uri
from megapost.services.image_fetcher import fetch_image_from_url, image_from_bytes, upload_filename
from megapost.services.orchestrator import GenerationOrchestrator

logger = logging.getLogger(__name__)

socketio = SocketIO(cors_allowed_origins="*", async_mode='threading')


class GenerationRunner:
    """
    Drives the shared orchestrator on a background asyncio loop.

    Every read and write of orchestrator state goes through the loop
    thread, so the orchestrator only ever sees one writer.
    """

    def __init__(self, orchestrator):
        self.orchestrator = orchestrator
        self._loop = None
        self._lock = threading.Lock()

    def _ensure_loop(self):
        with self._lock:
            if self._loop is None:
                self._loop = asyncio.new_event_loop()
                thread = threading.Thread(target=self._loop.run_forever, name="megapost-loop", daemon=True)
                thread.start()
        return self._loop

    def submit(self, coro):
        """Schedule a coroutine on the loop, returning a concurrent Future"""
        return asyncio.run_coroutine_threadsafe(coro, self._ensure_loop())

    def start(self, coro, description):
        """Schedule a coroutine, logging its exception if it fails"""
        future = self.submit(coro)

        def log_failure(done):
            if not done.cancelled() and done.exception() is not None:
                logger.error("Error in %s", description, exc_info=done.exception())

        future.add_done_callback(log_failure)
        return future

    def call(self, fn, *args):
        """Run a plain function on the loop thread and wait for its result"""
        async def invoke():
            return fn(*args)
        return self.submit(invoke()).result()

    def snapshot(self):
        def build():
            orchestrator = self.orchestrator
            source = orchestrator.source_image
            return {
                'source_image': None if source is None else {
                    'filename': source.filename,
                    'mime_type': source.mime_type,
                    'size': source.size,
                },
                'categories': orchestrator.states.to_dict(),
                'progress': orchestrator.progress,
                'is_generating': orchestrator.is_generating,
                'has_generated_images': orchestrator.has_generated_images,
            }
        return self.call(build)


def emit_update(category, state, progress):
    """Push a category change and the overall progress to every client"""
    socketio.emit('category_update', {
        'category': category.value,
        'title': CATEGORY_TITLES[category],
        'state': state.to_dict(),
        'progress': progress,
    })
    if state.is_terminal:
        message = f"{CATEGORY_TITLES[category]} {'ready' if state.image_url else 'failed'}"
    else:
        message = f"Generating {CATEGORY_TITLES[category]}..."
    socketio.emit('progress', GenerationProgress(
        step="generating_images",
        message=message,
        progress_percent=progress,
        details={'category': category.value},
    ).to_dict())


def create_app(settings=None, generate_fn=None):
    """
    Build the Flask application.

    Args:
        settings: Settings (defaults to the environment)
        generate_fn: Optional async (source, category) -> data URI replacing Gemini
    """
    load_dotenv()
    if settings is None:
        settings = Settings.from_env()

    app = Flask(__name__)
    app.config['MAX_CONTENT_LENGTH'] = 20 * 1024 * 1024  # 20MB max upload
    app.config['SECRET_KEY'] = settings.secret_key
    app.config['MEGAPOST_SETTINGS'] = settings

    CORS(app)
    socketio.init_app(app)

    runner = GenerationRunner(GenerationOrchestrator(
        generate_fn=generate_fn,
        on_update=emit_update,
        api_key=settings.api_key,
        model=settings.model,
    ))
    app.extensions['megapost_runner'] = runner

    def credential_error():
        notice = settings.credential_notice
        if notice:
            return jsonify({'error': notice}), 503
        return None

    def wants_wait():
        return request.args.get('wait', '').lower() in ('1', 'true', 'yes')

    @app.route('/health')
    def health():
        """Health check endpoint"""
        return jsonify({'status': 'healthy'})

    @app.route('/api/config-status')
    def config_status():
        """Report missing credentials so the UI can block before generating"""
        return jsonify({
            'ready': not settings.missing_credentials(),
            'missing': settings.missing_credentials(),
            'notice': settings.credential_notice,
        })

    @app.route('/api/categories')
    def list_categories():
        return jsonify([
            {'category': category.value, 'title': CATEGORY_TITLES[category]}
            for category in ALL_CATEGORIES
        ])

    @app.route('/api/image', methods=['POST'])
    def upload_image():
        """
        Select a new source image from a file upload.

        Accepts:
            - image: Image file (png, jpg, jpeg, webp or gif)
        """
        image_file = request.files.get('image')
        if not image_file or not image_file.filename:
            return jsonify({'error': 'No image provided'}), 400

        filename = upload_filename(image_file.filename)
        source = image_from_bytes(image_file.read(), filename)
        runner.call(runner.orchestrator.select_image, source)
        return jsonify(runner.snapshot())

    @app.route('/api/image-url', methods=['POST'])
    def upload_image_url():
        """
        Select a new source image fetched from a URL.

        Accepts JSON:
            - url: Absolute http(s) image URL
        """
        data = request.get_json(silent=True) or {}
        try:
            source = fetch_image_from_url(data.get('url', ''), timeout=settings.fetch_timeout)
        except (InvalidSourceUrl, FetchFailed) as e:
            return jsonify({'error': str(e)}), 400

        runner.call(runner.orchestrator.select_image, source)
        return jsonify(runner.snapshot())

    @app.route('/api/image', methods=['DELETE'])
    def clear_image():
        runner.call(runner.orchestrator.select_image, None)
        return jsonify(runner.snapshot())

    @app.route('/api/state')
    def get_state():
        return jsonify(runner.snapshot())

    @app.route('/api/generate', methods=['POST'])
    def generate_all():
        """Start generating every category (?wait=1 blocks until all finish)"""
        error = credential_error()
        if error:
            return error

        state = runner.snapshot()
        if state['source_image'] is None:
            return jsonify({'error': 'Select an image before generating'}), 400
        if state['is_generating']:
            return jsonify({'error': 'Generation already in progress'}), 409

        future = runner.start(runner.orchestrator.generate_all(), "generate_all")
        if not wants_wait():
            return jsonify({'started': True}), 202

        try:
            future.result()
        except Exception as e:
            return jsonify({'error': f'Server error: {e}'}), 500
        return jsonify(runner.snapshot())

    @app.route('/api/regenerate/<category>', methods=['POST'])
    def regenerate(category):
        """Generate one category again (?wait=1 blocks until it finishes)"""
        try:
            category = Category(category)
        except ValueError:
            return jsonify({'error': f'Unknown category: {category}'}), 404

        error = credential_error()
        if error:
            return error

        state = runner.snapshot()
        if state['source_image'] is None:
            return jsonify({'error': 'Select an image before generating'}), 400
        if state['categories'][category.value]['is_loading']:
            return jsonify({'error': f'{category.value} is already generating'}), 409

        future = runner.start(runner.orchestrator.regenerate(category), f"regenerate {category.value}")
        if not wants_wait():
            return jsonify({'started': True}), 202

        try:
            started = future.result()
        except Exception as e:
            return jsonify({'error': f'Server error: {e}'}), 500
        if not started:
            return jsonify({'error': f'{category.value} is already generating'}), 409
        return jsonify(runner.snapshot())

    @app.route('/api/download/<category>')
    def download_image(category):
        """Download one generated image"""
        try:
            category = Category(category)
        except ValueError:
            return jsonify({'error': f'Unknown category: {category}'}), 404

        image_url = runner.call(lambda: runner.orchestrator.states[category].image_url)
        if not image_url:
            return jsonify({'error': 'No image generated for this category'}), 404

        mime_type, data = decode_data_uri(image_url)
        return send_file(
            io.BytesIO(data),
            mimetype=mime_type,
            as_attachment=True,
            download_name=card_download_filename(category),
        )

    @app.route('/api/download-all')
    def download_all():
        """Download every generated image as one ZIP archive"""
        images = runner.call(runner.orchestrator.states.generated_images)
        if not any(images.values()):
            return jsonify({'error': 'No images generated yet'}), 404

        return send_file(
            io.BytesIO(build_zip(images)),
            mimetype='application/zip',
            as_attachment=True,
            download_name='megapost_images.zip',
        )

    return app


# WebSocket event handlers
@socketio.on('connect')
def handle_connect():
    """Handle client connection"""
    logger.info("Client connected: %s", request.sid)
    emit('connected', {'sid': request.sid})


@socketio.on('disconnect')
def handle_disconnect(reason=None):
    """Handle client disconnection"""
    logger.info("Client disconnected: %s", request.sid)


def run():
    load_dotenv()
    settings = Settings.from_env()
    configure_logging(settings.log_level)

    if settings.credential_notice:
        logger.warning(settings.credential_notice)

    app = create_app(settings)
    logger.info("Starting Megapost web server on http://localhost:%d", settings.port)
    socketio.run(app, debug=False, host='0.0.0.0', port=settings.port, allow_unsafe_werkzeug=True)


if __name__ == '__main__':
    run()
