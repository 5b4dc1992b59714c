"""Lightweight local HTTP API for the launcher UI: /search, /launch, /launch-feedback and /refresh."""

from typing import Optional
import logging
import threading
from flask import Flask, request, jsonify

from .controller import IndexController, IndexStatus
from .exceptions import IndexNotReadyError, RefreshError


logger = logging.getLogger(__name__)

_app_instance: Optional[Flask] = None
_server_thread: Optional[threading.Thread] = None


def _app_id_from_request() -> str:
	data = request.get_json(silent=True) or {}
	return str(data.get('app_id', '')).strip()


def _create_app(controller: IndexController) -> Flask:
	app = Flask("quicklaunch_api")

	@app.get("/health")
	def health():
		return jsonify({
			"status": "ok",
			"ready": controller.status is IndexStatus.READY,
			"applications": len(controller.applications),
		})

	# Basic CORS for a local file:// renderer
	@app.after_request
	def add_cors_headers(response):
		response.headers["Access-Control-Allow-Origin"] = "*"
		response.headers["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
		response.headers["Access-Control-Allow-Headers"] = "Content-Type"
		return response

	@app.route("/search", methods=["GET", "OPTIONS"])
	def search():
		if request.method == "OPTIONS":
			return ("", 204)
		query = request.args.get('query', '') or ''
		results = controller.search(query)
		return jsonify({'results': [item.to_dict() for item in results]})

	@app.route("/launch", methods=["POST", "OPTIONS"])
	def launch():
		"""Start an application and record the launch."""
		if request.method == "OPTIONS":
			return ("", 204)
		app_id = _app_id_from_request()
		if not app_id:
			return jsonify({'status': 'error', 'message': 'missing app_id'}), 400
		if controller.get_application(app_id) is None:
			return jsonify({'status': 'error', 'message': 'unknown application'}), 404
		if not controller.launch(app_id):
			return jsonify({'status': 'error', 'message': 'launch failed'}), 500
		return jsonify({'status': 'ok'})

	@app.route("/launch-feedback", methods=["POST", "OPTIONS"])
	def launch_feedback():
		"""Record a launch the UI performed itself. Always acknowledged."""
		if request.method == "OPTIONS":
			return ("", 204)
		app_id = _app_id_from_request()
		if not app_id:
			return jsonify({'status': 'error', 'message': 'missing app_id'}), 400
		controller.launch_feedback(app_id)
		return jsonify({'status': 'ok'})

	@app.route("/refresh", methods=["POST", "OPTIONS"])
	def refresh():
		"""Rescan every source; on failure the previous applications stay searchable."""
		if request.method == "OPTIONS":
			return ("", 204)
		try:
			controller.force_refresh()
		except IndexNotReadyError as e:
			return jsonify({'status': 'error', 'message': str(e)}), 503
		except RefreshError as e:
			return jsonify({'status': 'error', 'message': str(e)}), 500
		return jsonify({'status': 'ok', 'applications': len(controller.applications)})

	return app


def start_api_server(controller: IndexController, port: int = 8771) -> None:
	"""
	Start the local API server in a background thread.
	Only binds to 127.0.0.1.
	"""
	global _app_instance, _server_thread
	if _server_thread and _server_thread.is_alive():
		return
	_app_instance = _create_app(controller)

	def run():
		_app_instance.run(host="127.0.0.1", port=port, debug=False, use_reloader=False)

	_server_thread = threading.Thread(target=run, daemon=True)
	_server_thread.start()
	logger.info("API server listening on http://127.0.0.1:%d", port)
