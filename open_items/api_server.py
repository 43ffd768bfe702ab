"""Lightweight local HTTP API for the launcher UI: /items, /activate and friends."""

from typing import Any, List, Optional, Sequence
import asyncio
import logging
import threading
from concurrent.futures import TimeoutError as FutureTimeoutError
from flask import Flask, request, jsonify

from .cache import UnifiedRecord
from .capabilities import list_known_apps
from .service import OpenItemsService
from .sources import UniversalWindowAdapter

logger = logging.getLogger(__name__)

# Seconds a request waits for the service before answering 504
REQUEST_TIMEOUT = 60.0

# Thread-safe flag: is the user typing a search query?
_has_query = False
_has_query_lock = threading.Lock()


def set_user_typing(has_query: bool) -> None:
	"""Record whether the user is typing (background refreshes wait meanwhile)."""
	global _has_query
	with _has_query_lock:
		_has_query = bool(has_query)


def user_is_typing() -> bool:
	with _has_query_lock:
		return _has_query


def _parse_apps(raw: Any) -> List[str]:
	"""Accept "a,b" query strings or JSON lists."""
	if not raw:
		return []
	if isinstance(raw, str):
		return [part for part in raw.split(",") if part.strip()]
	if isinstance(raw, list):
		return [str(part) for part in raw if str(part).strip()]
	return []


class ServiceLoop:
	"""Runs the service's event loop on a daemon thread and submits coroutines to it."""

	def __init__(self):
		self.loop = asyncio.new_event_loop()
		self._thread = threading.Thread(target=self._run, name="open-items-loop", daemon=True)

	def _run(self):
		asyncio.set_event_loop(self.loop)
		self.loop.run_forever()

	def start(self) -> "ServiceLoop":
		if not self._thread.is_alive():
			self._thread.start()
		return self

	def submit(self, coro, timeout: Optional[float] = REQUEST_TIMEOUT) -> Any:
		"""Run a coroutine on the loop and block the calling thread for its result."""
		future = asyncio.run_coroutine_threadsafe(coro, self.loop)
		try:
			return future.result(timeout)
		except FutureTimeoutError:
			future.cancel()
			raise

	def call(self, func, *args) -> Any:
		"""Run a plain callable on the loop thread (for state the loop owns)."""
		async def wrapper():
			return func(*args)
		return self.submit(wrapper())

	def stop(self) -> None:
		self.loop.call_soon_threadsafe(self.loop.stop)


def create_app(service: OpenItemsService, service_loop: ServiceLoop) -> Flask:
	app = Flask("open_items_api")

	@app.get("/health")
	def health():
		return jsonify({"status": "ok"})

	# Basic CORS for local file:// renderer
	@app.after_request
	def add_cors_headers(response):
		response.headers["Access-Control-Allow-Origin"] = "*"
		response.headers["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
		response.headers["Access-Control-Allow-Headers"] = "Content-Type"
		return response

	@app.route("/items", methods=["GET", "OPTIONS"])
	def items():
		if request.method == "OPTIONS":
			return ("", 204)
		apps = _parse_apps(request.args.get("apps", ""))
		try:
			records: Sequence[UnifiedRecord] = service_loop.submit(service.list_items(apps))
		except FutureTimeoutError:
			return jsonify({"status": "error", "message": "timed out"}), 504
		return jsonify({"items": [record.to_dict() for record in records]})

	@app.route("/activate", methods=["POST", "OPTIONS"])
	def activate():
		if request.method == "OPTIONS":
			return ("", 204)
		data = request.get_json(silent=True) or {}
		item = data.get("item")
		if not isinstance(item, dict):
			return jsonify({"status": "error", "message": "missing item"}), 400
		record = UnifiedRecord.from_dict(item)
		apps = _parse_apps(data.get("apps"))
		try:
			success = service_loop.submit(service.activate_item(record, apps))
		except FutureTimeoutError:
			return jsonify({"status": "error", "message": "timed out"}), 504
		return jsonify({"success": bool(success)})

	@app.route("/invalidate", methods=["POST", "OPTIONS"])
	def invalidate():
		if request.method == "OPTIONS":
			return ("", 204)
		service_loop.call(service.invalidate)
		return jsonify({"status": "ok"})

	@app.route("/apps", methods=["GET", "OPTIONS"])
	def apps():
		if request.method == "OPTIONS":
			return ("", 204)
		return jsonify({"apps": list_known_apps()})

	@app.route("/permissions", methods=["GET", "OPTIONS"])
	def permissions():
		if request.method == "OPTIONS":
			return ("", 204)
		for adapter in service.orchestrator.adapters:
			if isinstance(adapter, UniversalWindowAdapter):
				return jsonify(adapter.permission_status())
		return jsonify({"granted": True, "error": None})

	@app.route("/query-state", methods=["POST", "OPTIONS"])
	def query_state():
		"""The UI reports whether a search query is being typed."""
		if request.method == "OPTIONS":
			return ("", 204)
		data = request.get_json(silent=True) or {}
		set_user_typing(bool(data.get("has_query")))
		return jsonify({"status": "ok"})

	return app


def serve(service: OpenItemsService, service_loop: ServiceLoop, port: int = 8771) -> None:
	"""
	Serve the API in the calling thread.
	Only binds to 127.0.0.1.
	"""
	app = create_app(service, service_loop)
	logger.info("Serving open items API on http://127.0.0.1:%d", port)
	app.run(host="127.0.0.1", port=port, debug=False, use_reloader=False)
