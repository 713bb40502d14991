"""Microservice exposing a JSON-file key/value store over ZeroMQ REQ/REP."""

from __future__ import annotations

import logging
import sys
import threading

import zmq

import config
from repo_json import JSONFileStorage, StorageError

logger = logging.getLogger(__name__)

OPS = ("get", "set", "remove")


def _error(message):
    """Return a consistent error payload."""
    return {"ok": False, "error": message}


def _validate(payload):
    """Return an error message for a malformed request, else None."""
    if not isinstance(payload, dict):
        return "Request must be a JSON object."
    if payload.get("op") not in OPS:
        return f"Request 'op' must be one of {', '.join(OPS)}."
    if not isinstance(payload.get("key"), str) or not payload["key"]:
        return "Request must contain a non-empty 'key' string."
    if payload["op"] == "set" and not isinstance(payload.get("value"), str):
        return "A 'set' request must contain a 'value' string."
    return None


def process_request(storage, payload) -> dict:
    """
    payload: {"op": "get"|"set"|"remove", "key": str, "value": str (set only)}
    returns {"ok": True, ...} or {"ok": False, "error": str}
    """
    error = _validate(payload)
    if error:
        return _error(error)
    op, key = payload["op"], payload["key"]
    try:
        if op == "get":
            return {"ok": True, "value": storage.get_item(key)}
        if op == "set":
            storage.set_item(key, payload["value"])
        else:
            storage.remove_item(key)
    except StorageError as exc:
        logger.warning("Storage %s failed for %r: %s", op, key, exc)
        return _error(str(exc))
    return {"ok": True}


def shutdown_listener(stop_flag):
    """
    Waits for the user to type 'q' then Enter to request shutdown.
    Sets stop_flag[0] = True so the main loop can exit cleanly.
    """
    print("Press 'q' then Enter to stop the microservice...")
    for line in sys.stdin:
        if line.strip().lower() == "q":
            stop_flag[0] = True
            logger.info("Shutdown requested")
            break


def start_shutdown_listener(stop_flag):
    listener_thread = threading.Thread(
        target=shutdown_listener,
        args=(stop_flag,),
        daemon=True,
    )
    listener_thread.start()
    return listener_thread


def serve_requests(socket, storage, stop_flag, poll_ms=1000):
    """Process inbound requests until stop_flag is set."""
    while not stop_flag[0]:
        if socket.poll(timeout=poll_ms):
            try:
                payload = socket.recv_json()
            except ValueError:
                socket.send_json(_error("Request must be valid JSON."))
                continue
            socket.send_json(process_request(storage, payload))


def build_server_socket(port, context=None):
    """Create and bind the REP socket for the service."""
    context = context or zmq.Context()
    socket = context.socket(zmq.REP)
    address = f"tcp://*:{port}"
    socket.bind(address)
    return context, socket, address


def shutdown(context, socket):
    logger.info("Shutting down storage microservice")
    socket.close()
    context.term()


def run_service(port, data_path):
    """Start the microservice lifecycle for the given port."""
    storage = JSONFileStorage(data_path)
    context, socket, address = build_server_socket(port)
    logger.info("Storage microservice listening on %s (data: %s)", address, data_path)
    stop_flag = [False]
    start_shutdown_listener(stop_flag)
    try:
        serve_requests(socket, storage, stop_flag)
    except zmq.ZMQError:
        logger.exception("Error in storage microservice")
    finally:
        shutdown(context, socket)


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)
    port = config.STORAGE_PORT
    if argv:
        try:
            port = int(argv[0])
        except ValueError:
            logger.warning("Invalid port %r, using default %d instead.", argv[0], port)
    data_path = argv[1] if len(argv) > 1 else config.DATA_PATH
    run_service(port, data_path)


if __name__ == "__main__":
    main()
