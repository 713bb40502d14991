"""Key/value storage backed by the ZeroMQ storage microservice."""

from __future__ import annotations

from typing import Optional

import zmq

import config
from repo_json import StorageError

_CONTEXT = zmq.Context.instance()


# ---------- Low-level send helpers ----------
def _make_socket(port: int, timeout_ms: int, host: str = "localhost"):
    socket = _CONTEXT.socket(zmq.REQ)
    socket.setsockopt(zmq.RCVTIMEO, timeout_ms)
    socket.setsockopt(zmq.SNDTIMEO, timeout_ms)
    socket.setsockopt(zmq.LINGER, 0)
    socket.connect(f"tcp://{host}:{port}")
    return socket


def _send_json(port: int, payload: dict, timeout_ms: int = config.TIMEOUT_MS,
               host: str = "localhost"):
    socket = _make_socket(port, timeout_ms, host)
    try:
        socket.send_json(payload)
        return socket.recv_json(), None
    except zmq.error.Again:
        return None, f"Timed out contacting storage service on port {port}."
    except (zmq.ZMQError, ValueError) as exc:
        return None, f"Storage service error on port {port}: {exc}"
    finally:
        socket.close()


class RemoteStorage:
    """localStorage-style get/set/remove over REQ/REP.

    Every failure (timeout, transport error, error reply) surfaces as
    StorageError so the habit store can treat it like any other backend.
    """

    def __init__(self, port: int = config.STORAGE_PORT, host: str = "localhost",
                 timeout_ms: int = config.TIMEOUT_MS):
        self.port = port
        self.host = host
        self.timeout_ms = timeout_ms

    def _call(self, payload: dict) -> dict:
        response, error = _send_json(self.port, payload, self.timeout_ms, self.host)
        if error:
            raise StorageError(error)
        if not isinstance(response, dict) or not response.get("ok"):
            message = "Unknown storage error."
            if isinstance(response, dict):
                message = response.get("error", message)
            raise StorageError(message)
        return response

    def get_item(self, key: str) -> Optional[str]:
        return self._call({"op": "get", "key": key}).get("value")

    def set_item(self, key: str, value: str):
        self._call({"op": "set", "key": key, "value": value})

    def remove_item(self, key: str):
        self._call({"op": "remove", "key": key})
