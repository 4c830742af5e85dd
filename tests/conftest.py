import json
import os
import threading
import time
import typing
from urllib.parse import parse_qsl

import pytest
from uvicorn.config import Config
from uvicorn.server import Server

ENVIRONMENT_VARIABLES = {
    "SSL_CERT_FILE",
    "SSL_CERT_DIR",
    "HTTP_PROXY",
    "HTTPS_PROXY",
    "ALL_PROXY",
    "NO_PROXY",
    "SSLKEYLOGFILE",
}


@pytest.fixture(scope="function", autouse=True)
def clean_environ():
    """Keeps os.environ clean for every test without having to mock os.environ"""
    original_environ = os.environ.copy()
    os.environ.clear()
    os.environ.update(
        {
            k: v
            for k, v in original_environ.items()
            if k not in ENVIRONMENT_VARIABLES and k.lower() not in ENVIRONMENT_VARIABLES
        }
    )
    yield
    os.environ.clear()
    os.environ.update(original_environ)


Message = typing.Dict[str, typing.Any]
Receive = typing.Callable[[], typing.Awaitable[Message]]
Send = typing.Callable[
    [typing.Dict[str, typing.Any]], typing.Coroutine[None, None, None]
]
Scope = typing.Dict[str, typing.Any]


async def app(scope: Scope, receive: Receive, send: Send) -> None:
    assert scope["type"] == "http"
    if scope["path"].startswith("/get"):
        await echo_args(scope, receive, send)
    elif scope["path"].startswith("/posts"):
        await create_post(scope, receive, send)
    elif scope["path"].startswith("/status"):
        await status_code(scope, receive, send)
    elif scope["path"].startswith("/redirect"):
        await redirect(scope, receive, send)
    elif scope["path"].startswith("/long_redirect"):
        await long_redirect(scope, receive, send)
    else:
        await echo(scope, receive, send)


async def read_body(receive: Receive) -> bytes:
    body = b""
    more_body = True

    while more_body:
        message = await receive()
        body += message.get("body", b"")
        more_body = message.get("more_body", False)

    return body


async def send_json(send: Send, status: int, data: typing.Any) -> None:
    await send(
        {
            "type": "http.response.start",
            "status": status,
            "headers": [[b"content-type", b"application/json"]],
        }
    )
    await send({"type": "http.response.body", "body": json.dumps(data).encode()})


async def echo_args(scope: Scope, receive: Receive, send: Send) -> None:
    args = dict(parse_qsl(scope["query_string"].decode()))
    await send_json(send, 200, {"args": args})


async def create_post(scope: Scope, receive: Receive, send: Send) -> None:
    payload = json.loads(await read_body(receive))
    await send_json(send, 201, {**payload, "id": 101})


async def echo(scope: Scope, receive: Receive, send: Send) -> None:
    body = await read_body(receive)
    headers = [
        [name.decode(), value.decode()] for name, value in scope.get("headers", [])
    ]
    await send_json(
        send,
        200,
        {
            "method": scope["method"],
            "path": scope["path"],
            "headers": headers,
            "body": body.decode(),
        },
    )


async def status_code(scope: Scope, receive: Receive, send: Send) -> None:
    status_code = int(scope["path"].replace("/status/", ""))
    await send(
        {
            "type": "http.response.start",
            "status": status_code,
            "headers": [[b"content-type", b"text/plain"]],
        }
    )
    await send({"type": "http.response.body", "body": b"Hello, world!"})


async def send_redirect(send: Send, location: str) -> None:
    await send(
        {
            "type": "http.response.start",
            "status": 302,
            "headers": [[b"location", location.encode()]],
        }
    )
    await send({"type": "http.response.body"})


async def redirect(scope: Scope, receive: Receive, send: Send) -> None:
    remaining = int(scope["path"].split("/")[2])
    if remaining <= 1:
        await send_redirect(send, "/echo")
    else:
        await send_redirect(send, f"/redirect/{remaining - 1}")


async def long_redirect(scope: Scope, receive: Receive, send: Send) -> None:
    remaining = int(scope["path"].split("/")[2])
    if remaining == 0:
        await echo(scope, receive, send)
    else:
        await send_redirect(send, f"/long_redirect/{remaining - 1}/" + "x" * 3000)


class TestServer(Server):
    def install_signal_handlers(self) -> None:
        # Signal handlers can only be installed from the main thread.
        pass

    @property
    def url(self) -> str:
        port = self.servers[0].sockets[0].getsockname()[1]
        return f"http://{self.config.host}:{port}/"


def serve_in_thread(server: TestServer) -> typing.Iterator[TestServer]:
    thread = threading.Thread(target=server.run, daemon=True)
    thread.start()
    try:
        deadline = time.monotonic() + 10
        while not server.started:
            if not thread.is_alive() or time.monotonic() > deadline:
                raise RuntimeError("Server failed to start within 10 seconds")
            time.sleep(1e-3)
        yield server
    finally:
        server.should_exit = True
        thread.join(timeout=5)


@pytest.fixture(scope="session")
def server() -> typing.Iterator[TestServer]:
    config = Config(
        app=app,
        lifespan="off",
        loop="asyncio",
        host="127.0.0.1",
        port=0,
        log_level="warning",
    )
    server = TestServer(config=config)
    yield from serve_in_thread(server)
