"""
Example driver: four requests against public echo/test services, each one
printed and released before the next is sent. Any failure aborts the run.
"""

from __future__ import annotations

import json

import click

from .__version__ import __version__
from ._executor import Executor
from ._methods import HttpMethod
from ._models import Header, HeaderTypes, Response

GET_URL = "https://postman-echo.com/get?foo1=bar1&foo2=bar2"
POST_URL = "https://jsonplaceholder.typicode.com/posts"
PUT_URL = "https://postman-echo.com/posts/1"
DELETE_URL = "https://postman-echo.com/delete"

GET_HEADERS = [
    Header("User-Agent", f"httpreq/{__version__}"),
    Header("Accept", "application/json"),
]
JSON_HEADERS = [
    Header("Content-Type", "application/json"),
    Header("Accept", "application/json"),
]

POST_PAYLOAD = json.dumps({"foo1": "bar1", "foo2": "bar2"}, indent=2)
PUT_PAYLOAD = json.dumps(
    {"id": 1, "title": "updated title", "body": "updated body", "userId": 1},
    indent=2,
)

EXAMPLES: list[tuple[HttpMethod, str, HeaderTypes, str | None]] = [
    (HttpMethod.GET, GET_URL, GET_HEADERS, None),
    (HttpMethod.POST, POST_URL, JSON_HEADERS, POST_PAYLOAD),
    (HttpMethod.PUT, PUT_URL, JSON_HEADERS, PUT_PAYLOAD),
    (HttpMethod.DELETE, DELETE_URL, JSON_HEADERS, None),
]


def format_response(method: HttpMethod, response: Response) -> str:
    return "\n".join([
        f"{method} Status: {response.status_code}",
        f"{method} Body: {response.text}",
    ])


def run_examples(executor: Executor | None = None) -> None:
    if executor is None:
        executor = Executor()

    for index, (method, url, headers, payload) in enumerate(EXAMPLES):
        if index:
            click.echo()
        with executor.execute(url, method, headers, payload) as response:
            click.echo(format_response(method, response))


@click.command(help="Send the example GET, POST, PUT and DELETE requests.")
def main() -> None:
    run_examples()
