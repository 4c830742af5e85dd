import pytest

import httpreq


@pytest.mark.parametrize(
    "exc_class",
    [
        httpreq.InvalidUri,
        httpreq.RequestFailed,
        httpreq.UnsupportedScheme,
        httpreq.TooManyRedirects,
        httpreq.RedirectBufferExceeded,
        httpreq.OutOfMemory,
    ],
)
def test_request_error_hierarchy(exc_class):
    assert issubclass(exc_class, httpreq.RequestError)


@pytest.mark.parametrize(
    "exc_class",
    [httpreq.UnsupportedScheme, httpreq.TooManyRedirects, httpreq.RedirectBufferExceeded],
)
def test_request_failed_family(exc_class):
    assert issubclass(exc_class, httpreq.RequestFailed)


def test_invalid_uri_is_not_request_failed():
    assert not issubclass(httpreq.InvalidUri, httpreq.RequestFailed)


def test_buffer_released_is_a_runtime_error():
    assert issubclass(httpreq.BufferReleased, RuntimeError)
    assert not issubclass(httpreq.BufferReleased, httpreq.RequestError)


def test_request_attribute():
    # Exception without request attribute
    exc = httpreq.RequestFailed("Connection refused")
    with pytest.raises(RuntimeError):
        exc.request  # noqa: B018

    # Exception with request attribute
    request = httpreq.Request("GET", "https://www.example.com")
    exc = httpreq.RequestFailed("Connection refused", request=request)
    assert exc.request is request

    exc = httpreq.TooManyRedirects("Too many")
    exc.request = request
    assert exc.request is request
