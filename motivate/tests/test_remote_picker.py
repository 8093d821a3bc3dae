"""
Tests for remote_picker.py and backend.py

Network calls are never made. The BackendClient is given an autospecced requests.Session (see the
'session' fixture in conftest.py) whose request() returns real requests Response objects built by
make_response, so status handling and JSON decoding run through the real requests code paths.

*** Fixtures ***
- session, client (defined in conftest.py)
- test_image_bytes (defined in conftest.py)
"""

from urllib.parse import unquote
from urllib.parse import urlsplit

import pytest
import requests

from motivate.backend import BackendClient
from motivate.backend import RemoteError
from motivate.backend import RemoteErrorKind
from motivate.conftest import make_response
from motivate.models import Category
from motivate.models import ImageRecord

# following entities are tested in this module:
from motivate.remote_picker import RemoteImagePicker
from motivate.remote_picker import make_public_url


@pytest.fixture
def picker(client) -> RemoteImagePicker:
    return RemoteImagePicker(client)


def test_build_public_url_shape(picker):

    url = picker.build_public_url("sunrise.jpg")

    assert url == (
        "https://example.supabase.co/storage/v1/object/public/motivational-images//sunrise.jpg"
    )


def test_build_public_url_encodes_filename(picker):

    url = picker.build_public_url("a b.png")
    prefix = "https://example.supabase.co/storage/v1/object/public/motivational-images//"

    assert url.startswith(prefix)
    assert " " not in url

    trailing = url[len(prefix):]
    assert trailing == "a%20b.png"
    assert unquote(trailing) == "a b.png"


@pytest.mark.parametrize(
    "filename",
    ["a b.png", "100% focus.jpg", "what?.png", "hash#tag.jpg", "sub/dir.png", "café.png"],
)
def test_build_public_url_reserved_characters_round_trip(filename):

    url = make_public_url("https", "example.supabase.co", "motivational-images", filename)
    bucket_path, _, trailing = url.partition("motivational-images//")

    assert bucket_path == "https://example.supabase.co/storage/v1/object/public/"
    assert "/" not in trailing
    assert unquote(trailing) == filename


def test_build_public_url_ignores_base_path(session):

    client = BackendClient("https://example.supabase.co/some/path/", "key", session=session)
    url = RemoteImagePicker(client, bucket="other").build_public_url("x.png")

    assert urlsplit(url).path == "/storage/v1/object/public/other//x.png"


def test_fetch_random_unfiltered(picker, session):

    session.request.return_value = make_response(body={"id": 7, "image_url": "sunrise.jpg"})

    record = picker.fetch_random(None)

    assert record == ImageRecord(id=7, filename="sunrise.jpg")

    method, url = session.request.call_args.args
    assert method == "POST"
    assert url == "https://example.supabase.co/rest/v1/rpc/get_random_image"
    assert session.request.call_args.kwargs["json"] == {"category_ids": None}
    assert session.request.call_args.kwargs["timeout"] == 2.0
    assert session.request.call_args.kwargs["headers"]["apikey"] == "test-key"


@pytest.mark.parametrize("category_ids", [[], set(), frozenset()])
def test_fetch_random_empty_filter_is_unfiltered(picker, session, category_ids):

    session.request.return_value = make_response(body={"id": 1, "image_url": "a.jpg"})

    picker.fetch_random(category_ids)

    assert session.request.call_args.kwargs["json"] == {"category_ids": None}


def test_fetch_random_filtered(picker, session):

    session.request.return_value = make_response(body=[{"id": 9, "image_url": "peak.png"}])

    record = picker.fetch_random({5, 3})

    assert record.id == 9
    assert session.request.call_args.kwargs["json"] == {"category_ids": [3, 5]}


@pytest.mark.parametrize(
    "response, kind",
    [
        (make_response(body=[]), RemoteErrorKind.EMPTY),
        (make_response(content=b"null"), RemoteErrorKind.EMPTY),
        (make_response(content=b""), RemoteErrorKind.EMPTY),
        (make_response(content=b"<html>oops</html>"), RemoteErrorKind.DECODE),
        (make_response(body={"id": 1}), RemoteErrorKind.DECODE),
        (make_response(body={"id": "seven", "image_url": "x.png"}), RemoteErrorKind.DECODE),
        (make_response(body={"id": True, "image_url": "x.png"}), RemoteErrorKind.DECODE),
        (make_response(body={"id": 7.9, "image_url": "x.png"}), RemoteErrorKind.DECODE),
        (make_response(body={"id": 1, "image_url": ""}), RemoteErrorKind.DECODE),
        (
            make_response(body=[{"id": 1, "image_url": "a"}, {"id": 2, "image_url": "b"}]),
            RemoteErrorKind.DECODE,
        ),
        (make_response(status_code=500, body={"message": "boom"}), RemoteErrorKind.HTTP_STATUS),
        (make_response(status_code=404), RemoteErrorKind.HTTP_STATUS),
    ],
)
def test_fetch_random_failures(picker, session, response, kind):

    session.request.return_value = response

    with pytest.raises(RemoteError) as excinfo:
        picker.fetch_random([1])

    assert excinfo.value.kind is kind


@pytest.mark.parametrize(
    "error",
    [
        requests.exceptions.ConnectionError("no route to host"),
        requests.exceptions.Timeout("read timed out"),
        requests.exceptions.TooManyRedirects("loop"),
    ],
)
def test_fetch_random_transport_failure(picker, session, error):

    session.request.side_effect = error

    with pytest.raises(RemoteError) as excinfo:
        picker.fetch_random(None)

    assert excinfo.value.kind is RemoteErrorKind.NETWORK


def test_download_bytes_success(picker, session, test_image_bytes):

    session.request.return_value = make_response(content=test_image_bytes)

    data = picker.download_bytes("https://example.supabase.co/storage/v1/object/public/b//x.png")

    assert data == test_image_bytes
    assert session.request.call_args.args[0] == "GET"


@pytest.mark.parametrize("status_code", [201, 204, 301, 403, 404, 500, 503])
def test_download_bytes_requires_exactly_200(picker, session, status_code):

    session.request.return_value = make_response(status_code=status_code, content=b"data")

    with pytest.raises(RemoteError) as excinfo:
        picker.download_bytes("https://example.supabase.co/x")

    assert excinfo.value.status_code == status_code
    assert str(status_code) in str(excinfo.value)


def test_download_bytes_transport_failure(picker, session):

    session.request.side_effect = requests.exceptions.ConnectionError("offline")

    with pytest.raises(RemoteError) as excinfo:
        picker.download_bytes("https://example.supabase.co/x")

    assert excinfo.value.kind is RemoteErrorKind.NETWORK


def test_fetch_image_downloads_public_url(picker, session, test_image_bytes):

    session.request.side_effect = [
        make_response(body={"id": 7, "image_url": "sunrise.jpg"}),
        make_response(content=test_image_bytes),
    ]

    record, data = picker.fetch_image([])

    assert record.id == 7
    assert data == test_image_bytes
    assert session.request.call_args.args == (
        "GET",
        "https://example.supabase.co/storage/v1/object/public/motivational-images//sunrise.jpg",
    )


def test_fetch_categories(picker, session):

    session.request.return_value = make_response(
        body=[
            {"id": 2, "name": "discipline", "description": None},
            {"id": 1, "name": "focus", "description": "Stay on task"},
        ]
    )

    categories = picker.fetch_categories()

    assert categories == [
        Category(id=2, name="discipline"),
        Category(id=1, name="focus", description="Stay on task"),
    ]
    assert session.request.call_args.kwargs["params"] == {"select": "*", "order": "name"}
    assert session.request.call_args.args[1] == "https://example.supabase.co/rest/v1/categories"


@pytest.mark.parametrize("body", [{"id": 1}, [{"name": "no id"}], ["nope"]])
def test_fetch_categories_decode_failure(picker, session, body):

    session.request.return_value = make_response(body=body)

    with pytest.raises(RemoteError) as excinfo:
        picker.fetch_categories()

    assert excinfo.value.kind is RemoteErrorKind.DECODE


def test_backend_client_rejects_relative_url(session):

    with pytest.raises(ValueError):
        BackendClient("example.supabase.co", "key", session=session)


def test_backend_client_repr_hides_key(client):

    assert "test-key" not in repr(client)
