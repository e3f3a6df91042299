"""
Unit tests for HTTP response building.
"""

import pytest

from tinyhttpd.http.response import (
    HTTPResponse,
    ResponseBuilder,
    HTTPStatus,
    ok,
    created,
    not_found,
    bad_request,
    internal_error,
    status_only,
)


class TestHTTPResponse:
    """Tests for HTTPResponse class."""

    def test_status_line(self):
        """Test status line generation."""
        response = HTTPResponse(status=HTTPStatus.OK)
        assert response.status_line == "HTTP/1.1 200 OK"

        response = HTTPResponse(status=HTTPStatus.NOT_FOUND)
        assert response.status_line == "HTTP/1.1 404 Not Found"

    def test_status_only_bytes(self):
        """No headers are added automatically."""
        assert HTTPResponse().to_bytes() == b"HTTP/1.1 200 OK\r\n\r\n"

    def test_headers_in_order(self):
        response = HTTPResponse(
            headers=[("Content-Type", "text/plain"), ("Content-Length", "3")],
            body=b"abc",
        )

        assert response.to_bytes() == (
            b"HTTP/1.1 200 OK\r\n"
            b"Content-Type: text/plain\r\n"
            b"Content-Length: 3\r\n"
            b"\r\n"
            b"abc"
        )

    def test_no_content_length_without_header(self):
        """A body without a Content-Length header is sent as-is."""
        result = HTTPResponse(body=b"hello world").to_bytes()

        assert b"Content-Length" not in result
        assert result.endswith(b"\r\n\r\nhello world")

    def test_binary_body_untouched(self):
        body = bytes(range(256))

        assert HTTPResponse(body=body).to_bytes().endswith(body)

    def test_get_header(self):
        response = HTTPResponse(headers=[("X-A", "1"), ("X-A", "2")])

        assert response.get_header("X-A") == "1"
        assert response.get_header("x-a") is None


class TestResponseBuilder:
    """Tests for ResponseBuilder class."""

    def test_status(self):
        """Test setting status code."""
        response = ResponseBuilder().status(HTTPStatus.CREATED).build()
        assert response.status == HTTPStatus.CREATED

    def test_text_body(self):
        """Test plain text body."""
        response = ResponseBuilder().text("abc").build()

        assert response.headers == [("Content-Type", "text/plain"), ("Content-Length", "3")]
        assert response.body == b"abc"

    def test_text_empty(self):
        response = ResponseBuilder().text("").build()

        assert response.to_bytes() == (
            b"HTTP/1.1 200 OK\r\n"
            b"Content-Type: text/plain\r\n"
            b"Content-Length: 0\r\n"
            b"\r\n"
        )

    def test_text_is_byte_transparent(self):
        """Latin-1 round trip: each character is one byte."""
        response = ResponseBuilder().text("caf\xe9").build()

        assert response.body == b"caf\xe9"
        assert response.get_header("Content-Length") == "4"

    def test_content_length_counts_body_so_far(self):
        response = (ResponseBuilder()
            .body(b"12345")
            .content_length()
            .build())

        assert response.get_header("Content-Length") == "5"

    def test_header_appends(self):
        """Same header twice is sent twice."""
        response = (ResponseBuilder()
            .header("X-Custom", "a")
            .header("X-Custom", "b")
            .build())

        assert response.headers == [("X-Custom", "a"), ("X-Custom", "b")]

    def test_method_chaining(self):
        """Test fluent API chaining."""
        response = (ResponseBuilder()
            .status(HTTPStatus.OK)
            .content_type("application/octet-stream")
            .body(b"\x00\x01")
            .content_length()
            .build())

        assert response.to_bytes() == (
            b"HTTP/1.1 200 OK\r\n"
            b"Content-Type: application/octet-stream\r\n"
            b"Content-Length: 2\r\n"
            b"\r\n"
            b"\x00\x01"
        )

    def test_build_copies_headers(self):
        builder = ResponseBuilder().header("X-A", "1")
        first = builder.build()
        builder.header("X-B", "2")

        assert first.headers == [("X-A", "1")]


class TestConvenienceFunctions:
    """Status-only responses."""

    @pytest.mark.parametrize("factory, expected", [
        (ok, b"HTTP/1.1 200 OK\r\n\r\n"),
        (created, b"HTTP/1.1 201 Created\r\n\r\n"),
        (bad_request, b"HTTP/1.1 400 Bad Request\r\n\r\n"),
        (not_found, b"HTTP/1.1 404 Not Found\r\n\r\n"),
        (internal_error, b"HTTP/1.1 500 Internal Server Error\r\n\r\n"),
    ])
    def test_exact_bytes(self, factory, expected):
        assert factory().to_bytes() == expected

    def test_status_only_accepts_int(self):
        response = status_only(400)

        assert response.status is HTTPStatus.BAD_REQUEST
        assert response.headers == []
        assert response.body == b""

    def test_status_only_rejects_unknown_code(self):
        with pytest.raises(ValueError):
            status_only(418)


class TestHTTPStatus:
    """Tests for HTTPStatus enum."""

    def test_status_phrases(self):
        """Test that all statuses have phrases."""
        assert HTTPStatus.OK.phrase == "OK"
        assert HTTPStatus.CREATED.phrase == "Created"
        assert HTTPStatus.BAD_REQUEST.phrase == "Bad Request"
        assert HTTPStatus.NOT_FOUND.phrase == "Not Found"
        assert HTTPStatus.INTERNAL_SERVER_ERROR.phrase == "Internal Server Error"

    def test_str_is_code(self):
        assert str(HTTPStatus.NOT_FOUND) == "404"
        assert f"{HTTPStatus.CREATED}" == "201"

    def test_categories(self):
        assert HTTPStatus.CREATED.is_success
        assert not HTTPStatus.CREATED.is_error
        assert HTTPStatus.BAD_REQUEST.is_error
        assert HTTPStatus.INTERNAL_SERVER_ERROR.is_error
