"""
Unit tests for HTTP request parsing.
"""

import pytest

from tinyhttpd.core.stream import StreamClosed
from tinyhttpd.http.request import (
    HTTPRequest,
    RequestParser,
    HTTPParseError,
    MalformedRequestLine,
    MalformedHeader,
    InvalidContentLength,
    TruncatedBody,
    LineTooLong,
    parse_request,
)
from conftest import make_stream, byte_by_byte


class TestRequestLine:
    """Tests for RequestParser.parse_request_line."""

    def test_three_fields(self):
        line = RequestParser().parse_request_line(make_stream(b"GET /echo/abc HTTP/1.1\r\n"))

        assert line.method == "GET"
        assert line.path == "/echo/abc"
        assert line.version == "HTTP/1.1"

    def test_two_fields(self):
        """The version is optional."""
        line = RequestParser().parse_request_line(make_stream(b"GET /\r\n"))

        assert (line.method, line.path, line.version) == ("GET", "/", "")

    def test_extra_whitespace(self):
        line = RequestParser().parse_request_line(make_stream(b"GET  \t/x   HTTP/1.1 \r\n"))

        assert (line.method, line.path, line.version) == ("GET", "/x", "HTTP/1.1")

    def test_lf_only(self):
        line = RequestParser().parse_request_line(make_stream(b"POST /files/a HTTP/1.1\n"))

        assert line.method == "POST"
        assert line.path == "/files/a"

    def test_method_case_preserved(self):
        line = RequestParser().parse_request_line(make_stream(b"get / HTTP/1.1\r\n"))

        assert line.method == "get"

    @pytest.mark.parametrize("raw", [b"GET\r\n", b"\r\n", b"   \r\n"])
    def test_too_few_fields(self, raw):
        with pytest.raises(MalformedRequestLine) as exc_info:
            RequestParser().parse_request_line(make_stream(raw))

        assert exc_info.value.status_code == 400

    def test_non_ascii_bytes_kept(self):
        """Non-ASCII bytes are part of a field, not separators."""
        line = RequestParser().parse_request_line(make_stream(b"GET /echo/caf\xe9\xa0x HTTP/1.1\r\n"))

        assert line.path == "/echo/caf\xe9\xa0x"

    def test_stream_closed(self):
        with pytest.raises(StreamClosed):
            RequestParser().parse_request_line(make_stream(b"GET / HTTP/1.1"))

    def test_line_too_long(self):
        stream = make_stream(b"GET /" + b"a" * 200 + b" HTTP/1.1\r\n", max_line_length=64)

        with pytest.raises(LineTooLong) as exc_info:
            RequestParser().parse_request_line(stream)

        assert exc_info.value.status_code == 400


class TestHeaders:
    """Tests for RequestParser.parse_headers."""

    def test_simple_headers(self):
        headers = RequestParser().parse_headers(make_stream(
            b"Host: localhost\r\nUser-Agent: curl/8.4.0\r\n\r\n"
        ))

        assert headers == {"Host": "localhost", "User-Agent": "curl/8.4.0"}

    def test_splits_on_first_colon(self):
        headers = RequestParser().parse_headers(make_stream(b"Host: localhost:42069\r\n\r\n"))

        assert headers["Host"] == "localhost:42069"

    def test_trims_name_and_value(self):
        headers = RequestParser().parse_headers(make_stream(b"  X-Test  :   value  \r\n\r\n"))

        assert headers == {"X-Test": "value"}

    def test_last_duplicate_wins(self):
        headers = RequestParser().parse_headers(make_stream(b"X-A: 1\r\nX-A: 2\r\n\r\n"))

        assert headers["X-A"] == "2"

    def test_names_are_case_sensitive(self):
        headers = RequestParser().parse_headers(make_stream(b"user-agent: lower\r\n\r\n"))

        assert "User-Agent" not in headers
        assert headers["user-agent"] == "lower"

    def test_empty_value(self):
        headers = RequestParser().parse_headers(make_stream(b"Accept-Encoding:\r\n\r\n"))

        assert headers == {"Accept-Encoding": ""}

    def test_lf_only(self):
        headers = RequestParser().parse_headers(make_stream(b"A: 1\nB: 2\n\n"))

        assert headers == {"A": "1", "B": "2"}

    def test_stops_at_blank_line(self):
        stream = make_stream(b"A: 1\r\n\r\nbody")
        RequestParser().parse_headers(stream)

        assert stream.read_exact(4) == b"body"

    def test_no_headers(self):
        assert RequestParser().parse_headers(make_stream(b"\r\n")) == {}

    def test_colon_less_line_skipped_by_default(self):
        headers = RequestParser().parse_headers(make_stream(b"garbage\r\nA: 1\r\n\r\n"))

        assert headers == {"A": "1"}

    def test_colon_less_line_rejected_when_strict(self):
        parser = RequestParser(header_policy="strict")

        with pytest.raises(MalformedHeader) as exc_info:
            parser.parse_headers(make_stream(b"garbage\r\nA: 1\r\n\r\n"))

        assert exc_info.value.status_code == 400

    def test_stream_closed_before_blank_line(self):
        with pytest.raises(StreamClosed):
            RequestParser().parse_headers(make_stream(b"Host: x\r\n"))

    def test_unknown_policy(self):
        with pytest.raises(ValueError):
            RequestParser(header_policy="lenient")


class TestBody:
    """Tests for RequestParser.read_body."""

    def test_no_content_length(self):
        stream = make_stream(b"ignored")

        assert RequestParser().read_body(stream, {}) == b""
        assert stream.buffered == 0  # Nothing read

    def test_reads_declared_length(self):
        body = RequestParser().read_body(make_stream(b"hello, extra"), {"Content-Length": "5"})

        assert body == b"hello"

    def test_zero_length(self):
        assert RequestParser().read_body(make_stream(), {"Content-Length": "0"}) == b""

    @pytest.mark.parametrize("value", ["abc", "-1", "+5", "1.5", "", "5 5"])
    def test_invalid_length(self, value):
        with pytest.raises(InvalidContentLength) as exc_info:
            RequestParser().read_body(make_stream(b"12345"), {"Content-Length": value})

        assert exc_info.value.status_code == 400

    def test_lowercase_header_is_not_content_length(self):
        body = RequestParser().read_body(make_stream(b"abc"), {"content-length": "3"})

        assert body == b""

    def test_truncated(self):
        with pytest.raises(TruncatedBody) as exc_info:
            RequestParser().read_body(make_stream(b"abc"), {"Content-Length": "10"})

        assert exc_info.value.expected == 10
        assert exc_info.value.received == 3
        assert exc_info.value.status_code == 400

    def test_over_size_limit(self):
        parser = RequestParser(max_body_size=4)

        with pytest.raises(InvalidContentLength):
            parser.read_body(make_stream(b"hello"), {"Content-Length": "5"})

    def test_binary_body_untouched(self):
        data = bytes(range(256))
        body = RequestParser().read_body(make_stream(data), {"Content-Length": "256"})

        assert body == data


class TestFullRequest:
    """Tests for RequestParser.parse and parse_request."""

    def test_parse_get(self, sample_get_request: bytes):
        request = RequestParser().parse(make_stream(sample_get_request), ("127.0.0.1", 12345))

        assert request.method == "GET"
        assert request.path == "/echo/abc"
        assert request.version == "HTTP/1.1"
        assert request.user_agent == "pytest"
        assert request.body == b""
        assert request.client_address == ("127.0.0.1", 12345)

    def test_parse_post(self, sample_post_request: bytes):
        request = parse_request(sample_post_request)

        assert request.method == "POST"
        assert request.body == b"hello, file"
        assert request.content_length == 11

    def test_fragmented_delivery(self, sample_post_request: bytes):
        """One byte per recv() parses the same as one big chunk."""
        whole = RequestParser().parse(make_stream(sample_post_request))
        pieces = RequestParser().parse(byte_by_byte(sample_post_request))

        assert pieces == whole

    def test_lf_and_crlf_parse_identically(self):
        crlf = parse_request(b"GET /user-agent HTTP/1.1\r\nUser-Agent: x\r\n\r\n")
        lf = parse_request(b"GET /user-agent HTTP/1.1\nUser-Agent: x\n\n")

        assert crlf == lf

    def test_parse_errors_share_a_base(self):
        with pytest.raises(HTTPParseError):
            parse_request(b"GET\r\n\r\n")

    def test_parser_options_forwarded(self):
        with pytest.raises(MalformedHeader):
            parse_request(b"GET / HTTP/1.1\r\nbad\r\n\r\n", header_policy="strict")


class TestHTTPRequest:
    """Tests for HTTPRequest class."""

    def test_get_header_exact_name(self):
        request = HTTPRequest(method="GET", path="/", headers={"Accept-Encoding": "gzip"})

        assert request.get_header("Accept-Encoding") == "gzip"
        assert request.get_header("accept-encoding") == ""
        assert request.get_header("accept-encoding", None) is None

    def test_missing_user_agent(self):
        assert HTTPRequest(method="GET", path="/user-agent").user_agent == ""

    def test_with_params_returns_copy(self):
        request = HTTPRequest(method="GET", path="/echo/abc")
        routed = request.with_params({"text": "abc"})

        assert routed.path_params == {"text": "abc"}
        assert request.path_params == {}
        assert routed.path == request.path

    def test_frozen(self):
        request = HTTPRequest(method="GET", path="/")

        with pytest.raises(AttributeError):
            request.path = "/other"
