from webprobe.options import Options, default_options
from webprobe.response import Proto


def test_default_values_match_documented_defaults():
    options = default_options()
    assert options.threads == 25
    assert options.timeout == 30
    assert options.retry_max == 5
    assert options.max_redirects == 10
    assert options.max_response_body_size_to_read == 1024 * 1024 * 10
    assert options.vhost_similarity_ratio == 85
    assert options.cdn_check == "true"
    assert options.random_agent is True
    assert options.vhost_ignore_content_length is True
    assert options.unsafe is False
    assert options.protocol is Proto.UNKNOWN


def test_default_options_are_independent():
    first = default_options()
    first.custom_headers["X-Test"] = "1"
    first.resolvers.append("1.1.1.1")
    second = default_options()
    assert second.custom_headers == {}
    assert second.resolvers == []


def test_parse_custom_cookies():
    options = Options(custom_headers={"Cookie": "a=b; c=d"})
    options._parse_custom_cookies()
    assert options._custom_cookies == [("a", "b"), ("c", "d")]
    assert options._has_custom_cookies()


def test_parse_custom_cookies_strips_quotes_and_skips_bad_names():
    options = Options(custom_headers={"cookie": 'bad name=x; ok="1"'})
    options._parse_custom_cookies()
    assert options._custom_cookies == [("ok", "1")]


def test_no_cookie_header_means_no_cookies():
    options = Options(custom_headers={"X-Other": "a=b"})
    options._parse_custom_cookies()
    assert options._custom_cookies == []
    assert not options._has_custom_cookies()