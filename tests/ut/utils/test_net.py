"""URL scheme 校验与 Basic 认证头测试"""

import pytest

from mvnuploader.core.exceptions import ValidationError
from mvnuploader.utils.net import basic_auth_header, validate_url_scheme


class TestValidateUrlScheme:
    def test_http_ok(self) -> None:
        validate_url_scheme("http://nexus.example.com")

    def test_https_ok(self) -> None:
        validate_url_scheme("https://nexus.example.com/repository/releases/")

    def test_file_rejected(self) -> None:
        with pytest.raises(ValidationError, match="不允许的 URL 协议"):
            validate_url_scheme("file:///etc/passwd")

    def test_empty_scheme_rejected(self) -> None:
        with pytest.raises(ValidationError, match="不允许的 URL 协议"):
            validate_url_scheme("nexus.example.com")

    def test_context_in_error(self) -> None:
        with pytest.raises(ValidationError, match="repository url"):
            validate_url_scheme("ftp://x", context="repository url")


class TestBasicAuth:
    def test_header(self) -> None:
        # base64("user:pass")
        assert basic_auth_header("user", "pass") == "Basic dXNlcjpwYXNz"
