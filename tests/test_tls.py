"""Tests for TLS context construction."""

import ssl

import pytest

from eventexporter.config import TLSConfig
from eventexporter.tls import TLSConfigError, build_ssl_context


class TestBuildSSLContext:
    """Tests for build_ssl_context()."""

    def test_default_verifies_server(self):
        """Test the default context verifies certificates and hostnames."""
        context = build_ssl_context(TLSConfig())

        assert context.verify_mode == ssl.CERT_REQUIRED
        assert context.check_hostname is True

    def test_insecure_skip_verify(self):
        """Test verification can be disabled."""
        context = build_ssl_context(TLSConfig(insecureSkipVerify=True))

        assert context.verify_mode == ssl.CERT_NONE
        assert context.check_hostname is False

    def test_cert_without_key_rejected(self, tmp_path):
        """Test a client certificate requires its key."""
        with pytest.raises(TLSConfigError, match="both certFile and keyFile"):
            build_ssl_context(TLSConfig(certFile=tmp_path / "client.crt"))

    def test_key_without_cert_rejected(self, tmp_path):
        """Test a client key requires its certificate."""
        with pytest.raises(TLSConfigError, match="both certFile and keyFile"):
            build_ssl_context(TLSConfig(keyFile=tmp_path / "client.key"))

    def test_missing_ca_file(self, tmp_path):
        """Test an unreadable CA file is a configuration error."""
        with pytest.raises(TLSConfigError, match="failed to load TLS material"):
            build_ssl_context(TLSConfig(caFile=tmp_path / "missing.pem"))

    def test_invalid_ca_file(self, tmp_path):
        """Test a CA file without certificates is a configuration error."""
        ca_file = tmp_path / "ca.pem"
        ca_file.write_text("not a certificate")

        with pytest.raises(TLSConfigError):
            build_ssl_context(TLSConfig(caFile=ca_file))
