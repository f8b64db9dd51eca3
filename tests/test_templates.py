#!/usr/bin/env python3
"""Tests for the guest file templates."""

import pytest

from pcfdev import templates
from pcfdev.errors import InvalidIPError

PATH_LINE = (
    "PATH=/usr/local/sbin:/usr/local/bin:/usr/sbin:/usr/bin:/sbin:/bin:/usr/games:/usr/local/games"
)


class TestNetworkInterfaces:
    def test_static_address_on_eth1(self):
        assert templates.network_interfaces("192.168.11.11") == (
            "\nauto lo\niface lo inet loopback\n\n"
            "auto eth0\niface eth0 inet dhcp\n\n"
            "auto eth1\niface eth1 inet static\naddress 192.168.11.11\nnetmask 255.255.255.0"
        )


class TestProxySettings:
    def test_loopback_proxy_is_rewritten_to_gateway(self):
        settings = templates.proxy_settings(
            "192.168.22.11", "local2.pcfdev.io", http_proxy="127.0.0.1", https_proxy="127.0.0.1:8443"
        )

        assert settings.http_proxy == "192.168.22.1"
        assert settings.https_proxy == "192.168.22.1:8443"

    def test_no_proxy_order_without_user_entries(self):
        settings = templates.proxy_settings("192.168.22.11", "local2.pcfdev.io")

        assert settings.no_proxy == (
            "localhost,127.0.0.1,192.168.22.1,192.168.22.11,local2.pcfdev.io,.local2.pcfdev.io"
        )

    def test_user_no_proxy_is_appended(self):
        settings = templates.proxy_settings(
            "192.168.11.11", "local.pcfdev.io", no_proxy="corp.example.com,10.0.0.0/8"
        )

        assert settings.no_proxy.endswith(",.local.pcfdev.io,corp.example.com,10.0.0.0/8")

    def test_unknown_ip(self):
        with pytest.raises(InvalidIPError):
            templates.proxy_settings("10.1.1.1", "local.pcfdev.io")


class TestEnvironment:
    def test_with_proxies(self):
        settings = templates.ProxySettings(
            http_proxy="http://192.168.11.1:3128",
            https_proxy="http://192.168.11.1:3129",
            no_proxy="localhost",
        )

        assert templates.environment(settings) == "\n".join([
            "",
            PATH_LINE,
            "HTTP_PROXY=http://192.168.11.1:3128",
            "HTTPS_PROXY=http://192.168.11.1:3129",
            "NO_PROXY=localhost",
            "http_proxy=http://192.168.11.1:3128",
            "https_proxy=http://192.168.11.1:3129",
            "no_proxy=localhost",
        ])

    def test_unset_proxies_leave_blank_lines(self):
        settings = templates.ProxySettings(http_proxy="", https_proxy="", no_proxy="localhost")

        assert templates.environment(settings) == (
            f"\n{PATH_LINE}\n\n\nNO_PROXY=localhost\n\n\nno_proxy=localhost"
        )

    def test_tee_command(self):
        assert templates.tee_command("a\nb", "/etc/environment") == (
            "echo -e 'a\nb' | sudo tee /etc/environment"
        )
