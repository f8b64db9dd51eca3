#!/usr/bin/env python3
"""Tests for the pydantic models passed between lifecycle layers."""

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from pcfdev.models import NetworkConfig, ProvisionOptions, StartOpts, VMConfig


class TestVMConfig:
    def test_defaults(self):
        vm = VMConfig(name="pcfdev-default")

        assert vm.ip == ""
        assert vm.domain == ""
        assert vm.ssh_port == ""
        assert vm.memory == 0
        assert vm.cpus == 0
        assert vm.ova_path is None

    def test_name_is_stripped(self):
        assert VMConfig(name="  pcfdev-default ").name == "pcfdev-default"

    def test_empty_name_rejected(self):
        with pytest.raises(ValidationError, match="VM name cannot be empty"):
            VMConfig(name="")

    def test_negative_memory_rejected(self):
        with pytest.raises(ValidationError):
            VMConfig(name="pcfdev-default", memory=-1)

    def test_ova_path_coerced(self):
        assert VMConfig(name="x", ova_path="/tmp/a.ova").ova_path == Path("/tmp/a.ova")


class TestStartOpts:
    def test_defaults_mean_not_supplied(self):
        opts = StartOpts()

        assert opts.memory == 0
        assert opts.cpus == 0
        assert opts.ova_path is None
        assert opts.services == ""
        assert opts.registries == []

    def test_negative_cpus_kept_for_validation(self):
        assert StartOpts(cpus=-2).cpus == -2

    def test_registries_not_shared(self):
        a, b = StartOpts(), StartOpts()
        a.registries.append("r:5000")

        assert b.registries == []


class TestNetworkConfig:
    def test_json_shape(self):
        record = NetworkConfig(ip="192.168.22.11", domain="local2.pcfdev.io")

        assert json.loads(record.to_json()) == {"ip": "192.168.22.11", "domain": "local2.pcfdev.io"}

    def test_from_json_bytes(self):
        record = NetworkConfig.from_json(b'{"ip":"192.168.11.11","domain":"local.pcfdev.io"}')

        assert record == NetworkConfig(ip="192.168.11.11", domain="local.pcfdev.io")

    def test_from_json_missing_field(self):
        with pytest.raises(ValidationError):
            NetworkConfig.from_json('{"ip":"192.168.11.11"}')


class TestProvisionOptions:
    def test_json_shape(self):
        opts = ProvisionOptions(
            domain="local.pcfdev.io",
            ip="192.168.11.11",
            services="redis,rabbitmq",
            registries=["docker.example:5000"],
        )

        assert json.loads(opts.to_json()) == {
            "domain": "local.pcfdev.io",
            "ip": "192.168.11.11",
            "services": "redis,rabbitmq",
            "registries": ["docker.example:5000"],
        }

    def test_parsed_from_guest_file(self):
        opts = ProvisionOptions.model_validate_json('{"domain":"local.pcfdev.io","ip":"192.168.11.11"}')

        assert opts.services == ""
        assert opts.registries == []
