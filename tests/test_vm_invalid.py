"""Tests for the Invalid variant."""
import pytest

from pcfdev.errors import InvalidStateError
from pcfdev.models import StartOpts, VMConfig
from pcfdev.vm import Invalid


@pytest.fixture
def invalid(mock_orchestrator, config):
    return Invalid(VMConfig(name="pcfdev-default"), mock_orchestrator, config, reason="no IP")


class TestInvalid:
    @pytest.mark.parametrize("op,args", [
        ("start", (StartOpts(),)),
        ("stop", ()),
        ("suspend", ()),
        ("resume", ()),
        ("destroy", ()),
        ("provision", ()),
        ("verify_start_opts", (StartOpts(),)),
    ])
    def test_every_operation_refuses(self, invalid, mock_orchestrator, op, args):
        with pytest.raises(InvalidStateError, match="PCF Dev is in an invalid state") as exc:
            getattr(invalid, op)(*args)

        assert exc.value.reason == "no IP"
        assert mock_orchestrator.method_calls == []

    def test_status_returns_guidance(self, invalid):
        assert invalid.status() == "PCF Dev is in an invalid state. Please run 'pcfdev destroy'"

    def test_reason_is_optional(self, mock_orchestrator, config):
        invalid = Invalid(VMConfig(name="pcfdev-default"), mock_orchestrator, config)

        with pytest.raises(InvalidStateError) as exc:
            invalid.stop()

        assert exc.value.reason is None
