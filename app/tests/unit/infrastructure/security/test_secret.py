"""Unit tests for infrastructure.security.secret module.

Tests cover:
- Redacted representations (repr, str, format, f-strings)
- Explicit reveal and clone
- Wiping on wipe(), context manager exit and error paths
- Serialization and implicit copy guards
"""

import copy
import json
import pickle

import pytest

from infrastructure.security import REDACTION_MARKER, Secret, SecretSerializationError


@pytest.mark.unit
class TestSecretRepresentation:
    """Secret never shows its value through default formatting."""

    @pytest.mark.parametrize(
        "value",
        ["sk-abc123", "x", "REDACTED", "[REDACTED]", "a" * 300, "ключ-🔑"],
    )
    def test_repr_and_str_hide_value(self, value):
        secret = Secret(value)

        for rendered in (repr(secret), str(secret), f"{secret}", "{}".format(secret)):
            assert REDACTION_MARKER in rendered
            if value != REDACTION_MARKER:
                assert value not in rendered.replace(REDACTION_MARKER, "")

    def test_repr_format(self):
        assert repr(Secret("sk-abc")) == f"Secret({REDACTION_MARKER})"
        assert str(Secret("sk-abc")) == REDACTION_MARKER

    def test_len_is_safe(self):
        assert len(Secret("sk-abc123")) == 9

    def test_bool_reflects_content(self):
        assert Secret("abc")
        assert not Secret("")

    def test_in_container_repr(self):
        rendered = repr({"openai": Secret("sk-verysecret")})
        assert "sk-verysecret" not in rendered


@pytest.mark.unit
class TestSecretAccess:
    def test_reveal_returns_value(self):
        assert Secret("sk-abc123").reveal() == "sk-abc123"

    def test_clone_is_independent(self):
        original = Secret("sk-abc123")
        cloned = original.clone()

        original.wipe()

        assert cloned.reveal() == "sk-abc123"
        assert cloned is not original

    def test_equality_compares_values(self):
        assert Secret("same") == Secret("same")
        assert Secret("same") != Secret("other")

    def test_not_equal_to_plain_string(self):
        assert Secret("same") != "same"

    def test_unhashable(self):
        with pytest.raises(TypeError):
            hash(Secret("value"))

    def test_rejects_non_string(self):
        with pytest.raises(TypeError):
            Secret(b"bytes")  # type: ignore[arg-type]


@pytest.mark.unit
class TestSecretWipe:
    def test_wipe_zeroes_buffer(self):
        secret = Secret("sk-abc123")

        secret.wipe()

        assert secret.wiped
        assert all(byte == 0 for byte in secret._buffer)
        assert not secret

    def test_reveal_after_wipe_raises(self):
        secret = Secret("sk-abc123")
        secret.wipe()

        with pytest.raises(ValueError):
            secret.reveal()

    def test_wipe_is_idempotent(self):
        secret = Secret("sk-abc123")
        secret.wipe()
        secret.wipe()
        assert secret.wiped

    def test_context_manager_wipes_on_exit(self):
        with Secret("sk-abc123") as secret:
            assert secret.reveal() == "sk-abc123"
        assert secret.wiped

    def test_context_manager_wipes_on_error(self):
        holder = {}
        with pytest.raises(RuntimeError):
            with Secret("sk-abc123") as secret:
                holder["secret"] = secret
                raise RuntimeError("boom")
        assert holder["secret"].wiped


@pytest.mark.unit
class TestSecretSerializationGuards:
    def test_pickle_fails(self):
        with pytest.raises(SecretSerializationError):
            pickle.dumps(Secret("sk-abc123"))

    def test_json_fails(self):
        with pytest.raises(TypeError):
            json.dumps({"key": Secret("sk-abc123")})

    def test_copy_fails(self):
        with pytest.raises(TypeError, match="clone"):
            copy.copy(Secret("sk-abc123"))

    def test_deepcopy_fails(self):
        with pytest.raises(TypeError, match="clone"):
            copy.deepcopy({"key": Secret("sk-abc123")})

    def test_serialization_error_is_type_error(self):
        assert issubclass(SecretSerializationError, TypeError)
