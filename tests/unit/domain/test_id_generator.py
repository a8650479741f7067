"""Unit tests for IdGenerator."""

from tenantgate.domain.services.id_generator import IdGenerator


class TestGeneration:
    def test_menu_id_prefix(self):
        assert IdGenerator.menu_id().startswith("MNU")

    def test_role_id_prefix(self):
        assert IdGenerator.role_id().startswith("ROL")

    def test_generated_ids_are_valid(self):
        for _ in range(20):
            assert IdGenerator.validate(IdGenerator.menu_id())
            assert IdGenerator.validate(IdGenerator.role_id())

    def test_generated_ids_are_unique(self):
        ids = {IdGenerator.role_id() for _ in range(500)}
        assert len(ids) == 500


class TestValidation:
    def test_rejects_lowercase_suffix(self):
        assert IdGenerator.validate("ROL1718000000a1b2c3d4") is False

    def test_rejects_missing_prefix(self):
        assert IdGenerator.validate("1718000000A1B2C3D4") is False

    def test_rejects_non_strings(self):
        assert IdGenerator.validate(None) is False
        assert IdGenerator.validate(123) is False

    def test_accepts_known_value(self):
        assert IdGenerator.validate("ROL1718000000A1B2C3D4") is True
