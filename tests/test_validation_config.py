"""Tests for dependent-field validation configs."""

import logging

from syncstate import ValidationConfigBuilder, create_validation_config
from syncstate.validation import dependents_of


class TestValidationConfigBuilder:
    """Building trigger -> dependents maps"""

    def test_when_changed(self):
        config = (ValidationConfigBuilder()
                  .when_changed("country", ["state", "zip_code"])
                  .when_changed("password", "confirm_password")
                  .build())

        assert config == {"country": ["state", "zip_code"], "password": ["confirm_password"]}

    def test_duplicates_are_removed_with_warning(self, caplog):
        builder = ValidationConfigBuilder().when_changed("country", "state")
        with caplog.at_level(logging.WARNING):
            builder.when_changed("country", ["state", "zip_code"])

        assert builder.build() == {"country": ["state", "zip_code"]}
        assert "Duplicate dependents" in caplog.text

    def test_bidirectional(self):
        config = ValidationConfigBuilder().bidirectional("password", "confirm_password").build()
        assert config == {"password": ["confirm_password"], "confirm_password": ["password"]}

    def test_group(self):
        config = ValidationConfigBuilder().group(["start", "end", "duration"]).build()
        assert config["start"] == ["end", "duration"]
        assert config["duration"] == ["start", "end"]

    def test_merge_and_build_copy(self):
        builder = create_validation_config({"a": ["b"]}).merge({"a": ["b", "c"], "d": []})
        config = builder.build()
        config["a"].append("mutated")

        assert builder.build() == {"a": ["b", "c"]}

    def test_dependents_of(self):
        config = {"a": ["a", "b"]}
        assert dependents_of(config, "a") == ["b"]
        assert dependents_of(config, "x") == []
        assert dependents_of(None, "a") == []
