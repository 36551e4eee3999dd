"""Unit tests for CREATE TABLE generation."""

import pytest

from querycraft.common.exceptions import ErrorCode, QueryCraftError
from querycraft.operations import CreateTableConfig
from querycraft.query_builder import DDLCompiler


@pytest.fixture
def compiler():
    return DDLCompiler()


def _config(**overrides):
    base = {
        "table": "users",
        "columns": [
            {"name": "id", "type": "INT", "options": {"unsigned": True, "auto_increment": True, "nullable": False}},
        ],
        "primary_key": "id",
    }
    base.update(overrides)
    return CreateTableConfig(**base)


class TestColumns:
    """Column definition assembly."""

    def test_minimal_table(self, compiler):
        statements = compiler.compile(_config())

        assert statements == [
            "CREATE TABLE `users` (`id` INT UNSIGNED NOT NULL AUTO_INCREMENT, PRIMARY KEY (`id`)) "
            "ENGINE=InnoDB DEFAULT CHARACTER SET utf8mb4"
        ]

    def test_text_column_with_charset_and_collation(self, compiler):
        config = _config(columns=[
            {
                "name": "email",
                "type": "varchar",
                "options": {
                    "length": 255,
                    "nullable": False,
                    "charset": "utf8mb4",
                    "collate": "utf8mb4_unicode_ci",
                    "comment": "login e-mail",
                },
            },
        ], primary_key="email")

        create = compiler.compile(config)[0]

        assert (
            "`email` VARCHAR(255) CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci "
            "NOT NULL COMMENT 'login e-mail'"
        ) in create

    def test_charset_ignored_for_numeric_types(self, compiler):
        config = _config(columns=[{"name": "id", "type": "int", "options": {"charset": "latin1"}}])

        assert "CHARACTER SET latin1" not in compiler.compile(config)[0]

    def test_enum_values_are_escaped(self, compiler):
        config = _config(columns=[
            {"name": "id", "type": "int"},
            {"name": "status", "type": "enum", "options": {"enum": ["active", "it's"], "default": "active"}},
        ])

        create = compiler.compile(config)[0]

        assert "`status` ENUM('active', 'it\\'s') NULL DEFAULT 'active'" in create

    def test_enum_requires_values(self):
        with pytest.raises(ValueError):
            _config(columns=[{"name": "status", "type": "enum"}])

    def test_decimal_precision_and_scale(self, compiler):
        config = _config(columns=[{"name": "price", "type": "decimal", "options": {"length": "10, 2"}}])

        assert "`price` DECIMAL(10,2) NULL" in compiler.compile(config)[0]

    def test_timestamp_defaults_and_on_update(self, compiler):
        config = _config(columns=[
            {"name": "id", "type": "int"},
            {
                "name": "updated_at",
                "type": "timestamp",
                "options": {"default": "CURRENT_TIMESTAMP", "on_update": "current_timestamp"},
            },
        ])

        create = compiler.compile(config)[0]

        assert "`updated_at` TIMESTAMP NULL DEFAULT CURRENT_TIMESTAMP ON UPDATE CURRENT_TIMESTAMP" in create

    def test_unsupported_on_update_is_ignored(self, compiler):
        config = _config(columns=[{"name": "v", "type": "int", "options": {"on_update": "NOW() + 1"}}])

        assert "ON UPDATE" not in compiler.compile(config)[0]

    @pytest.mark.parametrize(
        "default, expected",
        [
            (True, "DEFAULT TRUE"),
            (False, "DEFAULT FALSE"),
            (0, "DEFAULT 0"),
            (None, "DEFAULT NULL"),
            ("n/a", "DEFAULT 'n/a'"),
        ],
    )
    def test_default_literals(self, compiler, default, expected):
        config = _config(columns=[{"name": "flag", "type": "tinyint", "options": {"default": default}}])

        assert expected in compiler.compile(config)[0]

    def test_no_default_when_not_given(self, compiler):
        config = _config(columns=[{"name": "flag", "type": "tinyint"}])

        assert "DEFAULT" not in compiler.compile(config)[0].split(")")[0]

    def test_generated_column(self, compiler):
        config = _config(columns=[
            {"name": "id", "type": "int"},
            {
                "name": "full_name",
                "type": "varchar",
                "options": {
                    "length": 100,
                    "generated": {"expression": "CONCAT(first_name, ' ', last_name)", "type": "stored"},
                },
            },
        ])

        create = compiler.compile(config)[0]

        assert "`full_name` VARCHAR(100) GENERATED ALWAYS AS (CONCAT(first_name, ' ', last_name)) STORED NULL" in create

    def test_generated_expression_is_validated(self, compiler):
        config = _config(columns=[
            {"name": "x", "type": "int", "options": {"generated": {"expression": "1); DROP TABLE users; --"}}},
        ])

        with pytest.raises(QueryCraftError) as exc_info:
            compiler.compile(config)

        assert exc_info.value.error_code == ErrorCode.DANGEROUS_PATTERN


class TestTableParts:
    """Keys, indexes, constraints and table options."""

    def test_composite_primary_key(self, compiler):
        config = _config(
            columns=[{"name": "user_id", "type": "int"}, {"name": "role_id", "type": "int"}],
            primary_key=["user_id", "role_id"],
        )

        assert "PRIMARY KEY (`user_id`, `role_id`)" in compiler.compile(config)[0]

    def test_indexes(self, compiler):
        config = _config(indexes=[
            {"columns": ["email"], "type": "unique"},
            {"columns": ["last_name", "first_name"]},
            {"columns": ["bio"], "type": "FULLTEXT"},
        ])

        create = compiler.compile(config)[0]

        assert "UNIQUE KEY (`email`), INDEX (`last_name`, `first_name`), FULLTEXT INDEX (`bio`)" in create

    def test_foreign_key(self, compiler):
        config = _config(foreign_keys=[
            {"column": "org_id", "reference": "orgs(id)", "on_delete": "cascade", "on_update": "set null"},
        ])

        create = compiler.compile(config)[0]

        assert "FOREIGN KEY (`org_id`) REFERENCES orgs(id) ON DELETE CASCADE ON UPDATE SET NULL" in create

    @pytest.mark.parametrize("reference", ["orgs.id", "orgs(id); DROP TABLE users", "orgs (id)", "orgs()"])
    def test_malformed_foreign_key_reference_is_rejected(self, compiler, reference):
        config = _config(foreign_keys=[{"column": "org_id", "reference": reference}])

        with pytest.raises(QueryCraftError) as exc_info:
            compiler.compile(config)

        assert exc_info.value.message == "Invalid foreign key reference format"
        assert exc_info.value.error_code == ErrorCode.INVALID_IDENTIFIER

    def test_check_constraint(self, compiler):
        config = _config(checks=[{"name": "chk_age", "condition": "age >= 0"}])

        assert "CONSTRAINT `chk_age` CHECK (age >= 0)" in compiler.compile(config)[0]

    def test_table_options(self, compiler):
        config = _config(table_options={
            "engine": "MyISAM",
            "auto_increment": 1000,
            "row_format": "dynamic",
            "charset": "latin1",
            "collate": "latin1_swedish_ci",
            "comment": "legacy",
        })

        create = compiler.compile(config)[0]

        assert create.endswith(
            "ENGINE=MyISAM AUTO_INCREMENT=1000 ROW_FORMAT=DYNAMIC "
            "DEFAULT CHARACTER SET latin1 COLLATE latin1_swedish_ci COMMENT='legacy'"
        )

    @pytest.mark.parametrize("options", [{"engine": "InnoDB; DROP TABLE x"}, {"charset": "utf8 mb4"}])
    def test_unsafe_table_option_tokens_are_rejected(self, compiler, options):
        with pytest.raises(QueryCraftError) as exc_info:
            compiler.compile(_config(table_options=options))

        assert exc_info.value.error_code == ErrorCode.INVALID_IDENTIFIER

    def test_drop_if_exists_comes_first(self, compiler):
        statements = compiler.compile(_config(drop_if_exists=True))

        assert len(statements) == 2
        assert statements[0] == "DROP TABLE IF EXISTS `users`"
        assert statements[1].startswith("CREATE TABLE `users`")
