"""Unit tests for the SELECT compiler."""

import pytest

from querycraft.common.exceptions import ErrorCode, QueryCraftError
from querycraft.constants.sql import CompileMode
from querycraft.operations import OrderByItem, QueryConfig, RawExpression
from querycraft.query_builder import QueryCompiler


@pytest.fixture
def compiler():
    return QueryCompiler()


@pytest.fixture
def users_config():
    return QueryConfig(
        table="users",
        fields={"id": "id", "name": "full_name"},
        where=["name LIKE ?"],
        where_in={"status": ["active", "pending"]},
    )


class TestRowMode:
    """Row-mode SELECT generation."""

    def test_basic_select_with_alias_and_in_list(self, compiler, users_config):
        compiled = compiler.compile(users_config)

        assert compiled.sql == (
            "SELECT `id` AS `id`, `full_name` AS `name` FROM `users` "
            "WHERE full_name LIKE ? AND `status` IN (?, ?) ORDER BY `id` ASC"
        )
        assert compiled.additional_values == ["active", "pending"]

    def test_caller_values_bind_before_in_list_values(self, compiler, users_config):
        compiled = compiler.compile(users_config)

        assert compiled.bind(["%ada%"]) == ["%ada%", "active", "pending"]

    def test_compilation_is_deterministic(self, compiler, users_config):
        first = compiler.compile(users_config)
        second = compiler.compile(users_config)

        assert first.sql == second.sql
        assert first.additional_values == second.additional_values

    def test_compilation_does_not_mutate_config(self, compiler, users_config):
        before = users_config.model_dump()

        compiler.compile(users_config)
        compiler.compile(users_config, CompileMode.COUNT)

        assert users_config.model_dump() == before

    def test_empty_in_list_adds_no_clause(self, compiler):
        config = QueryConfig(
            table="users",
            fields={"id": "id"},
            where_in={"status": []},
            where_not_in={"role": []},
        )

        compiled = compiler.compile(config)

        assert "WHERE" not in compiled.sql
        assert compiled.additional_values == []

    def test_not_in_follows_in(self, compiler):
        config = QueryConfig(
            table="users",
            fields={"id": "id"},
            where_in={"status": ["active"]},
            where_not_in={"role": ["guest", "bot"]},
        )

        compiled = compiler.compile(config)

        assert "WHERE `status` IN (?) AND `role` NOT IN (?, ?)" in compiled.sql
        assert compiled.additional_values == ["active", "guest", "bot"]

    def test_in_list_key_resolves_alias(self, compiler):
        config = QueryConfig(
            table="users",
            fields={"id": "id", "state": "u.status"},
            where_in={"state": ["active"]},
        )

        compiled = compiler.compile(config)

        assert "WHERE `u`.`status` IN (?)" in compiled.sql

    def test_table_list_becomes_comma_from(self, compiler):
        config = QueryConfig(table=["users", "roles"], fields={"id": "users.id"})

        compiled = compiler.compile(config)

        assert compiled.sql.startswith("SELECT `users`.`id` AS `id` FROM `users`, `roles`")

    def test_expression_fields_are_emitted_verbatim(self, compiler):
        config = QueryConfig(
            table="users",
            fields={"id": "id", "name": "CONCAT(first_name, ' ', last_name)"},
        )

        compiled = compiler.compile(config)

        assert "CONCAT(first_name, ' ', last_name) AS `name`" in compiled.sql

    def test_double_quoted_literal_field_is_emitted_verbatim(self, compiler):
        config = QueryConfig(table="users", fields={"id": "id", "label": '"member"'})

        compiled = compiler.compile(config)

        assert '"member" AS `label`' in compiled.sql

    def test_raw_expression_field(self, compiler):
        config = QueryConfig(
            table="orders",
            fields={"total": RawExpression(raw="SUM(amount)"), "n": {"raw": "COUNT(*)"}},
        )

        compiled = compiler.compile(config)

        assert compiled.sql.startswith("SELECT SUM(amount) AS `total`, COUNT(*) AS `n` FROM `orders`")

    def test_joins(self, compiler):
        config = QueryConfig(
            table="users",
            fields={"id": "users.id"},
            joins=[
                {"type": "left", "table": "orders", "on": "orders.user_id = users.id"},
                {"table": "roles", "on": "roles.id = users.role_id"},
            ],
        )

        compiled = compiler.compile(config)

        assert (
            "FROM `users` LEFT JOIN `orders` ON orders.user_id = users.id "
            "INNER JOIN `roles` ON roles.id = users.role_id"
        ) in compiled.sql

    def test_distinct(self, compiler):
        config = QueryConfig(table="users", fields={"id": "id"}, distinct=True)

        compiled = compiler.compile(config)

        assert compiled.sql == "SELECT DISTINCT `id` AS `id` FROM `users` ORDER BY `id` ASC"

    def test_limit_and_offset_are_sanitized(self, compiler):
        config = QueryConfig(table="users", fields={"id": "id"}, limit=10.7, offset=-20.2)

        compiled = compiler.compile(config)

        assert compiled.sql.endswith("ORDER BY `id` ASC LIMIT 10 OFFSET 20")

    def test_non_finite_limit_is_rejected(self):
        with pytest.raises(ValueError):
            QueryConfig(table="users", fields={"id": "id"}, limit=float("inf"))

    def test_assignment_is_validated(self, users_config):
        with pytest.raises(ValueError):
            users_config.limit = float("nan")


class TestSubqueriesAndUnion:
    """Nested configs and UNION branches."""

    def test_subquery_values_come_before_parent_where_values(self, compiler):
        config = QueryConfig(
            table="users",
            fields={
                "id": "u.id",
                "order_count": QueryConfig(
                    table="orders",
                    fields={"c": RawExpression(raw="COUNT(*)")},
                    where=["orders.user_id = u.id"],
                    where_in={"status": ["paid"]},
                ),
            },
            where_in={"role": ["admin"]},
        )

        compiled = compiler.compile(config)

        assert (
            "(SELECT COUNT(*) AS `c` FROM `orders` WHERE orders.user_id = u.id "
            "AND `status` IN (?) ORDER BY `id` ASC) AS `order_count`"
        ) in compiled.sql
        assert compiled.additional_values == ["paid", "admin"]

    def test_union_branch_values_follow_parent_values(self, compiler):
        config = QueryConfig(
            table="users",
            fields={"id": "id"},
            where_in={"id": [1]},
            union=[QueryConfig(table="archived_users", fields={"id": "id"}, where_in={"id": [5]})],
        )

        compiled = compiler.compile(config)

        assert compiled.sql == (
            "SELECT `id` AS `id` FROM `users` WHERE `id` IN (?) ORDER BY `id` ASC "
            "UNION SELECT `id` AS `id` FROM `archived_users` WHERE `id` IN (?) ORDER BY `id` ASC"
        )
        assert compiled.additional_values == [1, 5]


class TestCountMode:
    """COUNT query shape."""

    def test_count_query_shape(self, compiler, users_config):
        config = users_config.model_copy(update={"limit": 20, "offset": 40})

        compiled = compiler.compile(config, CompileMode.COUNT)

        assert compiled.sql == (
            "SELECT COUNT(`id`) AS count FROM `users` "
            "WHERE full_name LIKE ? AND `status` IN (?, ?) LIMIT 1"
        )
        assert "ORDER BY" not in compiled.sql
        assert "OFFSET" not in compiled.sql

    def test_count_accepts_mode_string(self, compiler, users_config):
        compiled = compiler.compile(users_config, "count")

        assert compiled.sql.startswith("SELECT COUNT(`id`) AS count")

    def test_distinct_count(self, compiler):
        config = QueryConfig(table="users", fields={"id": "id"}, distinct=True)

        compiled = compiler.compile(config, CompileMode.COUNT)

        assert compiled.sql == "SELECT COUNT(DISTINCT `id`) AS count FROM `users` LIMIT 1"

    def test_count_uses_id_field(self, compiler):
        config = QueryConfig(table="users", id_field="user_id", fields={"id": "user_id"})

        compiled = compiler.compile(config, CompileMode.COUNT)

        assert compiled.sql.startswith("SELECT COUNT(`user_id`) AS count")

    def test_count_skips_union(self, compiler):
        config = QueryConfig(
            table="users",
            fields={"id": "id"},
            union=[QueryConfig(table="archived_users", fields={"id": "id"}, where_in={"id": [5]})],
        )

        compiled = compiler.compile(config, CompileMode.COUNT)

        assert "UNION" not in compiled.sql
        assert compiled.additional_values == []


class TestGroupByHaving:
    """GROUP BY and HAVING."""

    def test_group_by_with_having(self, compiler):
        config = QueryConfig(
            table="orders",
            fields={"status": "status", "total": RawExpression(raw="COUNT(*)")},
            group_by="status",
            having=["COUNT(*) > ?"],
        )

        compiled = compiler.compile(config)

        assert compiled.sql == (
            "SELECT `status` AS `status`, COUNT(*) AS `total` FROM `orders` "
            "GROUP BY `status` HAVING COUNT(*) > ? ORDER BY `id` ASC"
        )

    def test_having_without_group_by_is_dropped(self, compiler):
        config = QueryConfig(table="orders", fields={"id": "id"}, having="COUNT(*) > 1")

        compiled = compiler.compile(config)

        assert "HAVING" not in compiled.sql

    def test_having_is_validated_without_group_by(self, compiler):
        config = QueryConfig(table="orders", fields={"id": "id"}, having="1 = 1; DROP TABLE orders")

        with pytest.raises(QueryCraftError) as exc_info:
            compiler.compile(config)

        assert exc_info.value.message == "Invalid HAVING clause: potentially dangerous pattern detected"


class TestOrderBy:
    """ORDER BY resolution and directions."""

    def test_default_order_is_id_ascending(self, compiler):
        config = QueryConfig(table="users", fields={"id": "id"})

        assert compiler.compile(config).sql.endswith("ORDER BY `id` ASC")

    def test_empty_order_list_falls_back_to_id(self, compiler):
        config = QueryConfig(table="t", fields={"id": "id"}, order_by=[])

        assert compiler.compile(config).sql == "SELECT `id` AS `id` FROM `t` ORDER BY `id` ASC"

    def test_multiple_inline_directions(self, compiler):
        config = QueryConfig(
            table="users",
            fields={"id": "id", "name": "full_name"},
            order_by=["name DESC", "id"],
        )

        assert compiler.compile(config).sql.endswith("ORDER BY `full_name` DESC, `id` ASC")

    def test_shared_direction_overrides_inline_direction(self, compiler):
        config = QueryConfig(
            table="users",
            fields={"id": "id", "name": "full_name"},
            order_by=["name DESC", "id"],
            order_direction="asc",
        )

        assert compiler.compile(config).sql.endswith("ORDER BY `full_name` ASC, `id` ASC")

    def test_single_string_with_shared_direction(self, compiler):
        config = QueryConfig(
            table="users",
            fields={"id": "id", "created": "created_at"},
            order_by="created",
            order_direction="DESC",
        )

        assert compiler.compile(config).sql.endswith("ORDER BY `created_at` DESC")

    def test_structured_items_keep_their_direction(self, compiler):
        config = QueryConfig(
            table="users",
            fields={"id": "id", "name": "full_name"},
            order_by=[OrderByItem(column="name", direction="desc"), {"column": "id"}],
            order_direction="ASC",
        )

        assert compiler.compile(config).sql.endswith("ORDER BY `full_name` DESC, `id` ASC")


class TestInjectionRejection:
    """Dangerous fragments never reach the compiled SQL."""

    @pytest.mark.parametrize(
        "fragment",
        [
            "1=1; DROP TABLE users",
            "id = 1 -- comment",
            "id = 1 /* x */",
            "id IN (SELECT id FROM admins UNION SELECT 1)",
            "SLEEP(5) = 0",
        ],
    )
    def test_where_fragment_rejected(self, compiler, fragment):
        config = QueryConfig(table="users", fields={"id": "id"}, where=[fragment])

        with pytest.raises(QueryCraftError) as exc_info:
            compiler.compile(config)

        assert exc_info.value.error_code == ErrorCode.DANGEROUS_PATTERN
        assert exc_info.value.message == "Invalid WHERE clause: potentially dangerous pattern detected"
        assert exc_info.value.is_validation_error

    def test_join_on_rejected(self, compiler):
        config = QueryConfig(
            table="users",
            fields={"id": "id"},
            joins=[{"table": "orders", "on": "orders.user_id = users.id; DELETE FROM users"}],
        )

        with pytest.raises(QueryCraftError) as exc_info:
            compiler.compile(config)

        assert exc_info.value.message.startswith("Invalid JOIN ON clause")

    def test_raw_field_rejected(self, compiler):
        config = QueryConfig(table="users", fields={"x": RawExpression(raw="BENCHMARK(1000000, MD5(1))")})

        with pytest.raises(QueryCraftError) as exc_info:
            compiler.compile(config)

        assert exc_info.value.message.startswith("Invalid raw field expression")

    def test_column_names_with_keywords_are_allowed(self, compiler):
        config = QueryConfig(
            table="users",
            fields={"id": "id"},
            where=["updated_at > ?", "deleted_flag = 0"],
        )

        compiled = compiler.compile(config)

        assert "WHERE updated_at > ? AND deleted_flag = 0" in compiled.sql


class TestCallerPlaceholderBinding:
    """Each ``?`` gets its value in textual order, in both compile modes."""

    def test_raw_field_placeholder_is_only_bound_in_row_mode(self, compiler):
        config = QueryConfig(
            table="users",
            fields={"id": "id", "is_adult": RawExpression(raw="IF(age >= ?, 1, 0)")},
            where=["name LIKE ?"],
        )

        row = compiler.compile(config)
        count = compiler.compile(config, CompileMode.COUNT)

        assert row.caller_placeholders == count.caller_placeholders == 2
        assert row.bind([18, "A%"]) == [18, "A%"]
        assert count.bind([18, "A%"]) == ["A%"]

    def test_correlated_subquery_placeholder(self, compiler):
        config = QueryConfig(
            table="users",
            fields={
                "id": "users.id",
                "paid_orders": QueryConfig(
                    table="orders",
                    fields={"c": RawExpression(raw="COUNT(*)")},
                    where=["orders.user_id = users.id", "orders.status = ?"],
                ),
            },
            where=["users.active = ?"],
        )

        assert compiler.compile(config).bind(["paid", 1]) == ["paid", 1]
        assert compiler.compile(config, CompileMode.COUNT).bind(["paid", 1]) == [1]

    def test_subquery_in_list_binds_before_parent_where(self, compiler):
        config = QueryConfig(
            table="users",
            fields={
                "id": "id",
                "n": QueryConfig(table="orders", fields={"c": RawExpression(raw="COUNT(*)")}, where_in={"status": ["paid"]}),
            },
            where=["id = ?"],
        )

        row = compiler.compile(config)
        count = compiler.compile(config, CompileMode.COUNT)

        assert row.bind([5]) == ["paid", 5]
        assert count.sql == "SELECT COUNT(`id`) AS count FROM `users` WHERE id = ? LIMIT 1"
        assert count.bind([5]) == [5]

    def test_union_branch_placeholder_is_dropped_from_count(self, compiler):
        config = QueryConfig(
            table="users",
            fields={"id": "id"},
            where=["id < ?"],
            union=[QueryConfig(table="archived_users", fields={"id": "id"}, where=["id > ?"])],
        )

        assert compiler.compile(config).bind([100, 10]) == [100, 10]
        assert compiler.compile(config, CompileMode.COUNT).bind([100, 10]) == [100]

    def test_having_placeholder_follows_in_list_values(self, compiler):
        config = QueryConfig(
            table="orders",
            fields={"status": "status", "n": RawExpression(raw="COUNT(*)")},
            where_in={"status": ["paid", "shipped"]},
            group_by="status",
            having=["COUNT(*) > ?"],
        )

        assert compiler.compile(config).bind([3]) == ["paid", "shipped", 3]

    def test_quoted_question_mark_is_not_a_placeholder(self, compiler):
        config = QueryConfig(
            table="faq",
            fields={"id": "id", "kind": RawExpression(raw="IF(title LIKE '%?', 'question', `why?`)")},
        )

        compiled = compiler.compile(config)

        assert compiled.caller_placeholders == 0
        assert compiled.bind() == []

    def test_wrong_number_of_caller_values_is_rejected(self, compiler, users_config):
        compiled = compiler.compile(users_config)

        with pytest.raises(QueryCraftError) as exc_info:
            compiled.bind([])

        assert exc_info.value.error_code == ErrorCode.PLACEHOLDER_MISMATCH
