"""
Unit tests for the SQL fingerprint normalizer.
"""

import pytest

from sql_tracker.normalizer import (
    NORMALIZATION_RULES,
    PLACEHOLDER,
    clean_sql_query,
    fingerprint,
)

pytestmark = pytest.mark.unit


def squish(text: str) -> str:
    return " ".join(text.split())


class TestCleanSqlQuery:
    def test_clean_values_from_where_in_clause(self):
        query = """
            SELECT * FROM a
            WHERE a.id IN (
              SELECT b.id FROM b WHERE b.id IN (1,2,3,4)
              AND b.uid IN ('aaaa', 'bbbb')
            ) AND a.xid IN (11, 22, 33)
        """
        expected = squish(
            """
            SELECT * FROM a
            WHERE a.id IN (
              SELECT b.id FROM b WHERE b.id IN (???)
              AND b.uid IN (???)
            ) AND a.xid IN (???)
            """
        )
        assert clean_sql_query(query) == expected

    def test_clean_values_from_comparison_operators(self):
        query = """
            SELECT * FROM a
            WHERE a.id = 1 AND a.uid != 'bbb'
            (a.num > 1 AND a.num < 3) AND
            (start_date >= '2010-01-01' AND end_date <= '2010-10-01') AND
            a.total BETWEEN 0 AND 100 LIMIT 25 OFFSET 0
        """
        expected = squish(
            """
            SELECT * FROM a
            WHERE a.id = ??? AND a.uid != ???
            (a.num > ??? AND a.num < ???) AND
            (start_date >= ??? AND end_date <= ???) AND
            a.total BETWEEN ??? AND ??? LIMIT ??? OFFSET ???
            """
        )
        assert clean_sql_query(query) == expected

    def test_clean_floating_numbers(self):
        query = """
            SELECT * FROM a
            WHERE (a.lat BETWEEN 12.4567 AND 38.0678) AND
            (a.lng BETWEEN -70.487 AND -87.790)
        """
        expected = squish(
            """
            SELECT * FROM a
            WHERE (a.lat BETWEEN ??? AND ???) AND
            (a.lng BETWEEN ??? AND ???)
            """
        )
        assert clean_sql_query(query) == expected

    def test_clean_sql_query_is_case_insensitive(self):
        query = """
            SELECT * FROM a
            where a.id = 1 AND a.uid != 'bbb'
            (a.num > 1 AND a.num < 3) AND
            (start_date >= '2010-01-01' AND end_date <= '2010-10-01') AND
            a.total between 0 and 100
        """
        expected = squish(
            """
            SELECT * FROM a
            where a.id = ??? AND a.uid != ???
            (a.num > ??? AND a.num < ???) AND
            (start_date >= ??? AND end_date <= ???) AND
            a.total between ??? and ???
            """
        )
        assert clean_sql_query(query) == expected

    def test_clean_values(self):
        query = """
            INSERT INTO users VALUES
            (nextval('id_seq'), 'a', 105, DEFAULT),
            (nextval('id_seq'), 'b', 9100, DEFAULT);
        """
        expected = (
            "INSERT INTO users VALUES (nextval(???), ???, ???, DEFAULT), "
            "(nextval(???), ???, ???, DEFAULT);"
        )
        assert clean_sql_query(query) == expected

    def test_clean_pattern_matching(self):
        query = """
            SELECT users.* FROM users
            WHERE users.name LIKE '%test%' AND NOT SIMILAR TO '%test ppp'
        """
        expected = (
            "SELECT users.* FROM users "
            "WHERE users.name LIKE ??? AND NOT SIMILAR TO ???"
        )
        assert clean_sql_query(query) == expected

    def test_ilike_operand(self):
        assert (
            clean_sql_query("SELECT * FROM u WHERE name ILIKE '%bob%'")
            == "SELECT * FROM u WHERE name ILIKE ???"
        )

    def test_parameter_markers(self):
        query = 'SELECT "t"."id" FROM "t" WHERE "t"."id" IN (%s, %s, %s) AND "t"."name" = %(name)s LIMIT %s'
        assert clean_sql_query(query) == (
            'SELECT "t"."id" FROM "t" WHERE "t"."id" IN (???) AND "t"."name" = ??? LIMIT ???'
        )

    def test_numbered_parameter_markers(self):
        assert (
            clean_sql_query("SELECT * FROM t WHERE a = $1 AND b IN ($2, $3)")
            == "SELECT * FROM t WHERE a = ??? AND b IN (???)"
        )

    def test_function_arguments_keep_identifiers_and_keywords(self):
        assert (
            clean_sql_query("SELECT COALESCE(a.x, 0), b FROM a WHERE c IN (1, NULL)")
            == "SELECT COALESCE(a.x, ???), b FROM a WHERE c IN (???, NULL)"
        )

    def test_json_arrows_are_not_comparisons(self):
        query = "SELECT data->'key', data->>'other' FROM t"
        assert clean_sql_query(query) == query

    def test_strings_outside_operand_positions_are_left_whole(self):
        query = "SELECT 'a,5,b' AS x FROM t"
        assert clean_sql_query(query) == query

    def test_escaped_quotes(self):
        assert (
            clean_sql_query("SELECT * FROM t WHERE name = 'O''Brien'")
            == "SELECT * FROM t WHERE name = ???"
        )

    def test_string_ending_in_backslash(self):
        assert (
            clean_sql_query("SELECT * FROM files WHERE path = 'C:\\'")
            == "SELECT * FROM files WHERE path = ???"
        )

    def test_parentheses_inside_strings_keep_arguments(self):
        assert (
            clean_sql_query("SELECT concat('(', name, ')') FROM users")
            == "SELECT concat(???, name, ???) FROM users"
        )
        assert fingerprint("SELECT concat('(', name, ')') FROM users") != fingerprint(
            "SELECT concat('(', email, ')') FROM users"
        )

    def test_operators_inside_strings_are_left_alone(self):
        assert clean_sql_query("SELECT 'a = 1' AS x FROM t") == "SELECT 'a = 1' AS x FROM t"
        query = "SELECT '(' AS open_paren, status = 'active' AS is_active, ')' AS close_paren FROM t"
        assert clean_sql_query(query) == (
            "SELECT '(' AS open_paren, status = ??? AS is_active, ')' AS close_paren FROM t"
        )

    def test_identifiers_with_digits_are_not_numbers(self):
        assert (
            clean_sql_query("SELECT * FROM t1 WHERE t1.col2 = 3")
            == "SELECT * FROM t1 WHERE t1.col2 = ???"
        )

    def test_none_and_blank(self):
        assert clean_sql_query(None) == ""
        assert clean_sql_query(" \n\t ") == ""

    @pytest.mark.parametrize(
        "query",
        [
            "SELECT * FROM a WHERE a.id IN (1,2,3) AND a.b = 'x'",
            "INSERT INTO users VALUES (nextval('id_seq'), 'a', 105, DEFAULT)",
            "SELECT * FROM a WHERE a.lng BETWEEN -70.487 AND -87.790 LIMIT 5 OFFSET 10",
            "SELECT * FROM users WHERE name LIKE '%test%'",
            "SELECT * FROM t WHERE id IN (%s, %s) AND x >= %s",
            "SELECT '(' AS open_paren, status = 'active' AS is_active, ')' AS close_paren FROM t",
            "SELECT concat('(', name, ')') FROM users",
            "SELECT 'a = 1' AS x, y FROM t WHERE z = 2",
            "SELECT * FROM files WHERE path = 'C:\\'",
        ],
    )
    def test_idempotent(self, query):
        cleaned = clean_sql_query(query)
        assert clean_sql_query(cleaned) == cleaned
        assert PLACEHOLDER in cleaned


def test_fingerprint_folds_case():
    assert fingerprint("SELECT * FROM users") == fingerprint("select  *\nfrom Users")


def test_rules_are_ordered_and_named():
    names = [rule.name for rule in NORMALIZATION_RULES]
    assert names[0] == "collapse_whitespace"
    assert names.index("literal_lists") < names.index("list_elements")
    assert len(names) == len(set(names))


def test_single_rule_can_be_applied_alone():
    rule = next(r for r in NORMALIZATION_RULES if r.name == "between_operands")
    assert rule.apply("x between 1 and 2") == "x between ??? and ???"
