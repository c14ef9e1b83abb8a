"""Unit tests for SQL placeholder processing.

Tests the public API:
- standardize_placeholders(sql, paramstyle) - Convert ? / %s for a driver
"""
import pytest
from dbfacade.sql import standardize_placeholders


class TestStandardizePlaceholders:
    """Test marker conversion between driver paramstyles."""

    @pytest.mark.parametrize(('sql', 'paramstyle', 'expected'), [
        ('SELECT * FROM user WHERE id = ? AND name = ?', 'qmark',
         'SELECT * FROM user WHERE id = ? AND name = ?'),
        ('SELECT * FROM user WHERE id = %s AND name = %s', 'qmark',
         'SELECT * FROM user WHERE id = ? AND name = ?'),
        ('SELECT * FROM user WHERE id = ? AND name = ?', 'pyformat',
         'SELECT * FROM user WHERE id = %s AND name = %s'),
        ('SELECT * FROM user WHERE id = ? AND name = %s', 'format',
         'SELECT * FROM user WHERE id = %s AND name = %s'),
    ], ids=['qmark_passthrough', 'percent_to_qmark', 'qmark_to_pyformat', 'mixed_to_format'])
    def test_marker_conversion(self, sql, paramstyle, expected):
        assert standardize_placeholders(sql, paramstyle) == expected

    def test_markers_in_literals_untouched(self):
        """Question marks and %s inside string literals are data, not markers"""
        sql = "SELECT '?' AS q, 'a%sb' AS p FROM user WHERE id = ?"
        assert standardize_placeholders(sql, 'qmark') == sql

    def test_percent_in_literal_escaped_for_format(self):
        sql = "SELECT * FROM user WHERE name LIKE 'X%' AND id = ?"
        result = standardize_placeholders(sql, 'pyformat')
        assert result == "SELECT * FROM user WHERE name LIKE 'X%%' AND id = %s"

    def test_modulo_operator_escaped_for_format(self):
        sql = 'SELECT id % 2 FROM user WHERE id > ?'
        result = standardize_placeholders(sql, 'format')
        assert result == 'SELECT id %% 2 FROM user WHERE id > %s'

    def test_already_escaped_percent_kept_for_format(self):
        sql = "SELECT * FROM user WHERE name LIKE 'X%%' AND id = ?"
        result = standardize_placeholders(sql, 'pyformat')
        assert result == "SELECT * FROM user WHERE name LIKE 'X%%' AND id = %s"

    def test_escaped_percent_collapsed_for_qmark(self):
        sql = 'SELECT id %% 2 FROM user WHERE id > %s'
        assert standardize_placeholders(sql, 'qmark') == 'SELECT id % 2 FROM user WHERE id > ?'

    def test_apostrophe_in_line_comment(self):
        sql = "SELECT value FROM t -- Bob's value\nWHERE name = %s AND 'a' = 'a'"
        expected = "SELECT value FROM t -- Bob's value\nWHERE name = ? AND 'a' = 'a'"
        assert standardize_placeholders(sql, 'qmark') == expected

    def test_apostrophe_in_block_comment(self):
        sql = "SELECT value /* Bob's\nvalue? */ FROM t WHERE name = ?"
        expected = "SELECT value /* Bob's\nvalue? */ FROM t WHERE name = %s"
        assert standardize_placeholders(sql, 'pyformat') == expected

    def test_percent_in_comment_escaped_for_format(self):
        sql = 'SELECT value FROM t -- 10% off\nWHERE id = ?'
        assert standardize_placeholders(sql, 'format') == 'SELECT value FROM t -- 10%% off\nWHERE id = %s'

    def test_unsupported_paramstyle(self):
        with pytest.raises(ValueError, match='Unsupported paramstyle'):
            standardize_placeholders('SELECT ?', 'named')

    def test_empty_sql(self):
        assert standardize_placeholders('', 'pyformat') == ''


if __name__ == '__main__':
    __import__('pytest').main([__file__])
