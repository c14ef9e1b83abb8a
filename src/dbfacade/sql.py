"""
SQL placeholder handling.

Statements are written with positional `?` or `%s` markers. Before a statement
reaches the driver its markers are rewritten to the driver's DB-API
`paramstyle`:

    SQL → Tokenize → Rewrite placeholders (skip literals and comments) → SQL

Main entry point:
- `standardize_placeholders(sql, paramstyle)` - Rewrite markers for a driver
"""
import re
from dataclasses import dataclass
from enum import Enum, auto

__all__ = [
    'standardize_placeholders',
    'tokenize_sql',
]


class TokenType(Enum):
    """Token types identified during SQL parsing."""
    SQL_TEXT = auto()
    STRING_LITERAL = auto()
    COMMENT = auto()            # -- line or /* block */
    POSITIONAL_PH = auto()      # %s or ?
    ESCAPED_PERCENT = auto()    # %%


@dataclass(slots=True)
class Token:
    """Token from SQL parsing."""
    type: TokenType
    text: str


# Comments and string literals are matched before markers so markers (and
# quotes) inside them are left alone
_TOKENIZE = re.compile(r"""
    (?P<comment>--[^\n]*|/\*[\s\S]*?\*/)
    |(?P<string>'(?:[^']|'')*'|"(?:[^"]|"")*")
    |(?P<escaped>%%)
    |(?P<percent_s>%s)
    |(?P<qmark>\?)
""", re.VERBOSE)

_UNESCAPED_PERCENT = re.compile(r'(?<!%)%(?!%)')

_PLACEHOLDER_STYLES = {
    'qmark': '?',
    'format': '%s',
    'pyformat': '%s',
    }


def tokenize_sql(sql: str) -> list[Token]:
    """Parse SQL into tokens in a single pass.

    Parameters
        sql: SQL query string

    Returns
        List of tokens preserving all SQL text
    """
    tokens = []
    last_end = 0

    for match in _TOKENIZE.finditer(sql):
        start, end = match.span()
        if start > last_end:
            tokens.append(Token(TokenType.SQL_TEXT, sql[last_end:start]))

        if match.group('comment'):
            ttype = TokenType.COMMENT
        elif match.group('string'):
            ttype = TokenType.STRING_LITERAL
        elif match.group('escaped'):
            ttype = TokenType.ESCAPED_PERCENT
        else:
            ttype = TokenType.POSITIONAL_PH

        tokens.append(Token(ttype, match.group(0)))
        last_end = end

    if last_end < len(sql):
        tokens.append(Token(TokenType.SQL_TEXT, sql[last_end:]))

    return tokens


def _escape_percent(text: str) -> str:
    """Double unescaped percent signs."""
    return _UNESCAPED_PERCENT.sub('%%', text)


def standardize_placeholders(sql: str, paramstyle: str = 'qmark') -> str:
    """Convert positional markers (`?` / `%s`) to the driver's paramstyle.

    For `format` and `pyformat` drivers, bare percent signs are doubled since
    the driver treats `%` as a marker prefix; this includes literals and
    comments. For `qmark` drivers an already doubled `%%` outside literals is
    collapsed back to `%`.

    Only statements executed with parameters are standardized. SQL without
    parameters goes to the driver verbatim, so `%%` in such a statement is
    not collapsed.

    Parameters
        sql: SQL query string
        paramstyle: DB-API paramstyle of the target driver

    Returns
        SQL with standardized placeholders

    Raises
        ValueError: If the paramstyle has no positional form
    """
    if not sql:
        return sql

    if paramstyle not in _PLACEHOLDER_STYLES:
        raise ValueError(f'Unsupported paramstyle: {paramstyle}')

    marker = _PLACEHOLDER_STYLES[paramstyle]
    escape_percent = marker == '%s'

    result = []
    for token in tokenize_sql(sql):
        if token.type == TokenType.POSITIONAL_PH:
            result.append(marker)
        elif escape_percent and token.type != TokenType.ESCAPED_PERCENT:
            result.append(_escape_percent(token.text))
        elif token.type == TokenType.ESCAPED_PERCENT and not escape_percent:
            result.append('%')
        else:
            result.append(token.text)
    return ''.join(result)
