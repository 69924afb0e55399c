"""SQL parser for the restricted minidb dialect.

Statement text is tokenized with a sqlglot tokenizer and then parsed by
a small recursive-descent parser into a tagged statement. The parser
accepts exactly five shapes and nothing more:

    CREATE TABLE name (col type [PRIMARY KEY | UNIQUE], ...)
    INSERT INTO name VALUES (value, ...)
    SELECT * | ref, ... FROM name [[INNER] JOIN name2 ON ref = ref] [WHERE ref = value]
    UPDATE name SET col = value, ... WHERE ref = value
    DELETE FROM name [WHERE ref = value]

A WHERE clause is a single equality; boolean combinators and other
comparison operators are rejected rather than approximated.

Literal grammar (per value position):
    - single-quoted text (``''`` or ``\\'`` escape a quote)
    - optionally negative numeric literal
    - ``NULL`` in any case
    - otherwise the raw source text of the value (``Ann Lee``, ``a@b.com``)

References:
    - sqlglot tokenizer: https://sqlglot.com/sqlglot/tokens.html
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum

from sqlglot.errors import TokenError
from sqlglot.tokens import Tokenizer, TokenType

from minidb.domain.errors import ParseError
from minidb.domain.value_objects import Column, ColumnType, Value, WhereClause


class StatementType(Enum):
    """Kinds of statements in the dialect."""

    CREATE_TABLE = "create_table"
    INSERT = "insert"
    SELECT = "select"
    UPDATE = "update"
    DELETE = "delete"


def _render_value(value: Value) -> str:
    if isinstance(value, str):
        return "'" + value.replace("'", "''") + "'"
    if value is None:
        return "NULL"
    return str(value)


@dataclass
class Statement(ABC):
    """Base class for parsed statements."""

    table_name: str

    @property
    @abstractmethod
    def statement_type(self) -> StatementType:
        pass

    @abstractmethod
    def __str__(self) -> str:
        pass


@dataclass
class CreateTableStatement(Statement):
    """CREATE TABLE name(coldefs)."""

    columns: list[Column] = field(default_factory=list)

    @property
    def statement_type(self) -> StatementType:
        return StatementType.CREATE_TABLE

    def __str__(self) -> str:
        cols = ", ".join(str(c) for c in self.columns)
        return f"CREATE TABLE {self.table_name}({cols})"


@dataclass
class InsertStatement(Statement):
    """INSERT INTO name VALUES(...), strictly positional."""

    values: list[Value] = field(default_factory=list)

    @property
    def statement_type(self) -> StatementType:
        return StatementType.INSERT

    def __str__(self) -> str:
        vals = ", ".join(_render_value(v) for v in self.values)
        return f"INSERT INTO {self.table_name} VALUES({vals})"


@dataclass
class JoinClause:
    """``JOIN table ON left_key = right_key`` as written."""

    table_name: str
    left_key: str
    right_key: str

    def __str__(self) -> str:
        return f"JOIN {self.table_name} ON {self.left_key} = {self.right_key}"


@dataclass
class SelectStatement(Statement):
    """SELECT with optional pairwise join and equality filter.

    ``columns`` is None for ``SELECT *``.
    """

    columns: list[str] | None = None
    join: JoinClause | None = None
    where: WhereClause | None = None

    @property
    def statement_type(self) -> StatementType:
        return StatementType.SELECT

    def __str__(self) -> str:
        cols = "*" if self.columns is None else ", ".join(self.columns)
        text = f"SELECT {cols} FROM {self.table_name}"
        if self.join:
            text += f" {self.join}"
        if self.where:
            text += f" WHERE {self.where}"
        return text


@dataclass
class UpdateStatement(Statement):
    """UPDATE name SET col=val[, ...] WHERE col=value."""

    assignments: dict[str, Value] = field(default_factory=dict)
    where: WhereClause | None = None

    @property
    def statement_type(self) -> StatementType:
        return StatementType.UPDATE

    def __str__(self) -> str:
        assigns = ", ".join(f"{k} = {_render_value(v)}" for k, v in self.assignments.items())
        return f"UPDATE {self.table_name} SET {assigns} WHERE {self.where}"


@dataclass
class DeleteStatement(Statement):
    """DELETE FROM name [WHERE col=value]."""

    where: WhereClause | None = None

    @property
    def statement_type(self) -> StatementType:
        return StatementType.DELETE

    def __str__(self) -> str:
        where = f" WHERE {self.where}" if self.where else ""
        return f"DELETE FROM {self.table_name}{where}"


class StatementTokenizer(Tokenizer):
    """sqlglot tokenizer that also honours backslash-escaped quotes."""

    STRING_ESCAPES = ["'", "\\"]


class _Kind(Enum):
    WORD = "word"
    STRING = "string"
    NUMBER = "number"
    SYMBOL = "symbol"
    OTHER = "other"


@dataclass(frozen=True)
class _Lexeme:
    kind: _Kind
    text: str
    start: int
    end: int  # exclusive

    @property
    def upper(self) -> str:
        return self.text.upper()


_WORD = re.compile(r"\w+")
_WORDS = re.compile(r"\w+(?:\s+\w+)+")

_COMPARISON_OPERATORS = {"<", ">", "<=", ">=", "<>", "!=", "=="}
_COMPARISON_WORDS = {"LIKE", "IN", "IS", "BETWEEN"}
_BOOLEAN_WORDS = {"AND", "OR", "NOT"}
_VALUE_FORBIDDEN_SYMBOLS = _COMPARISON_OPERATORS | {"=", "(", ")"}


class SQLParser:
    """Recursive-descent parser producing tagged statements.

    Example:
        >>> stmt = SQLParser().parse("SELECT name FROM users WHERE id = 1")
        >>> stmt.statement_type
        <StatementType.SELECT: 'select'>
        >>> stmt.where
        WhereClause(column='id', value=1)
    """

    def __init__(self) -> None:
        self._tokenizer = StatementTokenizer()
        self._sql = ""
        self._lexemes: list[_Lexeme] = []
        self._pos = 0

    def parse(self, sql: str) -> Statement:
        """Parse one statement.

        Args:
            sql: Statement text, optionally terminated by ``;``.

        Returns:
            The tagged statement.

        Raises:
            ParseError: If the text is not one of the supported shapes.
        """
        self._sql = sql
        self._lexemes = self._lex(sql)
        self._pos = 0

        if not self._lexemes:
            raise ParseError("Empty SQL statement")

        head = self._peek()
        keyword = head.upper if head.kind is _Kind.WORD else ""
        if keyword == "CREATE":
            statement: Statement = self._parse_create()
        elif keyword == "INSERT":
            statement = self._parse_insert()
        elif keyword == "SELECT":
            statement = self._parse_select()
        elif keyword == "UPDATE":
            statement = self._parse_update()
        elif keyword == "DELETE":
            statement = self._parse_delete()
        else:
            raise ParseError(f"Unsupported SQL command: '{head.text}'")

        if self._at_symbol(";"):
            self._advance()
        if not self._at_end():
            self._fail(f"Unexpected trailing input in {statement.statement_type.value} statement")
        return statement

    # ------------------------------------------------------------------
    # Lexing
    # ------------------------------------------------------------------

    def _lex(self, sql: str) -> list[_Lexeme]:
        try:
            tokens = self._tokenizer.tokenize(sql)
        except TokenError as e:
            raise ParseError(f"Invalid SQL: {e}") from e

        lexemes: list[_Lexeme] = []
        for token in tokens:
            if token.comments:
                raise ParseError(f"Comments are not supported: {sql!r}")

            raw = sql[token.start : token.end + 1]
            if token.token_type == TokenType.STRING:
                lexemes.append(_Lexeme(_Kind.STRING, token.text, token.start, token.end + 1))
            elif token.token_type == TokenType.NUMBER:
                lexemes.append(_Lexeme(_Kind.NUMBER, raw, token.start, token.end + 1))
            elif token.token_type == TokenType.IDENTIFIER:
                lexemes.append(_Lexeme(_Kind.OTHER, raw, token.start, token.end + 1))
            elif _WORD.fullmatch(raw):
                lexemes.append(_Lexeme(_Kind.WORD, raw, token.start, token.end + 1))
            elif _WORDS.fullmatch(raw):
                # multi-word keywords such as PRIMARY KEY
                for match in _WORD.finditer(raw):
                    lexemes.append(
                        _Lexeme(
                            _Kind.WORD,
                            match.group(),
                            token.start + match.start(),
                            token.start + match.end(),
                        )
                    )
            elif _WORD.search(raw):
                lexemes.append(_Lexeme(_Kind.OTHER, raw, token.start, token.end + 1))
            else:
                lexemes.append(_Lexeme(_Kind.SYMBOL, raw, token.start, token.end + 1))
        return lexemes

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def _parse_create(self) -> CreateTableStatement:
        self._expect_keyword("CREATE")
        self._expect_keyword("TABLE", "Invalid CREATE TABLE syntax")
        table = self._expect_name("Invalid CREATE TABLE syntax: expected table name")
        self._expect_symbol("(", "Invalid CREATE TABLE syntax: expected '('")

        columns = [self._parse_column_definition()]
        while self._at_symbol(","):
            self._advance()
            columns.append(self._parse_column_definition())

        self._expect_symbol(")", "Invalid CREATE TABLE syntax: expected ')'")
        return CreateTableStatement(table_name=table, columns=columns)

    def _parse_column_definition(self) -> Column:
        name = self._expect_name("Invalid column definition: expected column name")
        type_token = self._peek()
        if type_token is None or type_token.kind is not _Kind.WORD:
            self._fail(f"Invalid column definition for '{name}': expected type")
        column_type = ColumnType.from_name(type_token.text)
        if column_type is None:
            raise ParseError(f"Unsupported column type: {type_token.text}")
        self._advance()

        primary_key = False
        unique = False
        if self._at_keyword("PRIMARY"):
            self._advance()
            self._expect_keyword("KEY", f"Invalid column definition for '{name}'")
            primary_key = True
        elif self._at_keyword("UNIQUE"):
            self._advance()
            unique = True

        if not (self._at_symbol(",") or self._at_symbol(")")):
            self._fail(f"Invalid column definition for '{name}'")
        return Column(name=name, column_type=column_type, primary_key=primary_key, unique=unique)

    def _parse_insert(self) -> InsertStatement:
        self._expect_keyword("INSERT")
        self._expect_keyword("INTO", "Invalid INSERT syntax")
        table = self._expect_name("Invalid INSERT syntax: expected table name")
        self._expect_keyword("VALUES", "Invalid INSERT syntax: expected VALUES")
        self._expect_symbol("(", "Invalid INSERT syntax: expected '('")

        values = [self._parse_value(stop_symbols={",", ")"})]
        while self._at_symbol(","):
            self._advance()
            values.append(self._parse_value(stop_symbols={",", ")"}))

        self._expect_symbol(")", "Invalid INSERT syntax: expected ')'")
        return InsertStatement(table_name=table, values=values)

    def _parse_select(self) -> SelectStatement:
        self._expect_keyword("SELECT")

        columns: list[str] | None
        if self._at_symbol("*"):
            self._advance()
            columns = None
        else:
            columns = [self._parse_column_ref("Invalid SELECT syntax: expected column list")]
            while self._at_symbol(","):
                self._advance()
                columns.append(self._parse_column_ref("Invalid SELECT syntax: expected column"))

        self._expect_keyword("FROM", "Invalid SELECT syntax: expected FROM")
        table = self._expect_name("Invalid SELECT syntax: expected table name")

        join = None
        if self._at_keyword("INNER") or self._at_keyword("JOIN"):
            join = self._parse_join()

        where = None
        if self._at_keyword("WHERE"):
            where = self._parse_where()

        return SelectStatement(table_name=table, columns=columns, join=join, where=where)

    def _parse_join(self) -> JoinClause:
        if self._at_keyword("INNER"):
            self._advance()
        self._expect_keyword("JOIN", "Invalid JOIN syntax")
        table = self._expect_name("Invalid JOIN syntax: expected table name")
        self._expect_keyword("ON", "Invalid JOIN syntax: expected ON")
        left = self._parse_column_ref("Invalid JOIN condition")
        self._expect_symbol("=", "Invalid JOIN condition: only equality joins are supported")
        right = self._parse_column_ref("Invalid JOIN condition")
        return JoinClause(table_name=table, left_key=left, right_key=right)

    def _parse_update(self) -> UpdateStatement:
        self._expect_keyword("UPDATE")
        table = self._expect_name("Invalid UPDATE syntax: expected table name")
        self._expect_keyword("SET", "Invalid UPDATE syntax: expected SET")

        assignments: dict[str, Value] = {}
        while True:
            column = self._expect_name("Invalid SET clause: expected column name")
            self._expect_symbol("=", "Invalid SET clause")
            assignments[column] = self._parse_value(stop_symbols={","}, stop_words={"WHERE"})
            if not self._at_symbol(","):
                break
            self._advance()

        if not self._at_keyword("WHERE"):
            self._fail("Invalid UPDATE syntax: WHERE clause is required")
        where = self._parse_where()
        return UpdateStatement(table_name=table, assignments=assignments, where=where)

    def _parse_delete(self) -> DeleteStatement:
        self._expect_keyword("DELETE")
        self._expect_keyword("FROM", "Invalid DELETE syntax")
        table = self._expect_name("Invalid DELETE syntax: expected table name")

        where = None
        if self._at_keyword("WHERE"):
            where = self._parse_where()
        return DeleteStatement(table_name=table, where=where)

    # ------------------------------------------------------------------
    # Clauses
    # ------------------------------------------------------------------

    def _parse_where(self) -> WhereClause:
        self._expect_keyword("WHERE")
        column = self._parse_column_ref("Invalid WHERE condition")

        token = self._peek()
        if token is not None and (
            token.text in _COMPARISON_OPERATORS
            or (token.kind is _Kind.WORD and token.upper in _COMPARISON_WORDS)
        ):
            raise ParseError(
                f"Invalid WHERE condition: only equality is supported, found '{token.text}'"
            )
        self._expect_symbol("=", "Invalid WHERE condition")

        value = self._parse_value(stop_symbols=set())
        return WhereClause(column=column, value=value)

    def _parse_column_ref(self, message: str) -> str:
        name = self._expect_name(message)
        if self._at_symbol("."):
            self._advance()
            name = f"{name}.{self._expect_name(message)}"
        return name

    def _parse_value(
        self,
        stop_symbols: set[str],
        stop_words: frozenset[str] | set[str] = frozenset(),
    ) -> Value:
        """Parse one literal up to a terminator.

        Terminators are end of input, ``;``, any of ``stop_symbols`` or
        any of ``stop_words``; they are not consumed.
        """
        stop_symbols = stop_symbols | {";"}
        items: list[_Lexeme] = []
        while not self._at_end():
            token = self._peek()
            if token.kind is _Kind.SYMBOL and token.text in stop_symbols:
                break
            if token.kind is _Kind.WORD and token.upper in stop_words:
                break
            items.append(self._advance())

        if not items:
            self._fail("Missing value")

        first = items[0]
        if len(items) == 1:
            if first.kind is _Kind.STRING:
                return first.text
            if first.kind is _Kind.NUMBER:
                return self._number(first.text)
            if first.kind is _Kind.WORD and first.upper == "NULL":
                return None
        if (
            len(items) == 2
            and first.kind is _Kind.SYMBOL
            and first.text == "-"
            and items[1].kind is _Kind.NUMBER
            and first.end == items[1].start
        ):
            return -self._number(items[1].text)

        if any(item.kind is _Kind.WORD and item.upper in _BOOLEAN_WORDS for item in items):
            raise ParseError(
                f"Boolean operators are not supported: '{self._sql[first.start:items[-1].end]}'"
            )
        for item in items:
            if item.kind is _Kind.SYMBOL and item.text in _VALUE_FORBIDDEN_SYMBOLS:
                raise ParseError(f"Invalid value: '{self._sql[first.start:items[-1].end]}'")

        # anything else is literal text, e.g. a@b.com or foo-bar
        return self._sql[first.start : items[-1].end]

    @staticmethod
    def _number(text: str) -> int | float:
        try:
            return int(text)
        except ValueError:
            pass
        try:
            return float(text)
        except ValueError as e:
            raise ParseError(f"Invalid numeric literal: '{text}'") from e

    # ------------------------------------------------------------------
    # Token helpers
    # ------------------------------------------------------------------

    def _peek(self) -> _Lexeme | None:
        if self._pos < len(self._lexemes):
            return self._lexemes[self._pos]
        return None

    def _advance(self) -> _Lexeme:
        token = self._lexemes[self._pos]
        self._pos += 1
        return token

    def _at_end(self) -> bool:
        return self._pos >= len(self._lexemes)

    def _at_keyword(self, keyword: str) -> bool:
        token = self._peek()
        return token is not None and token.kind is _Kind.WORD and token.upper == keyword

    def _at_symbol(self, symbol: str) -> bool:
        token = self._peek()
        return token is not None and token.kind is _Kind.SYMBOL and token.text == symbol

    def _expect_keyword(self, keyword: str, message: str | None = None) -> None:
        if not self._at_keyword(keyword):
            self._fail(message or f"Expected {keyword}")
        self._advance()

    def _expect_symbol(self, symbol: str, message: str) -> None:
        if not self._at_symbol(symbol):
            self._fail(message)
        self._advance()

    def _expect_name(self, message: str) -> str:
        token = self._peek()
        if token is None or token.kind is not _Kind.WORD:
            self._fail(message)
        self._advance()
        return token.text

    def _fail(self, message: str) -> None:
        token = self._peek()
        if token is None:
            raise ParseError(f"{message} at end of statement: {self._sql.strip()!r}")
        raise ParseError(f"{message} near '{self._sql[token.start:]}'")
