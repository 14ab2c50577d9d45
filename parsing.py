"""
Rascal Programming Language Parser
pyparsing-backed tokenizer feeding a recursive-descent parser that builds
the AST defined in ast_nodes
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import List, Optional

from pyparsing import (
    Keyword, Literal, MatchFirst, ParseException, ParserElement, Regex,
    ZeroOrMore, python_style_comment,
)

import ast_nodes
from ast_nodes import Node, Program
from error_handling import RascalLexError, RascalParseError
from values import value_from_token


# ============================================================================
# TOKENS
# ============================================================================

class TokenKind(Enum):
    """Lexical categories shared by the tokenizer and the parser"""
    INTEGER = auto()
    BOOLEAN = auto()
    ID = auto()
    OPERATOR = auto()
    COMPARISON = auto()
    GROUP_BEGIN = auto()
    GROUP_END = auto()
    PARAM_BEGIN = auto()
    PARAM_END = auto()
    SEPARATOR = auto()
    BEGIN = auto()
    END = auto()
    STATEMENT_END = auto()
    ASSIGN = auto()
    RETURN = auto()
    PRINT = auto()
    IF = auto()
    ELSE = auto()
    WHILE = auto()
    FUNC_DEF = auto()
    MUT_DEF = auto()
    IMUT_DEF = auto()
    EOF = auto()


@dataclass(frozen=True)
class Token:
    """Rascal token with its source offset"""
    kind: TokenKind
    value: str
    position: int = 0

    def __str__(self) -> str:
        return f"{self.kind.name}({self.value!r})"


ADDITIVE_OPERATORS = ("+", "-")
MULTIPLICATIVE_OPERATORS = ("*", "/", "%")
LOGICAL_OPERATORS = ("and", "or", "&&", "||")
RELATIONAL_OPERATORS = ("==", "!=", ">", "<")


# ============================================================================
# TOKENIZER
# ============================================================================

class RascalTokenizer:
    """Turns source text into a list of tokens terminated by EOF"""

    KEYWORDS = {
        'begin': TokenKind.BEGIN,
        'end': TokenKind.END,
        'return': TokenKind.RETURN,
        'print': TokenKind.PRINT,
        'if': TokenKind.IF,
        'else': TokenKind.ELSE,
        'while': TokenKind.WHILE,
        'fn': TokenKind.FUNC_DEF,
        'mut': TokenKind.MUT_DEF,
        'var': TokenKind.MUT_DEF,
        'let': TokenKind.IMUT_DEF,
        'true': TokenKind.BOOLEAN,
        'false': TokenKind.BOOLEAN,
        'and': TokenKind.COMPARISON,
        'or': TokenKind.COMPARISON,
    }

    # Longest symbols first so '==' wins over '='
    SYMBOLS = [
        ('==', TokenKind.COMPARISON),
        ('!=', TokenKind.COMPARISON),
        ('&&', TokenKind.COMPARISON),
        ('||', TokenKind.COMPARISON),
        ('>', TokenKind.COMPARISON),
        ('<', TokenKind.COMPARISON),
        ('=', TokenKind.ASSIGN),
        ('+', TokenKind.OPERATOR),
        ('-', TokenKind.OPERATOR),
        ('*', TokenKind.OPERATOR),
        ('/', TokenKind.OPERATOR),
        ('%', TokenKind.OPERATOR),
        ('(', TokenKind.GROUP_BEGIN),
        (')', TokenKind.GROUP_END),
        ('[', TokenKind.PARAM_BEGIN),
        (']', TokenKind.PARAM_END),
        ('{', TokenKind.BEGIN),
        ('}', TokenKind.END),
        (',', TokenKind.SEPARATOR),
        (';', TokenKind.STATEMENT_END),
    ]

    def __init__(self, debug: bool = False):
        self.debug = debug
        self.grammar = self._setup_grammar()

    def _setup_grammar(self) -> ParserElement:
        """Build the pyparsing element matching one token at a time"""
        alternatives = []
        for word, kind in self.KEYWORDS.items():
            alternatives.append(self._token(Keyword(word), kind))
        for symbol, kind in self.SYMBOLS:
            alternatives.append(self._token(Literal(symbol), kind))
        alternatives.append(self._token(Regex(r'[0-9]+'), TokenKind.INTEGER))
        alternatives.append(self._token(Regex(r'[A-Za-z_][A-Za-z0-9_]*'), TokenKind.ID))

        grammar = ZeroOrMore(MatchFirst(alternatives))
        grammar.ignore(python_style_comment)
        return grammar

    @staticmethod
    def _token(element: ParserElement, kind: TokenKind) -> ParserElement:
        return element.set_parse_action(lambda s, loc, toks: Token(kind, toks[0], loc))

    def tokenize(self, text: str) -> List[Token]:
        """Tokenize Rascal source code"""
        try:
            result = self.grammar.parse_string(text, parse_all=True)
        except ParseException as e:
            character = text[e.loc] if e.loc < len(text) else ''
            raise RascalLexError(character, e.loc) from e

        tokens = list(result)
        tokens.append(Token(TokenKind.EOF, '', len(text)))
        if self.debug:
            print(f"Tokenized {len(tokens)} tokens")
        return tokens


# ============================================================================
# TOKEN STREAM
# ============================================================================

class TokenStream:
    """Lookahead buffer over a token list; the last token is always EOF"""

    def __init__(self, tokens: List[Token]):
        if not tokens or tokens[-1].kind is not TokenKind.EOF:
            tokens = list(tokens) + [Token(TokenKind.EOF, '', tokens[-1].position if tokens else 0)]
        self.tokens = tokens
        self.index = 0

    @property
    def current(self) -> Token:
        return self.tokens[self.index]

    def peek(self, offset: int = 1) -> Token:
        return self.tokens[min(self.index + offset, len(self.tokens) - 1)]

    def check(self, kind: TokenKind, *values: str) -> bool:
        token = self.current
        return token.kind is kind and (not values or token.value in values)

    def consume(self, expected_kind: TokenKind) -> Token:
        """Consume the current token, failing unless it has the expected kind"""
        token = self.current
        if token.kind is not expected_kind:
            raise unexpected_token(expected_kind.name, token)
        if token.kind is not TokenKind.EOF:
            self.index += 1
        return token


def unexpected_token(expected: str, token: Token) -> RascalParseError:
    if token.kind is TokenKind.EOF:
        return RascalParseError(expected, None, token.position)
    return RascalParseError(expected, token, token.position)


# ============================================================================
# PARSER
# ============================================================================

class RascalParser:
    """Recursive-descent parser for Rascal.

    Grammar::

        program        := statement_list EOF
        statement_list := statement (STATEMENT_END statement)*
        statement      := block | RETURN expr | PRINT expr | conditional
                        | loop | define_stmt | ID ASSIGN expr | expr | empty
        block          := BEGIN statement_list END
        conditional    := IF expr BEGIN statement_list (ELSE statement_list)? END
        loop           := WHILE expr block
        define_stmt    := FUNC_DEF ID ASSIGN '[' params ']' block
                        | MUT_DEF ID (ASSIGN expr)?
                        | IMUT_DEF ID ASSIGN expr
        expr           := term ((+|-|and|or) term)*
        term           := factor ((*|/|%|==|!=|>|<) factor)*
        factor         := (+|-) factor | '(' expr ')' | INTEGER | BOOLEAN
                        | ID ('(' args ')')?

    No name resolution or arity checking happens here.
    """

    EMPTY_STATEMENT_FOLLOWERS = (
        TokenKind.STATEMENT_END, TokenKind.END, TokenKind.ELSE, TokenKind.EOF,
    )

    def __init__(self, debug: bool = False):
        self.debug = debug
        self.tokenizer = RascalTokenizer(debug)
        self.stream: Optional[TokenStream] = None

    # -- entry points ---------------------------------------------------

    def parse_string(self, text: str) -> Program:
        """Parse Rascal source code from string"""
        return self.parse_tokens(self.tokenizer.tokenize(text))

    def parse_file(self, filepath: str) -> Program:
        """Parse a Rascal source file"""
        with open(filepath, 'r', encoding='utf-8') as f:
            content = f.read()
        return self.parse_string(content)

    def parse_tokens(self, tokens: List[Token]) -> Program:
        self.stream = TokenStream(tokens)
        return self.parse()

    def parse(self) -> Program:
        statements = self.statement_list()
        self.stream.consume(TokenKind.EOF)
        if self.debug:
            print(f"Parsed {len(statements)} top-level statements")
        return ast_nodes.program(statements)

    # -- statements -----------------------------------------------------

    def statement_list(self) -> List[Node]:
        statements = [self.statement()]
        while self.stream.check(TokenKind.STATEMENT_END):
            self.stream.consume(TokenKind.STATEMENT_END)
            statements.append(self.statement())
        return statements

    def statement(self) -> Node:
        token = self.stream.current
        kind = token.kind

        if kind is TokenKind.BEGIN:
            return self.block()
        if kind is TokenKind.RETURN:
            self.stream.consume(TokenKind.RETURN)
            return ast_nodes.return_(self.expr())
        if kind is TokenKind.PRINT:
            self.stream.consume(TokenKind.PRINT)
            return ast_nodes.print_(self.expr())
        if kind is TokenKind.IF:
            return self.conditional()
        if kind is TokenKind.WHILE:
            return self.loop()
        if kind in (TokenKind.FUNC_DEF, TokenKind.MUT_DEF, TokenKind.IMUT_DEF):
            return self.define_statement()
        if kind is TokenKind.ID and self.stream.peek().kind is TokenKind.ASSIGN:
            return self.assign_statement()
        if kind in self.EMPTY_STATEMENT_FOLLOWERS:
            return ast_nodes.empty()
        return self.expr()

    def block(self) -> Node:
        self.stream.consume(TokenKind.BEGIN)
        statements = self.statement_list()
        self.stream.consume(TokenKind.END)
        return ast_nodes.block(statements)

    def assign_statement(self) -> Node:
        name = self.stream.consume(TokenKind.ID).value
        self.stream.consume(TokenKind.ASSIGN)
        return ast_nodes.reassign(name, self.expr())

    def conditional(self) -> Node:
        self.stream.consume(TokenKind.IF)
        condition = self.expr()
        self.stream.consume(TokenKind.BEGIN)
        then_branch = ast_nodes.block(self.statement_list())
        else_branch = ast_nodes.empty()
        if self.stream.check(TokenKind.ELSE):
            self.stream.consume(TokenKind.ELSE)
            else_branch = ast_nodes.block(self.statement_list())
        self.stream.consume(TokenKind.END)
        return ast_nodes.ifelse(condition, then_branch, else_branch)

    def loop(self) -> Node:
        self.stream.consume(TokenKind.WHILE)
        condition = self.expr()
        return ast_nodes.loop(condition, self.block())

    def define_statement(self) -> Node:
        token = self.stream.current

        if token.kind is TokenKind.FUNC_DEF:
            self.stream.consume(TokenKind.FUNC_DEF)
            name = self.stream.consume(TokenKind.ID).value
            self.stream.consume(TokenKind.ASSIGN)
            self.stream.consume(TokenKind.PARAM_BEGIN)
            params = self.params_list()
            self.stream.consume(TokenKind.PARAM_END)
            return ast_nodes.define_function(name, params, self.block())

        if token.kind is TokenKind.MUT_DEF:
            self.stream.consume(TokenKind.MUT_DEF)
            name = self.stream.consume(TokenKind.ID).value
            if not self.stream.check(TokenKind.ASSIGN):
                return ast_nodes.define_mutable(name, ast_nodes.empty())
            self.stream.consume(TokenKind.ASSIGN)
            return ast_nodes.define_mutable(name, self.expr())

        self.stream.consume(TokenKind.IMUT_DEF)
        name = self.stream.consume(TokenKind.ID).value
        self.stream.consume(TokenKind.ASSIGN)
        return ast_nodes.define_immutable(name, self.expr())

    def params_list(self) -> List[str]:
        params = []
        if self.stream.check(TokenKind.ID):
            params.append(self.stream.consume(TokenKind.ID).value)
            while self.stream.check(TokenKind.SEPARATOR):
                self.stream.consume(TokenKind.SEPARATOR)
                params.append(self.stream.consume(TokenKind.ID).value)
        return params

    def args_list(self) -> List[Node]:
        args = []
        if self.stream.check(TokenKind.GROUP_END):
            return args
        args.append(self.expr())
        while self.stream.check(TokenKind.SEPARATOR):
            self.stream.consume(TokenKind.SEPARATOR)
            args.append(self.expr())
        return args

    # -- expressions ----------------------------------------------------

    def expr(self) -> Node:
        """Lowest precedence: + - and or"""
        result = self.term()
        while True:
            if self.stream.check(TokenKind.OPERATOR, *ADDITIVE_OPERATORS):
                operator = self.stream.consume(TokenKind.OPERATOR).value
                result = ast_nodes.binary(result, operator, self.term())
            elif self.stream.check(TokenKind.COMPARISON, *LOGICAL_OPERATORS):
                operator = self.stream.consume(TokenKind.COMPARISON).value
                result = ast_nodes.comparison(result, operator, self.term())
            else:
                return result

    def term(self) -> Node:
        """Next precedence level: * / % == != > <"""
        result = self.factor()
        while True:
            if self.stream.check(TokenKind.OPERATOR, *MULTIPLICATIVE_OPERATORS):
                operator = self.stream.consume(TokenKind.OPERATOR).value
                result = ast_nodes.binary(result, operator, self.factor())
            elif self.stream.check(TokenKind.COMPARISON, *RELATIONAL_OPERATORS):
                operator = self.stream.consume(TokenKind.COMPARISON).value
                result = ast_nodes.comparison(result, operator, self.factor())
            else:
                return result

    def factor(self) -> Node:
        token = self.stream.current

        if self.stream.check(TokenKind.OPERATOR, *ADDITIVE_OPERATORS):
            self.stream.consume(TokenKind.OPERATOR)
            return ast_nodes.unary(token.value, self.factor())

        if token.kind is TokenKind.GROUP_BEGIN:
            self.stream.consume(TokenKind.GROUP_BEGIN)
            result = self.expr()
            self.stream.consume(TokenKind.GROUP_END)
            return result

        if token.kind in (TokenKind.INTEGER, TokenKind.BOOLEAN):
            self.stream.consume(token.kind)
            return ast_nodes.constant(value_from_token(token.kind.name, token.value))

        if token.kind is TokenKind.ID:
            if self.stream.peek().kind is TokenKind.GROUP_BEGIN:
                return self.function_call()
            self.stream.consume(TokenKind.ID)
            return ast_nodes.identifier(token.value)

        raise unexpected_token("expression", token)

    def function_call(self) -> Node:
        name = self.stream.consume(TokenKind.ID).value
        self.stream.consume(TokenKind.GROUP_BEGIN)
        args = self.args_list()
        self.stream.consume(TokenKind.GROUP_END)
        return ast_nodes.call_function(name, args)


# Factory functions for creating parsers
def create_parser(debug: bool = False) -> RascalParser:
    """Create a Rascal parser"""
    return RascalParser(debug=debug)


def create_debug_parser() -> RascalParser:
    """Create a Rascal parser with debug enabled"""
    return RascalParser(debug=True)


def pretty_print_ast(node: Node, indent: int = 0) -> str:
    """Pretty print an AST node for debugging"""
    result = "  " * indent + ast_nodes.node_label(node) + "\n"
    for child in ast_nodes.children(node):
        result += pretty_print_ast(child, indent + 1)
    return result
