"""
Parser for the Lox reference interpreter

Structure:
- Token stream: lazy tokens from the lexer behind one token of lookahead
- ExpressionParser: operator-precedence (shunting-yard) conversion of infix
  input into postfix (RPN), then a tree rebuilt from the RPN
- StatementParser: print / var / assignment / block / expression statements
  composed on top of ExpressionParser

No backtracking anywhere: every decision is made from the next token.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple, Union

from .lexer_rd import ErrorCallback, TokenStream, token_stream
from .operators import AssignOp, BinaryOp, Operator, UnaryOp, should_reduce
from .token_types import TT, Tok
from .tree import (
    Assignment,
    AssignStatement,
    Binary,
    Block,
    Expr,
    ExpressionStatement,
    Literal,
    PrintStatement,
    Stmt,
    Unary,
    Variable,
    VarDeclaration,
)
from .types import FALSE, NIL, TRUE, LoxReal, LoxString

# ============================================================================
# Errors
# ============================================================================

class ParseError(Exception):
    """Parse error with position info"""
    def __init__(self, message: str, token: Optional[Tok] = None):
        self.message = message
        self.token = token
        super().__init__(
            f"[line {token.line}] Error: {message}" if token else f"Error: {message}"
        )

    @property
    def line(self) -> Optional[int]:
        return self.token.line if self.token else None

# ============================================================================
# Operator lookup
# ============================================================================

UNARY_TOKENS: Dict[TT, UnaryOp] = {
    TT.PLUS: UnaryOp.POSITIVE,
    TT.MINUS: UnaryOp.NEGATIVE,
    TT.BANG: UnaryOp.LOGICAL_NOT,
}

BINARY_TOKENS: Dict[TT, Union[BinaryOp, AssignOp]] = {
    TT.PLUS: BinaryOp.PLUS,
    TT.MINUS: BinaryOp.MINUS,
    TT.STAR: BinaryOp.TIMES,
    TT.SLASH: BinaryOp.DIV,
    TT.EQUAL_EQUAL: BinaryOp.EQUAL_TO,
    TT.BANG_EQUAL: BinaryOp.NOT_EQUAL_TO,
    TT.LESS: BinaryOp.LESS_THAN,
    TT.LESS_EQUAL: BinaryOp.LESS_THAN_OR_EQUAL_TO,
    TT.GREATER: BinaryOp.GREATER_THAN,
    TT.GREATER_EQUAL: BinaryOp.GREATER_THAN_OR_EQUAL_TO,
    TT.OR: BinaryOp.LOGICAL_OR,
    TT.AND: BinaryOp.LOGICAL_AND,
    TT.EQUAL: AssignOp.ASSIGN,
}

# Tokens that end an expression; they are left in the stream.
TERMINATORS = (TT.SEMICOLON, TT.EOF)

# ============================================================================
# RPN items
# ============================================================================

@dataclass(frozen=True)
class RPNOperand:
    node: Expr

@dataclass(frozen=True)
class RPNOperator:
    op: Operator

RPNItem = Union[RPNOperand, RPNOperator]

# ============================================================================
# Expression parser
# ============================================================================

class ExpressionParser:
    """
    Shunting-yard expression parser.

    Precedence (tightest first, lower number binds tighter):
    3.  unary (+, -, !)
    5.  mul (*, /)
    6.  add (+, -)
    9.  relational (<, <=, >, >=)
    10. equality (==, !=)
    14. and
    15. or
    16. assignment (=)

    Operators wait on an explicit stack; operands and reduced operators go to
    the RPN output, which is folded back into a tree once a terminator is
    reached.
    """

    def __init__(self, stream: TokenStream):
        self.stream = stream
        self.operators: List[Tuple[Operator, int]] = []
        self.rpn: List[RPNItem] = []
        self.expect_operand = True

    def parse_expression(self) -> Expr:
        """Consume one expression, leaving the terminating ';' or EOF unconsumed"""
        self.operators = []
        self.rpn = []
        self.expect_operand = True

        while self.stream.has_next():
            tok = self.stream.peek()
            if tok.type in TERMINATORS:
                return self.build_tree(tok)

            self.stream.advance()
            if self.expect_operand:
                self.parse_operand(tok)
            else:
                self.parse_operator(tok)

        raise ParseError("Unexpected end of input when parsing an expression")

    # ========================================================================
    # Operand position
    # ========================================================================

    def parse_operand(self, tok: Tok) -> None:
        unary = UNARY_TOKENS.get(tok.type)
        if unary is not None:
            self.operators.append((unary, unary.precedence))
            return

        match tok.type:
            case TT.LEFT_PAREN:
                self.operators.append((UnaryOp.GROUP, UnaryOp.GROUP.precedence))
                return
            case TT.NUMBER:
                node: Expr = Literal(LoxReal(float(tok.lexeme)))
            case TT.STRING:
                node = Literal(LoxString(tok.literal or ''))
            case TT.TRUE:
                node = Literal(TRUE)
            case TT.FALSE:
                node = Literal(FALSE)
            case TT.NIL:
                node = Literal(NIL)
            case TT.IDENTIFIER:
                node = Variable(tok.lexeme)
            case _:
                raise ParseError(f"Unexpected token '{tok.lexeme}' where an operand was expected", tok)

        self.rpn.append(RPNOperand(node))
        self.expect_operand = False

    # ========================================================================
    # Operator position
    # ========================================================================

    def parse_operator(self, tok: Tok) -> None:
        if tok.type == TT.RIGHT_PAREN:
            self.close_group(tok)
            return

        op = BINARY_TOKENS.get(tok.type)
        if op is None:
            raise ParseError(f"Unexpected token '{tok.lexeme}' where an operator was expected", tok)

        self.push_operator(op, op.precedence)
        self.expect_operand = True

    def push_operator(self, op: Operator, precedence: int) -> None:
        """Emit every stacked operator that binds before `op`, then stack it"""
        while self.operators:
            stacked, stacked_precedence = self.operators[-1]
            if not should_reduce(stacked, stacked_precedence, precedence):
                break
            self.operators.pop()
            self.rpn.append(RPNOperator(stacked))

        self.operators.append((op, precedence))

    def close_group(self, tok: Tok) -> None:
        """Handle ')': emit operators down to and including the matching group"""
        while self.operators and self.operators[-1][0] is not UnaryOp.GROUP:
            stacked, _ = self.operators.pop()
            self.rpn.append(RPNOperator(stacked))

        if not self.operators:
            raise ParseError("Unmatched right parenthesis", tok)

        # The group marker is kept in the output so it shows up in the tree.
        group, _ = self.operators.pop()
        self.rpn.append(RPNOperator(group))

    # ========================================================================
    # Tree building
    # ========================================================================

    def build_tree(self, tok: Tok) -> Expr:
        while self.operators:
            stacked, _ = self.operators.pop()
            if stacked is UnaryOp.GROUP:
                raise ParseError("Unclosed left parenthesis", tok)
            self.rpn.append(RPNOperator(stacked))

        tree = self.make_tree(tok)
        if self.rpn:
            raise ParseError("Malformed expression: operands left over", tok)

        return tree

    def make_tree(self, tok: Tok) -> Expr:
        """Fold the RPN output back into a tree, walking it from the end"""
        if not self.rpn:
            raise ParseError("Malformed expression: missing operand", tok)

        item = self.rpn.pop()
        if isinstance(item, RPNOperand):
            return item.node

        match item.op:
            case BinaryOp() as op:
                right = self.make_tree(tok)
                left = self.make_tree(tok)
                return Binary(op, left, right)
            case UnaryOp() as op:
                return Unary(op, self.make_tree(tok))
            case AssignOp.ASSIGN:
                value = self.make_tree(tok)
                target = self.rpn.pop() if self.rpn else None
                if not (isinstance(target, RPNOperand) and isinstance(target.node, Variable)):
                    raise ParseError("Invalid assignment target: left side of assignment is not a variable", tok)
                return Assignment(target.node.name, value)
            case _:
                raise ParseError(f"Unknown operator {item.op!r}", tok)

# ============================================================================
# Statement parser
# ============================================================================

class StatementParser:
    """
    Statement forms, chosen by the leading token:
    - print <expr> ;
    - var IDENT ;   /   var IDENT = <expr> ;
    - IDENT = <expr> ;
    - { <statement>* }
    - <expr> ;
    """

    def __init__(self, stream: TokenStream):
        self.stream = stream
        self.expressions = ExpressionParser(stream)

    # ========================================================================
    # Token Navigation
    # ========================================================================

    def check(self, *types: TT) -> bool:
        """Check if the next token matches any of the given types"""
        return self.stream.peek().type in types

    def expect(self, token_type: TT, message: Optional[str] = None) -> Tok:
        """Consume token of expected type or raise error"""
        tok = self.stream.advance()
        if tok.type != token_type:
            msg = message or f"Expected {token_type.name} but got {tok.type.name}"
            raise ParseError(msg, tok)
        return tok

    # ========================================================================
    # Statements
    # ========================================================================

    def parse_program(self) -> Iterator[Stmt]:
        """Yield statements lazily until EOF"""
        while self.stream.has_next() and not self.check(TT.EOF):
            yield self.parse_statement()

    def parse_statement(self) -> Stmt:
        if not self.stream.has_next():
            raise ParseError("Unexpected end of input when parsing a statement")

        if self.check(TT.PRINT):
            return self.parse_print_stmt()
        if self.check(TT.VAR):
            return self.parse_var_decl()
        if self.check(TT.LEFT_BRACE):
            return self.parse_block()

        return self.parse_expr_stmt()

    def parse_print_stmt(self) -> Stmt:
        """print <expr> ;"""
        self.expect(TT.PRINT)
        expr = self.expressions.parse_expression()
        self.expect(TT.SEMICOLON, "Expected ';' after value")
        return PrintStatement(expr)

    def parse_var_decl(self) -> Stmt:
        """var IDENT [= <expr>] ;"""
        self.expect(TT.VAR)
        name = self.expect(TT.IDENTIFIER, "Expected variable name after 'var'")

        initializer: Optional[Expr] = None
        if self.check(TT.EQUAL):
            self.stream.advance()
            initializer = self.expressions.parse_expression()

        self.expect(TT.SEMICOLON, "Expected ';' after variable declaration")
        return VarDeclaration(name.lexeme, initializer)

    def parse_block(self) -> Stmt:
        """{ <statement>* }"""
        self.expect(TT.LEFT_BRACE)

        statements: List[Stmt] = []
        while not self.check(TT.RIGHT_BRACE):
            if self.check(TT.EOF):
                raise ParseError("Expected '}' after block", self.stream.peek())
            statements.append(self.parse_statement())

        self.expect(TT.RIGHT_BRACE)
        return Block(tuple(statements))

    def parse_expr_stmt(self) -> Stmt:
        """
        <expr> ;  or  IDENT = <expr> ;

        An assignment at the root of the expression is the assignment
        statement; it is told apart after the fact so one token of lookahead
        is enough.
        """
        expr = self.expressions.parse_expression()
        self.expect(TT.SEMICOLON, "Expected ';' after expression")

        if isinstance(expr, Assignment):
            return AssignStatement(expr.name, expr.value)
        return ExpressionStatement(expr)

# ============================================================================
# Convenience
# ============================================================================

def parse_expression(source: str, on_error: Optional[ErrorCallback] = None) -> Expr:
    """Parse the first expression of source"""
    return ExpressionParser(token_stream(source, on_error)).parse_expression()


def iter_statements(source: str, on_error: Optional[ErrorCallback] = None) -> Iterator[Stmt]:
    """Lazily parse statements of source; parse errors surface as they are reached"""
    return StatementParser(token_stream(source, on_error)).parse_program()


def parse_source(source: str, on_error: Optional[ErrorCallback] = None) -> List[Stmt]:
    """Parse entire program"""
    return list(iter_statements(source, on_error))
