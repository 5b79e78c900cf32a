"""Tests for block extraction and statement classification."""

from backend.rsrb.blocks import LineSource, extract_block, split_top_level
from backend.rsrb.parser import Block, Call, ExprStmt, FnDef, If, Let, Print, Return, parse


def test_extract_block_tracks_nesting():
    src = LineSource('a\n  b {\n  }\n}\nrest\n')
    assert extract_block(src) == 'a\n  b {\n  }\n'
    assert src.next_line() == 'rest\n'


def test_extract_block_unterminated_returns_partial():
    src = LineSource('a\nb\n')
    assert extract_block(src) == 'a\nb\n'
    assert src.next_line() is None


def test_extract_block_pushes_back_text_after_brace():
    src = LineSource('  x }  tail\nnext\n')
    assert extract_block(src) == '  x \n'
    assert src.next_line() == '  tail\n'
    assert src.next_line() == 'next\n'


def test_extract_block_ignores_braces_in_strings():
    src = LineSource('print!("}")\n}\n')
    assert extract_block(src) == 'print!("}")\n'


def test_split_top_level():
    assert split_top_level('f(a, b), "c,d", e', ',') == ['f(a, b)', ' "c,d"', ' e']
    assert split_top_level('let a = 1; print!(";")', ';') == ['let a = 1', ' print!(";")']


def test_classification():
    stmts = parse(
        'let x = 1\n'
        'print!(x)\n'
        'return x\n'
        'return\n'
        'greet("bob")\n'
        'x + 1\n'
    )
    assert stmts == [
        Let('x', '1'),
        Print('x'),
        Return('x'),
        Return(None),
        Call('greet', '"bob"'),
        ExprStmt('x + 1'),
    ]


def test_fn_definition_captures_body_text():
    stmts = parse('fn add(a, , b) {\n    return a + b;\n}\nprint!(add(1, 2))\n')
    fn = stmts[0]
    assert isinstance(fn, FnDef)
    assert fn.name == 'add'
    assert fn.params == ['a', 'b']
    assert fn.body.text == '    return a + b;\n'
    assert stmts[1] == Print('add(1, 2)')


def test_if_with_else_and_without():
    (stmt,) = parse('if x {\n  print!(1)\n}\nelse {\n  print!(2)\n}\n')
    assert isinstance(stmt, If)
    assert stmt.cond == 'x'
    assert stmt.then.statements == [Print('1')]
    assert stmt.otherwise.statements == [Print('2')]

    stmts = parse('if x {\n  print!(1)\n}\nprint!(3)\n')
    assert stmts[0].otherwise is None
    assert stmts[1] == Print('3')


def test_block_statements_are_parsed_once():
    block = Block('print!(1)\n')
    first = block.statements
    assert block.statements is first


def test_blank_and_comment_lines_are_skipped():
    assert parse('\n   \n// note\nprint!(1)\n') == [Print('1')]
