"""Unit tests validating the in-process interpreter behaviour."""

from backend.rsrb.interpreter import Interpreter


def test_let_and_print_sum():
    it = Interpreter()
    res = it.run('let x = 2 + 3;\nprint!(x);\n')
    assert res['output'] == '5\n'
    assert res['errors'] is None
    assert res['warnings'] == []


def test_text_concatenation():
    it = Interpreter()
    res = it.run('let s = "a" + "b";\nprint!(s);')
    assert res['output'] == 'ab\n'


def test_text_plus_integer():
    it = Interpreter()
    res = it.run('let m = "n=" + 7;\nprint!(m);')
    assert res['output'] == 'n=7\n'


def test_function_return_value():
    it = Interpreter()
    code = (
        'fn add(a, b) {\n'
        '    return a + b;\n'
        '}\n'
        'print!(add(2,3));\n'
    )
    res = it.run(code)
    assert res['output'] == '5\n'
    assert res['errors'] is None


def test_if_else_on_integer_condition():
    template = (
        'if {cond} {{\n'
        '    print!("t");\n'
        '}}\n'
        'else {{\n'
        '    print!("f");\n'
        '}}\n'
    )
    assert Interpreter().run(template.format(cond='0'))['output'] == 'f\n'
    assert Interpreter().run(template.format(cond='1'))['output'] == 't\n'
    assert Interpreter().run(template.format(cond='42'))['output'] == 't\n'


def test_undefined_function_warns_and_continues():
    it = Interpreter()
    res = it.run('nope(1)\nprint!("after")\n')
    assert res['output'] == 'after\n'
    assert res['errors'] is None
    assert 'Undefined function: nope' in res['warnings']


def test_function_binding_does_not_leak_to_caller():
    it = Interpreter()
    code = (
        'let x = 1\n'
        'fn change() {\n'
        '    let x = 99\n'
        '    print!(x)\n'
        '}\n'
        'change()\n'
        'print!(x)\n'
    )
    res = it.run(code)
    assert res['output'] == '99\n1\n'
    assert it.env['x'] == 1


def test_return_inside_if_leaves_function():
    it = Interpreter()
    code = (
        'fn pick(n) {\n'
        '    if n {\n'
        '        return "yes"\n'
        '    }\n'
        '    print!("not reached for truthy n")\n'
        '    return "no"\n'
        '}\n'
        'print!(pick(1))\n'
        'print!(pick(0))\n'
    )
    res = it.run(code)
    assert res['output'] == 'yes\nnot reached for truthy n\nno\n'


def test_rerun_is_idempotent():
    code = (
        'let a = 1\n'
        'fn inc(n) {\n'
        '    return n + 1\n'
        '}\n'
        'let a = inc(a)\n'
        'print!(a)\n'
    )
    it = Interpreter()
    first = it.run(code)
    second = it.run(code)
    fresh = Interpreter().run(code)
    assert first == second == fresh
    assert first['output'] == '2\n'


def test_unterminated_block_does_not_crash():
    it = Interpreter()
    code = (
        'print!("before")\n'
        'fn broken() {\n'
        '    print!("inside")\n'
    )
    res = it.run(code)
    assert res['output'] == 'before\n'
    assert res['errors'] is None
    assert 'broken' in it.functions
    assert it.functions['broken'].body == '    print!("inside")\n'


def test_unterminated_if_runs_partial_branch():
    it = Interpreter()
    res = it.run('print!("a")\nif 1 {\n    print!("b")\n')
    assert res['output'] == 'a\nb\n'
    assert res['errors'] is None
