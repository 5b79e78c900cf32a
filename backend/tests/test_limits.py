"""Tests for interpreter runtime limits (steps, call depth, output caps)."""

from backend.rsrb.interpreter import Interpreter


def test_step_limit():
    it = Interpreter()
    it.max_steps = 5
    code = "\n".join(["print!(1)"] * 20)
    res = it.run(code)
    assert res["errors"] and res["errors"]["code"] == "STEP_LIMIT"
    assert res["output"] == "1\n" * 5
    assert "Step limit exceeded" in res["warnings"]


def test_step_limit_from_settings():
    it = Interpreter()
    res = it.run("\n".join(["print!(1)"] * 20), settings={"max_steps": 3})
    assert res["errors"]["code"] == "STEP_LIMIT"
    assert it.max_steps == 3


def test_call_depth_limit_is_not_fatal():
    it = Interpreter()
    it.max_call_depth = 5
    code = (
        "fn forever(n) {\n"
        "    return forever(n)\n"
        "}\n"
        "print!(forever(1))\n"
        "print!(\"after\")\n"
    )
    res = it.run(code)
    assert res["errors"] is None
    assert res["output"] == "\nafter\n"
    assert res["warnings"] == ["Eval error: Call depth limit exceeded in 'forever'"]


def test_call_depth_limit_on_bare_call():
    it = Interpreter()
    it.max_call_depth = 3
    res = it.run("fn again() {\n    again()\n}\nagain()\nprint!(\"ok\")\n")
    assert res["output"] == "ok\n"
    assert res["warnings"] == ["Eval error: Call depth limit exceeded in 'again'"]


def test_output_limit():
    it = Interpreter()
    it.max_output_chars = 10
    code = "\n".join(['print!("abcdefghij")'] * 5)
    res = it.run(code)
    assert res["errors"] and res["errors"]["code"] == "OUTPUT_LIMIT"
    assert res["output"] == "abcdefghij\n"


def test_deeply_nested_recursion_degrades_to_warning():
    # each nested `if` costs extra Python frames per call, so the Python stack
    # runs out before max_call_depth does
    nesting = 14
    code = (
        "fn f(n) {\n"
        + "    if 1 {\n" * nesting
        + "    return f(n)\n"
        + "    }\n" * nesting
        + "}\n"
        + "print!(f(1))\n"
        + "print!(\"after\")\n"
    )
    it = Interpreter()
    res = it.run(code)
    assert res["errors"] is None
    assert res["output"] == "\nafter\n"
    assert "Eval error: Call depth limit exceeded in 'f'" in res["warnings"]


def test_call_depth_above_python_stack_is_not_fatal():
    it = Interpreter()
    it.max_call_depth = 100_000
    res = it.run("fn f(n) {\n    return f(n)\n}\nprint!(f(1))\nprint!(\"after\")\n")
    assert res["errors"] is None
    assert res["output"] == "\nafter\n"
    assert "Eval error: Call depth limit exceeded in 'f'" in res["warnings"]
    # the run leaves no frames behind
    assert it.run("fn g() {\n    return 1\n}\nprint!(g())\n")["output"] == "1\n"


def test_block_nesting_past_python_stack_stops_run():
    import sys

    # each nesting level costs at least two Python frames
    levels = sys.getrecursionlimit() // 2 + 50
    code = 'print!("start")\n' + "if 1 {\n" * levels + "print!(1)\n" + "}\n" * levels
    res = Interpreter().run(code)
    assert res["errors"]["code"] == "NESTING_LIMIT"
    assert res["output"] == "start\n"
