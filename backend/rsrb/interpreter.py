"""rsrb interpreter module.

This module runs rsrb programs: small, line-oriented, brace-delimited scripts
with `let` bindings, `fn` definitions, `if`/`else`, `print!` and `return`.

The interpreter follows a "never crash on semantic errors" policy:

- calling an undefined function records a warning and the call is skipped
- an expression that fails to evaluate records a warning and yields NIL
- an unterminated block simply ends the program early

Only the runtime safety limits (steps, output size) stop a run, and they do so
with a structured error in the result rather than an exception.

Scoping is "copy on call": a function body runs against a copy of the caller's
environment with its parameters bound on top, so nothing a function binds is
visible to the caller afterwards. `if`/`else` branches run against the
environment of the statement that contains them.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, TextIO

from .blocks import split_top_level
from .environment import Environment, FunctionDefinition, FunctionTable
from .evaluator import EvalError, evaluate
from .parser import Block, Call, ExprStmt, FnDef, If, Let, Print, Return, Statement
from .values import NIL, Value, is_truthy, render


@dataclass
class ReturnSignal:
    """Result of a statement run that hit `return`; carries the returned value."""

    value: Value


class RunAborted(Exception):
    """Raised when a runtime safety limit stops the whole run."""

    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


class Interpreter:
    """Top-level rsrb interpreter class.

    Responsibilities:
    - execute rsrb source code,
    - collect printed output and warnings (optionally streaming them),
    - enforce runtime limits (steps, call depth, output size).

    Tunable attributes (defaults are set in __init__):
    - max_steps: statements executed per run before STEP_LIMIT
    - max_call_depth: nested calls before a call is refused with a warning
    - max_output_chars: printed characters per run before OUTPUT_LIMIT

    Args:
        stdout: stream that receives each printed line as soon as it is produced.
        stderr: stream that receives each warning as soon as it is produced.
    """

    SETTINGS = ("max_steps", "max_call_depth", "max_output_chars")

    def __init__(self, stdout: Optional[TextIO] = None, stderr: Optional[TextIO] = None):
        # Safety limits enforced per-run
        self.max_steps = 1_000_000
        self.max_call_depth = 64
        self.max_output_chars = 1_000_000
        self.stdout = stdout
        self.stderr = stderr
        # State of the current (or last) run
        self.env = Environment()
        self.functions: FunctionTable = {}
        self.output_lines: List[str] = []
        self.warnings: List[str] = []
        self._steps = 0
        self._output_chars = 0
        self._call_depth = 0

    # --- Diagnostics ---------------------------------------------------
    def _warn(self, message: str) -> None:
        self.warnings.append(message)
        if self.stderr is not None:
            self.stderr.write(f"warning: {message}\n")
            self.stderr.flush()

    def _emit(self, text: str) -> None:
        self._output_chars += len(text)
        if self._output_chars > self.max_output_chars:
            raise RunAborted("OUTPUT_LIMIT", "Output length limit reached")
        self.output_lines.append(text)
        if self.stdout is not None:
            self.stdout.write(text + "\n")
            self.stdout.flush()

    # --- Expressions ---------------------------------------------------
    def eval_expr(self, expr: str, env: Environment) -> Value:
        """Evaluate `expr`, downgrading evaluation failures to a warning and NIL."""
        try:
            return evaluate(expr, env, call=lambda name, args: self.call_function(name, args, env))
        except EvalError as e:
            self._warn(f"Eval error: {e}")
            return NIL

    # --- Calls ---------------------------------------------------------
    def call_function(self, name: str, arglist: str, env: Environment) -> Value:
        """Call `name` with the raw argument text `arglist` from a frame using `env`.

        Arguments are evaluated in the caller's environment; the body runs in a
        copy of that environment with the parameters bound positionally.
        Extra arguments are ignored and missing ones leave their parameter
        unbound. Returns the value of the `return` that ended the body, or NIL.
        """
        fn = self.functions.get(name)
        if fn is None:
            self._warn(f"Undefined function: {name}")
            return NIL
        if self._call_depth >= self.max_call_depth:
            raise EvalError(f"Call depth limit exceeded in '{name}'")

        args = [a.strip() for a in split_top_level(arglist, ",")] if arglist.strip() else []
        values = [self.eval_expr(a, env) for a in args]
        local = env.copy()
        for param, value in zip(fn.params, values):
            local.set(param, value)

        self._call_depth += 1
        try:
            signal = self.run_block(fn.block, local)
        except RecursionError:
            # the Python stack ran out before max_call_depth was reached
            raise EvalError(f"Call depth limit exceeded in '{name}'")
        finally:
            self._call_depth -= 1
        return signal.value if signal is not None else NIL

    # --- Statements ----------------------------------------------------
    def run_block(self, block: Block, env: Environment) -> Optional[ReturnSignal]:
        """Run a block's statements; stop at the first `return` and hand it back."""
        for stmt in block.statements:
            signal = self.execute(stmt, env)
            if signal is not None:
                return signal
        return None

    def execute(self, stmt: Statement, env: Environment) -> Optional[ReturnSignal]:
        """Execute one statement. Returns a ReturnSignal only for `return`."""
        self._steps += 1
        if self._steps > self.max_steps:
            self._warn("Step limit exceeded")
            raise RunAborted("STEP_LIMIT", "Step limit exceeded")

        if isinstance(stmt, Let):
            env.set(stmt.name, self.eval_expr(stmt.expr, env))
        elif isinstance(stmt, FnDef):
            self.functions[stmt.name] = FunctionDefinition(stmt.name, stmt.params, stmt.body)
        elif isinstance(stmt, If):
            if is_truthy(self.eval_expr(stmt.cond, env)):
                return self.run_block(stmt.then, env)
            if stmt.otherwise is not None:
                return self.run_block(stmt.otherwise, env)
        elif isinstance(stmt, Print):
            self._emit(render(self.eval_expr(stmt.expr, env)))
        elif isinstance(stmt, Return):
            value = self.eval_expr(stmt.expr, env) if stmt.expr else NIL
            return ReturnSignal(value)
        elif isinstance(stmt, Call):
            try:
                self.call_function(stmt.name, stmt.args, env)
            except EvalError as e:
                self._warn(f"Eval error: {e}")
        elif isinstance(stmt, ExprStmt):
            self.eval_expr(stmt.expr, env)
        return None

    # --- Entry point ---------------------------------------------------
    def _apply_settings(self, settings: Dict[str, Any]) -> None:
        for key in self.SETTINGS:
            if key in settings and settings[key] is not None:
                setattr(self, key, int(settings[key]))

    def _reset(self) -> None:
        self.env = Environment()
        self.functions = {}
        self.output_lines = []
        self.warnings = []
        self._steps = 0
        self._output_chars = 0
        self._call_depth = 0

    def run(self, code: str, settings: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Run `code` from its first line with an empty environment and function table.

        Returns a dict with:
            output: everything printed, one line per `print!`
            warnings: diagnostics recorded during the run
            errors: None, or {"code", "message"} when a runtime limit stopped the run
                (STEP_LIMIT, OUTPUT_LIMIT, or NESTING_LIMIT for blocks nested past
                the Python stack)
        """
        self._apply_settings(settings or {})
        self._reset()
        errors: Optional[Dict[str, Any]] = None
        try:
            for stmt in Block(code).statements:
                if self.execute(stmt, self.env) is not None:
                    self._warn("return outside function ignored")
        except RunAborted as e:
            errors = {"code": e.code, "message": e.message}
        except RecursionError:
            # deeply nested blocks outside any call
            self._call_depth = 0
            errors = {"code": "NESTING_LIMIT", "message": "Block nesting too deep"}
        return {
            "output": "\n".join(self.output_lines) + ("\n" if self.output_lines else ""),
            "warnings": list(self.warnings),
            "errors": errors,
        }
