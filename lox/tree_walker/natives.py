"""
Build the primitive namespace: the handful of host functions
that exist in the global environment before any user code runs.
"""
import time
from ..environment import Environment
from .types import NativeError, ARGS
from .values import Native, stringify

def _clock(interpreter, arguments:ARGS) -> float:
	return time.time()

def _print(interpreter, arguments:ARGS):
	interpreter.stdout.write(" ".join(map(stringify, arguments)) + "\n")

def _prompt(interpreter, arguments:ARGS) -> str:
	interpreter.stdout.write(" ".join(map(stringify, arguments)))
	interpreter.stdout.flush()
	line = interpreter.stdin.readline()
	if not line: raise NativeError("No more input.")
	return line.rstrip("\n")

NATIVES = {
	"clock": Native(_clock, 0),
	"print": Native(_print, 0, variadic=True),
	"prompt": Native(_prompt, 0, variadic=True),
}

def define_natives(env:Environment):
	for name, native in NATIVES.items():
		env.define(name, native)
